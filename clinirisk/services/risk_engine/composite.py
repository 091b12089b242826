"""Composite risk aggregation across the four clinical domains.

The composite score is the weighted domain sum multiplied by four
independent adjustments: multiple-conditions penalty, pairwise synergy,
age and gender. The resulting escalation decision is a single
EscalationTier so emergency, urgent and routine can never be active at
the same time.
"""
import logging
from typing import List, Optional

from clinirisk.shared.models import (
    CardiovascularRisk,
    CardiovascularRiskLevel,
    CompositeRisk,
    CompositeRiskLevel,
    DiabetesRisk,
    DiabetesRiskLevel,
    EscalationTier,
    Gender,
    MentalHealthRisk,
    MentalHealthRiskLevel,
    PrioritizedCondition,
    RespiratoryRisk,
)
from .config import InteractionFactors, RiskEngineConfig
from .diabetes import DIABETIC_KETOACIDOSIS
from .extractor import ExtractedMedicalData

logger = logging.getLogger(__name__)

URGENT_ESCALATION_HOURS = 2


def count_high_risk_domains(
    cardiovascular: CardiovascularRisk,
    diabetes: DiabetesRisk,
    mental_health: MentalHealthRisk,
    respiratory: RespiratoryRisk,
) -> int:
    return sum(
        risk.risk_level.is_high_or_worse
        for risk in (cardiovascular, diabetes, mental_health, respiratory)
    )


def multiple_conditions_penalty(high_risk_count: int, base: float) -> float:
    """base ** (k - 1) when more than one domain is high-or-worse, else 1."""
    if high_risk_count <= 1:
        return 1.0
    return base ** (high_risk_count - 1)


def synergy_factor(
    cardiovascular: CardiovascularRisk,
    diabetes: DiabetesRisk,
    mental_health: MentalHealthRisk,
    factors: InteractionFactors,
) -> float:
    synergy = 1.0
    if diabetes.risk_level.is_high_or_worse and cardiovascular.risk_level.is_high_or_worse:
        synergy *= factors.diabetes_cardiovascular_synergy
    if mental_health.risk_level.is_high_or_worse and (
        diabetes.risk_level is not DiabetesRiskLevel.LOW
        or cardiovascular.risk_level is not CardiovascularRiskLevel.LOW
    ):
        synergy *= factors.mental_health_chronic_synergy
    return synergy


def age_adjustment(age: Optional[int], factors: InteractionFactors) -> float:
    """Unknown age is neutral."""
    if age is None:
        return 1.0
    if age > factors.elderly_age:
        return factors.elderly_adjustment
    if age > factors.middle_age:
        return factors.middle_age_adjustment
    if age < factors.minor_age:
        return factors.minor_adjustment
    return 1.0


def gender_adjustment(
    gender: Gender,
    cardiovascular: CardiovascularRisk,
    mental_health: MentalHealthRisk,
    factors: InteractionFactors,
) -> float:
    """Unknown gender is neutral."""
    if gender is Gender.MALE and cardiovascular.risk_level is not CardiovascularRiskLevel.LOW:
        return factors.male_cardiovascular_adjustment
    if gender is Gender.FEMALE and mental_health.risk_level is not MentalHealthRiskLevel.LOW:
        return factors.female_mental_health_adjustment
    return 1.0


def classify(score: float, config: RiskEngineConfig) -> CompositeRiskLevel:
    thresholds = config.thresholds
    if score >= thresholds.critical_min:
        return CompositeRiskLevel.CRITICAL
    if score >= thresholds.high_min:
        return CompositeRiskLevel.HIGH
    if score >= thresholds.moderate_min:
        return CompositeRiskLevel.MODERATE
    return CompositeRiskLevel.LOW


def determine_escalation_tier(
    risk_level: CompositeRiskLevel,
    cardiovascular: CardiovascularRisk,
    diabetes: DiabetesRisk,
    mental_health: MentalHealthRisk,
    respiratory: RespiratoryRisk,
) -> EscalationTier:
    """Resolve the single escalation tier.

    Precedence is EMERGENCY > URGENT > ROUTINE > NONE; the first matching
    rule wins.
    """
    domains = (cardiovascular, diabetes, mental_health, respiratory)

    if any(d.emergency_indicators for d in domains) or mental_health.suicide_risk.immediate_intervention:
        return EscalationTier.EMERGENCY

    if risk_level is CompositeRiskLevel.CRITICAL or any(
        d.escalation_required or d.time_to_escalation <= URGENT_ESCALATION_HOURS
        for d in domains
    ):
        return EscalationTier.URGENT

    if risk_level is not CompositeRiskLevel.LOW:
        return EscalationTier.ROUTINE

    return EscalationTier.NONE


def prioritize_conditions(
    cardiovascular: CardiovascularRisk,
    diabetes: DiabetesRisk,
    mental_health: MentalHealthRisk,
    respiratory: RespiratoryRisk,
) -> List[PrioritizedCondition]:
    """Order conditions for treatment.

    Emergencies always rank above chronic high-risk conditions; within a
    tier by priority descending, then by time to escalation ascending.
    """
    conditions: List[PrioritizedCondition] = []

    if cardiovascular.emergency_indicators:
        conditions.append(PrioritizedCondition(
            "Cardiovascular emergency", 100, cardiovascular.time_to_escalation, True))
    if mental_health.suicide_risk.immediate_intervention:
        conditions.append(PrioritizedCondition(
            "Imminent suicide risk", 100, 0, True))
    if DIABETIC_KETOACIDOSIS in diabetes.emergency_indicators:
        conditions.append(PrioritizedCondition(
            "Diabetic ketoacidosis", 95, diabetes.time_to_escalation, True))
    if respiratory.emergency_indicators:
        conditions.append(PrioritizedCondition(
            "Respiratory emergency", 90, respiratory.time_to_escalation, True))

    if cardiovascular.risk_level.is_high_or_worse:
        conditions.append(PrioritizedCondition(
            "High cardiovascular risk", 80, cardiovascular.time_to_escalation, False))
    if diabetes.risk_level.is_high_or_worse:
        conditions.append(PrioritizedCondition(
            "High-risk diabetes", 75, diabetes.time_to_escalation, False))
    if mental_health.risk_level.is_high_or_worse:
        conditions.append(PrioritizedCondition(
            "Severe mental disorder", 70, mental_health.time_to_escalation, False))
    if respiratory.risk_level.is_high_or_worse:
        conditions.append(PrioritizedCondition(
            "Severe respiratory disease", 65, respiratory.time_to_escalation, False))

    return sorted(
        conditions,
        key=lambda c: (not c.emergency, -c.priority, c.time_to_escalation),
    )


def aggregate_composite(
    cardiovascular: CardiovascularRisk,
    diabetes: DiabetesRisk,
    mental_health: MentalHealthRisk,
    respiratory: RespiratoryRisk,
    data: ExtractedMedicalData,
    config: Optional[RiskEngineConfig] = None,
) -> CompositeRisk:
    """Combine the four domain risks into the composite risk.

    Args:
        cardiovascular: Cardiovascular domain risk
        diabetes: Diabetes domain risk
        mental_health: Mental health domain risk
        respiratory: Respiratory domain risk
        data: Extracted medical data (age and gender)
        config: Rule configuration; defaults are used when omitted

    Returns:
        CompositeRisk with every adjustment factor exposed for audit
    """
    config = config or RiskEngineConfig()
    weights = config.weights
    factors = config.interactions

    weighted = (
        cardiovascular.overall_score * weights.cardiovascular
        + diabetes.overall_score * weights.diabetes
        + mental_health.overall_score * weights.mental_health
        + respiratory.overall_score * weights.respiratory
    )

    high_risk_count = count_high_risk_domains(cardiovascular, diabetes, mental_health, respiratory)
    penalty = multiple_conditions_penalty(high_risk_count, factors.multiple_conditions_base)
    synergy = synergy_factor(cardiovascular, diabetes, mental_health, factors)
    age_adj = age_adjustment(data.age, factors)
    gender_adj = gender_adjustment(data.gender, cardiovascular, mental_health, factors)

    overall = weighted * penalty * synergy * age_adj * gender_adj
    risk_level = classify(overall, config)
    tier = determine_escalation_tier(risk_level, cardiovascular, diabetes, mental_health, respiratory)

    logger.debug(
        "COMPOSITE_RISK_CALCULATED",
        extra={
            "weighted_score": round(weighted, 2),
            "overall_score": round(overall, 2),
            "high_risk_domains": high_risk_count,
            "synergy_factor": synergy,
            "risk_level": risk_level.value,
            "escalation_tier": tier.value,
        }
    )

    return CompositeRisk(
        weighted_score=weighted,
        multiple_conditions_penalty=penalty,
        synergy_factor=synergy,
        age_adjustment=age_adj,
        gender_adjustment=gender_adj,
        overall_score=overall,
        risk_level=risk_level,
        high_risk_domain_count=high_risk_count,
        escalation_tier=tier,
        prioritized_conditions=tuple(
            prioritize_conditions(cardiovascular, diabetes, mental_health, respiratory)
        ),
    )
