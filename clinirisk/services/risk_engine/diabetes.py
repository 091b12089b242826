"""Diabetes risk assessment.

Classic triad plus additional factors, with independent 0-100 estimates
for diabetic ketoacidosis and ketosis.

Sources:
- SBD Guidelines 2023
- ADA Standards of Care 2024
"""
import logging
from typing import Tuple

from clinirisk.shared.models import (
    ClassicTriad,
    DiabetesFactors,
    DiabetesRisk,
    DiabetesRiskLevel,
)
from .extractor import ExtractedMedicalData

logger = logging.getLogger(__name__)

DIABETIC_KETOACIDOSIS = "DIABETIC_KETOACIDOSIS_RISK"
KETOSIS_DETECTED = "KETOSIS_DETECTED"

FACTOR_POINTS = {
    "weight_loss": 15,
    "fatigue": 10,
    "blurred_vision": 10,
    "slow_healing": 8,
    "frequent_infections": 8,
    "family_history": 12,
    "obesity": 10,
}

AGE_RISK_MIN = 45
AGE_RISK_POINTS = 5
ELDERLY_RISK_MIN = 65
ELDERLY_RISK_POINTS = 10

MODERATE_MIN = 25
HIGH_MIN = 40
CRITICAL_MIN = 60

RISK_CAP = 100.0

KETOSIS_SYMPTOMS = ("cetose", "halito_cetonico")
NAUSEA_SYMPTOMS = ("nausea", "vomito")
MENTAL_STATUS_SYMPTOMS = ("confusao_mental", "letargia")
KUSSMAUL_SYMPTOMS = ("respiracao_profunda", "hiperventilacao")


def extract_triad(data: ExtractedMedicalData) -> ClassicTriad:
    return ClassicTriad.from_symptoms(
        polydipsia=data.has_symptom("sede_excessiva", "polidipsia"),
        polyphagia=data.has_symptom("fome_excessiva", "polifagia"),
        polyuria=data.has_symptom("urina_frequente", "poliuria"),
    )


def extract_factors(data: ExtractedMedicalData) -> DiabetesFactors:
    return DiabetesFactors(
        weight_loss=data.has_symptom("perda_peso", "emagrecimento"),
        fatigue=data.has_symptom("fadiga", "cansaco"),
        blurred_vision=data.has_symptom("visao_turva", "visao_embacada"),
        slow_healing=data.has_symptom("cicatrizacao_lenta", "feridas_demoradas"),
        frequent_infections=data.has_symptom("infeccoes_frequentes"),
        family_history=data.has_risk_factor_with_all("diabetes", "famil"),
        obesity=data.has_risk_factor("obesidade", "sobrepeso"),
        age=data.age,
        gestational_diabetes=data.has_risk_factor("diabetes_gestacional"),
    )


def factor_score(factors: DiabetesFactors) -> int:
    score = sum(
        points for name, points in FACTOR_POINTS.items()
        if getattr(factors, name)
    )
    if factors.age is not None:
        if factors.age > AGE_RISK_MIN:
            score += AGE_RISK_POINTS
        if factors.age > ELDERLY_RISK_MIN:
            score += ELDERLY_RISK_POINTS
    return score


def calculate_dka_risk(
    data: ExtractedMedicalData,
    triad: ClassicTriad,
    factors: DiabetesFactors,
) -> float:
    """Diabetic ketoacidosis likelihood on a 0-100 scale."""
    if triad.triad_complete:
        risk = 40.0
        if factors.weight_loss:
            risk += 30
    else:
        risk = triad.triad_score / 3

    if data.has_symptom(*KETOSIS_SYMPTOMS):
        risk += 20
    if data.has_symptom(*NAUSEA_SYMPTOMS):
        risk += 15
    if data.has_symptom("dor_abdominal"):
        risk += 10
    if data.has_symptom(*MENTAL_STATUS_SYMPTOMS):
        risk += 15
    if data.has_symptom(*KUSSMAUL_SYMPTOMS):
        risk += 20

    return min(risk, RISK_CAP)


def calculate_ketosis_risk(data: ExtractedMedicalData) -> float:
    """Ketosis likelihood on a 0-100 scale."""
    risk = 0.0
    if data.has_symptom("cetose"):
        risk += 50
    if data.has_symptom("halito_cetonico", "halito_frutal"):
        risk += 40
    if data.has_symptom(*NAUSEA_SYMPTOMS):
        risk += 15
    if data.has_symptom("dor_abdominal"):
        risk += 10
    if data.has_symptom("desidratacao"):
        risk += 20
    if data.has_symptom("confusao_mental"):
        risk += 15
    return min(risk, RISK_CAP)


def detect_emergencies(
    data: ExtractedMedicalData,
    triad: ClassicTriad,
    factors: DiabetesFactors,
) -> Tuple[str, ...]:
    indicators = []
    if triad.triad_complete and factors.weight_loss:
        indicators.append(DIABETIC_KETOACIDOSIS)
    if data.has_symptom(*KETOSIS_SYMPTOMS):
        indicators.append(KETOSIS_DETECTED)
    return tuple(indicators)


def classify(score: float) -> DiabetesRiskLevel:
    if score >= CRITICAL_MIN:
        return DiabetesRiskLevel.CRITICAL
    if score >= HIGH_MIN:
        return DiabetesRiskLevel.HIGH
    if score >= MODERATE_MIN:
        return DiabetesRiskLevel.MODERATE
    return DiabetesRiskLevel.LOW


def escalation_hours(risk_level: DiabetesRiskLevel, has_emergency: bool) -> float:
    if has_emergency:
        return 2
    if risk_level is DiabetesRiskLevel.CRITICAL:
        return 12
    if risk_level is DiabetesRiskLevel.HIGH:
        return 24
    return 72


def assess_diabetes(data: ExtractedMedicalData) -> DiabetesRisk:
    """Assess diabetes risk from the classic triad and additional factors."""
    triad = extract_triad(data)
    factors = extract_factors(data)
    score = triad.triad_score + factor_score(factors)

    emergencies = detect_emergencies(data, triad, factors)
    risk_level = DiabetesRiskLevel.CRITICAL if emergencies else classify(score)

    if emergencies:
        logger.warning(
            "DIABETES_EMERGENCY_PATTERN",
            extra={
                "indicators": list(emergencies),
                "score": score,
            }
        )

    return DiabetesRisk(
        overall_score=score,
        risk_level=risk_level,
        classic_triad=triad,
        additional_factors=factors,
        ketosis_risk=calculate_ketosis_risk(data),
        dka_risk=calculate_dka_risk(data, triad, factors),
        emergency_indicators=emergencies,
        escalation_required=bool(emergencies),
        time_to_escalation=escalation_hours(risk_level, bool(emergencies)),
    )
