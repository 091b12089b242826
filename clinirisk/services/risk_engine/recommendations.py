"""Clinical recommendation generation.

Each rule is an indicator conjunction mapped to a fixed, evidence-tagged
template. The final list is sorted by priority descending; Python's sort
is stable so equal priorities keep rule order.
"""
from typing import List

from clinirisk.shared.models import (
    CardiovascularRisk,
    CardiovascularRiskLevel,
    ClinicalRecommendation,
    CompositeRisk,
    DiabetesRisk,
    DiabetesRiskLevel,
    MentalHealthRisk,
    MentalHealthRiskLevel,
    RecommendationCategory,
    RespiratoryRisk,
    RespiratoryRiskLevel,
)

PHQ9_MODERATE_SEVERE = 15
GAD7_MODERATE = 10
STOP_BANG_INTERMEDIATE = 3
MULTIMORBIDITY_PENALTY = 1.5


def generate_recommendations(
    cardiovascular: CardiovascularRisk,
    diabetes: DiabetesRisk,
    mental_health: MentalHealthRisk,
    respiratory: RespiratoryRisk,
    composite: CompositeRisk,
) -> List[ClinicalRecommendation]:
    """Build the prioritized recommendation list."""
    recommendations: List[ClinicalRecommendation] = []

    if cardiovascular.risk_level is not CardiovascularRiskLevel.LOW:
        very_high = cardiovascular.risk_level is CardiovascularRiskLevel.VERY_HIGH
        recommendations.append(ClinicalRecommendation(
            recommendation_id="rec_cv_eval",
            category=RecommendationCategory.IMMEDIATE if very_high else RecommendationCategory.URGENT,
            condition="Cardiovascular risk",
            recommendation="Complete cardiology evaluation with ECG, echocardiogram and lipid panel",
            evidence_level="A",
            timeframe="24 hours" if very_high else "1 week",
            priority=95 if very_high else 80,
            cost_effectiveness="high",
        ))

        if cardiovascular.factors.smoking:
            recommendations.append(ClinicalRecommendation(
                recommendation_id="rec_smoking",
                category=RecommendationCategory.PREVENTIVE,
                condition="Smoking",
                recommendation="Smoking cessation programme (available through SUS)",
                evidence_level="A",
                timeframe="Start within 2 weeks",
                priority=85,
                cost_effectiveness="high",
            ))

    if diabetes.classic_triad.triad_complete:
        recommendations.append(ClinicalRecommendation(
            recommendation_id="rec_dm_diagnosis",
            category=RecommendationCategory.URGENT,
            condition="Suspected diabetes mellitus",
            recommendation="Urgent diagnostic tests: fasting glucose, HbA1c, 2h post-prandial glucose",
            evidence_level="A",
            timeframe="24 hours" if diabetes.risk_level is DiabetesRiskLevel.CRITICAL else "3 days",
            priority=90,
            cost_effectiveness="high",
        ))

    if diabetes.risk_level.is_high_or_worse:
        recommendations.append(ClinicalRecommendation(
            recommendation_id="rec_dm_endo",
            category=RecommendationCategory.URGENT,
            condition="High-risk diabetes",
            recommendation="Urgent endocrinology consultation to start treatment",
            evidence_level="A",
            timeframe="1 week",
            priority=85,
            cost_effectiveness="high",
        ))

    if mental_health.depression_indicators.phq9_score >= PHQ9_MODERATE_SEVERE:
        severe = mental_health.risk_level is MentalHealthRiskLevel.SEVERE
        recommendations.append(ClinicalRecommendation(
            recommendation_id="rec_depression",
            category=RecommendationCategory.URGENT if severe else RecommendationCategory.ROUTINE,
            condition="Moderate to severe depression",
            recommendation="Psychiatric evaluation and treatment (psychotherapy and pharmacotherapy)",
            evidence_level="A",
            timeframe="48 hours" if severe else "1 week",
            priority=80,
            cost_effectiveness="high",
        ))

    if mental_health.anxiety_indicators.gad7_score >= GAD7_MODERATE:
        recommendations.append(ClinicalRecommendation(
            recommendation_id="rec_anxiety",
            category=RecommendationCategory.ROUTINE,
            condition="Anxiety disorder",
            recommendation="Cognitive behavioural therapy (available at CAPS) and pharmacotherapy assessment",
            evidence_level="A",
            timeframe="2 weeks",
            priority=70,
            cost_effectiveness="high",
        ))

    asthma = respiratory.asthma_indicators
    if asthma.wheezing or asthma.shortness_of_breath:
        critical = respiratory.risk_level is RespiratoryRiskLevel.CRITICAL
        recommendations.append(ClinicalRecommendation(
            recommendation_id="rec_asthma",
            category=RecommendationCategory.IMMEDIATE if critical else RecommendationCategory.URGENT,
            condition="Asthma",
            recommendation="Pulmonology evaluation, spirometry and an asthma action plan",
            evidence_level="A",
            timeframe="24 hours" if critical else "1 week",
            priority=75,
            cost_effectiveness="high",
        ))

    if respiratory.sleep_apnea_indicators.stop_bang_score >= STOP_BANG_INTERMEDIATE:
        recommendations.append(ClinicalRecommendation(
            recommendation_id="rec_sleep_apnea",
            category=RecommendationCategory.ROUTINE,
            condition="Suspected sleep apnea",
            recommendation="Polysomnography and CPAP assessment if confirmed",
            evidence_level="A",
            timeframe="1 month",
            priority=60,
            cost_effectiveness="medium",
        ))

    if composite.multiple_conditions_penalty > MULTIMORBIDITY_PENALTY:
        recommendations.append(ClinicalRecommendation(
            recommendation_id="rec_multimorbidity",
            category=RecommendationCategory.URGENT,
            condition="Multiple chronic conditions",
            recommendation="Integrated care programme with a multidisciplinary team (physician, nurse, nutritionist)",
            evidence_level="B",
            timeframe="2 weeks",
            priority=85,
            cost_effectiveness="high",
        ))

    return sorted(recommendations, key=lambda r: r.priority, reverse=True)
