"""Cardiovascular risk assessment.

Simplified Framingham points plus acute symptom points. Acute coronary
syndrome and cardiac syncope patterns override the score.

Sources:
- SBC Cardiovascular Prevention Guideline 2019
- AHA/ACC Chest Pain Guideline 2021
"""
import logging
from typing import List, Optional, Tuple

from clinirisk.shared.models import (
    CardiovascularFactors,
    CardiovascularRisk,
    CardiovascularRiskLevel,
    Gender,
)
from .extractor import ExtractedMedicalData

logger = logging.getLogger(__name__)

ACUTE_CORONARY_SYNDROME = "ACUTE_CORONARY_SYNDROME_SUSPECTED"
CARDIAC_SYNCOPE = "CARDIAC_SYNCOPE_SUSPECTED"

# (minimum age, male points); female bands are one point lower
FRAMINGHAM_AGE_BANDS: Tuple[Tuple[int, int], ...] = ((70, 8), (60, 6), (50, 4), (40, 2))

RISK_FACTOR_POINTS = {
    "smoking": 4,
    "diabetes": 3,
    "hypertension": 3,
    "cholesterol": 2,
    "family_history": 2,
}

SYMPTOM_POINTS = {
    "chest_pain": 15,
    "shortness_of_breath": 10,
    "palpitations": 5,
    "syncope": 20,
}

INTERMEDIATE_MIN = 10
HIGH_MIN = 15
VERY_HIGH_MIN = 20

EMERGENCY_ESCALATION_HOURS = 0.5
VERY_HIGH_ESCALATION_HOURS = 2
DEFAULT_ESCALATION_HOURS = 12


def extract_factors(data: ExtractedMedicalData) -> CardiovascularFactors:
    return CardiovascularFactors(
        chest_pain=data.has_symptom("dor_peito", "dor_toracica"),
        shortness_of_breath=data.has_symptom("falta_ar", "dispneia"),
        palpitations=data.has_symptom("palpitacoes", "batedeira"),
        syncope=data.has_symptom("desmaio", "sincope"),
        family_history=data.has_risk_factor_with_all("familiar", "cardiaco"),
        hypertension=data.has_finding("hipertensao", "pressao_alta"),
        diabetes=data.has_finding("diabetes"),
        smoking=data.has_risk_factor("fumante", "tabagismo"),
        cholesterol=data.has_risk_factor("colesterol"),
        age=data.age,
        gender=data.gender,
    )


def framingham_age_points(age: Optional[int], gender: Gender) -> int:
    """Age/gender band points. Unknown gender uses the male bands."""
    if age is None:
        return 0
    for min_age, male_points in FRAMINGHAM_AGE_BANDS:
        if age >= min_age:
            if gender is Gender.FEMALE:
                return male_points - 1
            return male_points
    return 0


def calculate_framingham_score(factors: CardiovascularFactors) -> int:
    score = framingham_age_points(factors.age, factors.gender)
    for name, points in RISK_FACTOR_POINTS.items():
        if getattr(factors, name):
            score += points
    return score


def symptom_score(factors: CardiovascularFactors) -> int:
    return sum(
        points for name, points in SYMPTOM_POINTS.items()
        if getattr(factors, name)
    )


def detect_emergencies(factors: CardiovascularFactors) -> Tuple[str, ...]:
    indicators = []
    if factors.chest_pain and factors.shortness_of_breath:
        indicators.append(ACUTE_CORONARY_SYNDROME)
    if factors.syncope and factors.chest_pain:
        indicators.append(CARDIAC_SYNCOPE)
    return tuple(indicators)


def classify(score: float) -> CardiovascularRiskLevel:
    if score >= VERY_HIGH_MIN:
        return CardiovascularRiskLevel.VERY_HIGH
    if score >= HIGH_MIN:
        return CardiovascularRiskLevel.HIGH
    if score >= INTERMEDIATE_MIN:
        return CardiovascularRiskLevel.INTERMEDIATE
    return CardiovascularRiskLevel.LOW


def build_recommendations(
    factors: CardiovascularFactors,
    risk_level: CardiovascularRiskLevel,
) -> Tuple[str, ...]:
    recommendations: List[str] = []

    if risk_level is CardiovascularRiskLevel.VERY_HIGH:
        recommendations.extend([
            "Urgent cardiology evaluation at an emergency department",
            "Immediate 12-lead electrocardiogram",
            "Cardiac markers: troponin, BNP and D-dimer",
        ])
    elif risk_level is CardiovascularRiskLevel.HIGH:
        recommendations.extend([
            "Cardiology appointment within 48 hours",
            "Electrocardiogram and echocardiogram within one week",
            "Full lipid panel",
        ])

    if factors.hypertension:
        recommendations.append("24-hour ambulatory blood pressure monitoring")
        recommendations.append("Review of antihypertensive therapy")

    if factors.smoking:
        recommendations.append("Smoking cessation programme")

    if factors.diabetes and risk_level is not CardiovascularRiskLevel.LOW:
        recommendations.append("Strict glycaemic control (HbA1c < 7%)")

    return tuple(recommendations)


def assess_cardiovascular(data: ExtractedMedicalData) -> CardiovascularRisk:
    """Assess cardiovascular risk.

    Args:
        data: Extracted medical data for one questionnaire

    Returns:
        CardiovascularRisk; any emergency indicator forces VERY_HIGH with a
        30 minute escalation window
    """
    factors = extract_factors(data)
    framingham = calculate_framingham_score(factors)
    score = framingham + symptom_score(factors)

    emergencies = detect_emergencies(factors)
    if emergencies:
        risk_level = CardiovascularRiskLevel.VERY_HIGH
        time_to_escalation = EMERGENCY_ESCALATION_HOURS
        escalation_required = True
    else:
        risk_level = classify(score)
        escalation_required = risk_level is CardiovascularRiskLevel.VERY_HIGH
        time_to_escalation = (
            VERY_HIGH_ESCALATION_HOURS if escalation_required else DEFAULT_ESCALATION_HOURS
        )

    if emergencies:
        logger.warning(
            "CARDIOVASCULAR_EMERGENCY_PATTERN",
            extra={
                "indicators": list(emergencies),
                "score": score,
            }
        )

    return CardiovascularRisk(
        overall_score=score,
        risk_level=risk_level,
        factors=factors,
        framingham_score=framingham,
        emergency_indicators=emergencies,
        recommendations=build_recommendations(factors, risk_level),
        escalation_required=escalation_required,
        time_to_escalation=time_to_escalation,
    )
