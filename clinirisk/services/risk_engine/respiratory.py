"""Respiratory risk assessment.

Three independent indicator sets (asthma, COPD, sleep apnea) whose
sub-scores are summed. Severe asthma and COPD exacerbations override the
score-derived level.

Sources:
- GINA 2023 (asthma), GOLD 2024 (COPD)
- STOP-BANG (Chung et al., 2008), Berlin Questionnaire (Netzer et al., 1999)
"""
import logging
from typing import Optional, Tuple

from clinirisk.shared.models import (
    AsthmaIndicators,
    CopdIndicators,
    Gender,
    RespiratoryRisk,
    RespiratoryRiskLevel,
    SleepApneaIndicators,
)
from .extractor import ExtractedMedicalData

logger = logging.getLogger(__name__)

SEVERE_ASTHMA_EXACERBATION = "SEVERE_ASTHMA_EXACERBATION"
COPD_EXACERBATION = "COPD_EXACERBATION"

DYSPNEA_SYMPTOMS = ("falta_ar", "dispneia")

ASTHMA_POINTS = {
    "wheezing": 8,
    "shortness_of_breath": 10,
    "chest_tightness": 6,
    "coughing": 4,
    "nighttime_symptoms": 8,
    "exercise_triggered": 5,
    "allergen_triggered": 3,
    "peak_flow_reduction": 10,
}

COPD_POINTS = {
    "chronic_cough": 6,
    "sputum_production": 6,
    "dyspnea": 10,
    "smoking_history": 12,
    "occupational_exposure": 6,
}
COPD_AGE_MIN = 40
COPD_AGE_POINTS = 5
COPD_ELDER_MIN = 60
COPD_ELDER_POINTS = 8

BERLIN_BMI_MIN = 30.0
STOP_BANG_BMI_MIN = 35.0
STOP_BANG_AGE_MIN = 50
STOP_BANG_NECK_MIN = 40.0
LARGE_NECK_MIN = 43.0

MODERATE_MIN = 15
HIGH_MIN = 25
CRITICAL_MIN = 40

EMERGENCY_ESCALATION_HOURS = 0.5
CRITICAL_ESCALATION_HOURS = 2
DEFAULT_ESCALATION_HOURS = 12


def _above(value: Optional[float], threshold: float) -> bool:
    return value is not None and value > threshold


def assess_asthma(data: ExtractedMedicalData) -> AsthmaIndicators:
    return AsthmaIndicators(
        wheezing=data.has_symptom("chiado", "sibilo"),
        shortness_of_breath=data.has_symptom(*DYSPNEA_SYMPTOMS),
        chest_tightness=data.has_symptom("aperto_peito", "opressao_toracica"),
        coughing=data.has_symptom("tosse"),
        nighttime_symptoms=data.has_symptom("sintomas_noturnos", "tosse_noturna"),
        exercise_triggered=data.has_symptom("dispneia_esforco", "sintomas_exercicio"),
        allergen_triggered=data.has_symptom("alergia", "gatilhos_alergicos"),
        peak_flow_reduction=data.has_risk_factor("pico_fluxo_reduzido"),
    )


def assess_copd(data: ExtractedMedicalData) -> CopdIndicators:
    return CopdIndicators(
        chronic_cough=data.has_symptom("tosse_cronica"),
        sputum_production=data.has_symptom("expectoracao", "catarro"),
        dyspnea=data.has_symptom(*DYSPNEA_SYMPTOMS),
        smoking_history=data.has_risk_factor("fumante", "ex-fumante", "tabagismo"),
        age=data.age,
        occupational_exposure=data.has_risk_factor("exposicao_ocupacional", "poeira", "quimicos"),
    )


def assess_sleep_apnea(data: ExtractedMedicalData) -> SleepApneaIndicators:
    """Berlin (0-5) and STOP-BANG (0-8) counts.

    Missing BMI, neck circumference or age never add points.
    """
    bmi = data.numeric_response("imc")
    neck = data.numeric_response("pescoco", "circunferencia")

    snoring = data.has_symptom("ronco")
    pauses = data.has_symptom("apneia", "pausas_respiratorias")
    sleepiness = data.has_symptom("sonolencia_diurna", "cansaco_diurno")
    hypertension = data.has_finding("hipertensao", "pressao_alta")

    berlin = sum((
        snoring,
        pauses,
        sleepiness,
        _above(bmi, BERLIN_BMI_MIN),
        hypertension,
    ))
    stop_bang = sum((
        snoring,
        sleepiness,
        pauses,
        _above(bmi, STOP_BANG_BMI_MIN),
        data.age is not None and data.age > STOP_BANG_AGE_MIN,
        _above(neck, STOP_BANG_NECK_MIN),
        data.gender is Gender.MALE,
        hypertension,
    ))

    return SleepApneaIndicators(
        snoring=snoring,
        breathing_pauses=pauses,
        daytime_sleepiness=sleepiness,
        morning_headaches=data.has_symptom("cefaleia_matinal", "dor_cabeca_manha"),
        bmi=bmi,
        neck_circumference=neck,
        hypertension=hypertension,
        berlin_score=berlin,
        stop_bang_score=stop_bang,
    )


def asthma_score(indicators: AsthmaIndicators) -> int:
    return sum(points for name, points in ASTHMA_POINTS.items() if getattr(indicators, name))


def copd_score(indicators: CopdIndicators) -> int:
    score = sum(points for name, points in COPD_POINTS.items() if getattr(indicators, name))
    if indicators.age is not None:
        if indicators.age > COPD_AGE_MIN:
            score += COPD_AGE_POINTS
        if indicators.age > COPD_ELDER_MIN:
            score += COPD_ELDER_POINTS
    return score


def sleep_apnea_score(indicators: SleepApneaIndicators) -> int:
    score = indicators.stop_bang_score * 5
    if indicators.berlin_score >= 2:
        score += 10
    if _above(indicators.bmi, STOP_BANG_BMI_MIN):
        score += 8
    if _above(indicators.neck_circumference, LARGE_NECK_MIN):
        score += 5
    return score


def detect_emergencies(
    data: ExtractedMedicalData,
    asthma: AsthmaIndicators,
    copd: CopdIndicators,
) -> Tuple[str, ...]:
    indicators = []
    if asthma.shortness_of_breath and asthma.wheezing and data.has_symptom("dificuldade_falar"):
        indicators.append(SEVERE_ASTHMA_EXACERBATION)
    if copd.dyspnea and copd.sputum_production and data.has_symptom("febre"):
        indicators.append(COPD_EXACERBATION)
    return tuple(indicators)


def classify(score: float) -> RespiratoryRiskLevel:
    if score >= CRITICAL_MIN:
        return RespiratoryRiskLevel.CRITICAL
    if score >= HIGH_MIN:
        return RespiratoryRiskLevel.HIGH
    if score >= MODERATE_MIN:
        return RespiratoryRiskLevel.MODERATE
    return RespiratoryRiskLevel.LOW


def assess_respiratory(data: ExtractedMedicalData) -> RespiratoryRisk:
    """Assess asthma, COPD and sleep apnea risk."""
    asthma = assess_asthma(data)
    copd = assess_copd(data)
    sleep_apnea = assess_sleep_apnea(data)

    scores = (asthma_score(asthma), copd_score(copd), sleep_apnea_score(sleep_apnea))
    score = sum(scores)

    emergencies = detect_emergencies(data, asthma, copd)
    if emergencies:
        risk_level = RespiratoryRiskLevel.CRITICAL
        time_to_escalation = EMERGENCY_ESCALATION_HOURS
        logger.warning(
            "RESPIRATORY_EMERGENCY_PATTERN",
            extra={
                "indicators": list(emergencies),
                "score": score,
            }
        )
    else:
        risk_level = classify(score)
        time_to_escalation = (
            CRITICAL_ESCALATION_HOURS
            if risk_level is RespiratoryRiskLevel.CRITICAL
            else DEFAULT_ESCALATION_HOURS
        )

    return RespiratoryRisk(
        overall_score=score,
        risk_level=risk_level,
        asthma_indicators=asthma,
        copd_indicators=copd,
        sleep_apnea_indicators=sleep_apnea,
        asthma_score=scores[0],
        copd_score=scores[1],
        sleep_apnea_score=scores[2],
        emergency_indicators=emergencies,
        escalation_required=bool(emergencies) or risk_level is RespiratoryRiskLevel.CRITICAL,
        time_to_escalation=time_to_escalation,
    )
