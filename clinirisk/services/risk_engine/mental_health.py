"""Mental health risk assessment.

PHQ-9 and GAD-7 style indicator scores plus a rule-based suicide risk
tier. Suicidal ideation with a plan short-circuits everything else: the
patient is IMMINENT, SEVERE, and escalated with zero delay.

Sources:
- PHQ-9 (Kroenke et al., 2001), GAD-7 (Spitzer et al., 2006)
- Brazilian Psychiatric Association suicide prevention guideline
"""
import logging
from typing import List, Tuple

from clinirisk.shared.models import (
    AnxietyIndicators,
    DepressionIndicators,
    MentalHealthRisk,
    MentalHealthRiskLevel,
    SuicideRisk,
    SuicideRiskLevel,
)
from .extractor import ExtractedMedicalData

logger = logging.getLogger(__name__)

IMMINENT_SUICIDE_RISK = "IMMINENT_SUICIDE_RISK"

IDEATION_SYMPTOMS = ("pensamento_suicida", "ideacao_suicida")
PLAN_SYMPTOM = "plano_suicida"
PRIOR_ATTEMPT_SYMPTOM = "tentativa_anterior"

PHQ9_POINTS = {
    "persistent_sadness": 3,
    "anhedonia": 3,
    "fatigue": 2,
    "sleep_disturbances": 2,
    "appetite_changes": 2,
    "concentration_problems": 2,
    "guilt": 2,
    "hopelessness": 3,
    "suicidal_ideation": 8,
}

GAD7_POINTS = {
    "excessive_worry": 3,
    "restlessness": 3,
    "fatigue": 2,
    "concentration_difficulty": 3,
    "irritability": 3,
    "muscular_tension": 2,
    "sleep_problems": 2,
}

# (symptom codes, reported label)
SUICIDE_RISK_FACTORS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (IDEATION_SYMPTOMS, "Active suicidal ideation"),
    ((PLAN_SYMPTOM,), "Structured suicide plan"),
    ((PRIOR_ATTEMPT_SYMPTOM,), "Previous suicide attempt"),
    (("desesperanca",), "Severe hopelessness"),
    (("isolamento_social",), "Social isolation"),
    (("abuso_substancia",), "Substance abuse"),
    (("psicose",), "Psychotic symptoms"),
)

PROTECTIVE_FACTORS: Tuple[Tuple[str, str], ...] = (
    ("apoio_familiar", "Family support present"),
    ("religiosidade", "Religiosity or spirituality"),
    ("filhos", "Responsibility for children"),
)

SUICIDE_SCORE_BONUS = {
    SuicideRiskLevel.IMMINENT: 50,
    SuicideRiskLevel.HIGH: 30,
    SuicideRiskLevel.MODERATE: 15,
}

SEVERE_MIN = 40
HIGH_MIN = 25
MODERATE_MIN = 15

ESCALATION_HOURS = {
    MentalHealthRiskLevel.SEVERE: 2,
    MentalHealthRiskLevel.HIGH: 12,
}
DEFAULT_ESCALATION_HOURS = 48


def assess_depression(data: ExtractedMedicalData) -> DepressionIndicators:
    flags = dict(
        persistent_sadness=data.has_symptom("tristeza", "melancolia"),
        anhedonia=data.has_symptom("anedonia", "perda_interesse"),
        fatigue=data.has_symptom("fadiga", "cansaco"),
        sleep_disturbances=data.has_symptom("insonia", "sono_excessivo"),
        appetite_changes=data.has_symptom("perda_apetite", "apetite_aumentado"),
        concentration_problems=data.has_symptom("dificuldade_concentracao", "falta_foco"),
        guilt=data.has_symptom("culpa", "inutilidade"),
        hopelessness=data.has_symptom("desesperanca", "sem_futuro"),
        suicidal_ideation=data.has_symptom(*IDEATION_SYMPTOMS),
    )
    phq9 = sum(points for name, points in PHQ9_POINTS.items() if flags[name])
    return DepressionIndicators(phq9_score=phq9, **flags)


def assess_anxiety(data: ExtractedMedicalData) -> AnxietyIndicators:
    flags = dict(
        excessive_worry=data.has_symptom("preocupacao_excessiva", "ansiedade"),
        restlessness=data.has_symptom("inquietacao", "agitacao"),
        fatigue=data.has_symptom("fadiga", "cansaco"),
        concentration_difficulty=data.has_symptom("dificuldade_concentracao"),
        irritability=data.has_symptom("irritabilidade", "nervosismo"),
        muscular_tension=data.has_symptom("tensao_muscular", "dor_muscular"),
        sleep_problems=data.has_symptom("insonia", "sono_ruim"),
    )
    gad7 = sum(points for name, points in GAD7_POINTS.items() if flags[name])
    return AnxietyIndicators(gad7_score=gad7, **flags)


def assess_suicide_risk(data: ExtractedMedicalData) -> SuicideRisk:
    """Rule-based suicide risk tier.

    Protective factors are reported for the clinician but never lower the
    tier.
    """
    risk_factors: List[str] = [
        label for codes, label in SUICIDE_RISK_FACTORS
        if data.has_symptom(*codes)
    ]
    protective_factors = [
        label for needle, label in PROTECTIVE_FACTORS
        if data.has_risk_factor(needle)
    ]

    ideation = data.has_symptom(*IDEATION_SYMPTOMS)
    plan = data.has_symptom(PLAN_SYMPTOM)

    if plan and ideation:
        risk_level = SuicideRiskLevel.IMMINENT
    elif len(risk_factors) >= 4 or data.has_symptom(PRIOR_ATTEMPT_SYMPTOM):
        risk_level = SuicideRiskLevel.HIGH
    elif len(risk_factors) >= 2 or ideation:
        risk_level = SuicideRiskLevel.MODERATE
    elif len(risk_factors) == 1:
        risk_level = SuicideRiskLevel.LOW
    else:
        risk_level = SuicideRiskLevel.NONE

    return SuicideRisk(
        risk_level=risk_level,
        risk_factors=tuple(risk_factors),
        protective_factors=tuple(protective_factors),
        immediate_intervention=risk_level is SuicideRiskLevel.IMMINENT,
    )


def classify(score: float, suicide_level: SuicideRiskLevel) -> MentalHealthRiskLevel:
    if score >= SEVERE_MIN or suicide_level is SuicideRiskLevel.IMMINENT:
        return MentalHealthRiskLevel.SEVERE
    if score >= HIGH_MIN or suicide_level is SuicideRiskLevel.HIGH:
        return MentalHealthRiskLevel.HIGH
    if score >= MODERATE_MIN or suicide_level is SuicideRiskLevel.MODERATE:
        return MentalHealthRiskLevel.MODERATE
    return MentalHealthRiskLevel.LOW


def assess_mental_health(data: ExtractedMedicalData) -> MentalHealthRisk:
    """Assess depression, anxiety and suicide risk.

    Args:
        data: Extracted medical data for one questionnaire

    Returns:
        MentalHealthRisk with time_to_escalation 0 when immediate
        intervention is required
    """
    depression = assess_depression(data)
    anxiety = assess_anxiety(data)
    suicide = assess_suicide_risk(data)

    score = (
        depression.phq9_score
        + anxiety.gad7_score
        + SUICIDE_SCORE_BONUS.get(suicide.risk_level, 0)
    )
    risk_level = classify(score, suicide.risk_level)

    if suicide.immediate_intervention:
        emergencies: Tuple[str, ...] = (IMMINENT_SUICIDE_RISK,)
        time_to_escalation = 0
        logger.critical(
            "IMMINENT_SUICIDE_RISK_DETECTED",
            extra={
                "risk_factor_count": len(suicide.risk_factors),
                "protective_factor_count": len(suicide.protective_factors),
            }
        )
    else:
        emergencies = ()
        time_to_escalation = ESCALATION_HOURS.get(risk_level, DEFAULT_ESCALATION_HOURS)

    return MentalHealthRisk(
        overall_score=score,
        risk_level=risk_level,
        depression_indicators=depression,
        anxiety_indicators=anxiety,
        suicide_risk=suicide,
        emergency_indicators=emergencies,
        escalation_required=(
            suicide.immediate_intervention or risk_level is MentalHealthRiskLevel.SEVERE
        ),
        time_to_escalation=time_to_escalation,
    )
