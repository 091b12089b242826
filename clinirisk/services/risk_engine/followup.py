"""Follow-up scheduling into five time horizons."""
from typing import List

from clinirisk.shared.models import (
    CardiovascularRisk,
    CardiovascularRiskLevel,
    CompositeRisk,
    DiabetesRisk,
    DiabetesRiskLevel,
    FollowupItem,
    FollowupSchedule,
    FollowupUrgency,
    MentalHealthRisk,
    RespiratoryRisk,
)
from .diabetes import DIABETIC_KETOACIDOSIS
from .respiratory import COPD_EXACERBATION, SEVERE_ASTHMA_EXACERBATION
from .recommendations import STOP_BANG_INTERMEDIATE

# Public health system (SUS) primary care is free at point of use
SUS_COST = 0.0


def create_followup_schedule(
    cardiovascular: CardiovascularRisk,
    diabetes: DiabetesRisk,
    mental_health: MentalHealthRisk,
    respiratory: RespiratoryRisk,
    composite: CompositeRisk,
) -> FollowupSchedule:
    """Bucket follow-up actions by how soon they must happen.

    Args:
        cardiovascular: Cardiovascular domain risk
        diabetes: Diabetes domain risk
        mental_health: Mental health domain risk
        respiratory: Respiratory domain risk
        composite: Composite risk (routine tier drives family medicine follow-up)

    Returns:
        FollowupSchedule with items in rule order within each bucket
    """
    immediate: List[FollowupItem] = []
    within_24h: List[FollowupItem] = []
    within_1_week: List[FollowupItem] = []
    within_1_month: List[FollowupItem] = []
    routine: List[FollowupItem] = []

    # Emergencies
    if cardiovascular.emergency_indicators:
        immediate.append(FollowupItem(
            action="Emergency department evaluation for suspected acute cardiac event",
            specialist_type="Cardiologist",
            urgency=FollowupUrgency.STAT,
            automated=True,
        ))
    if mental_health.suicide_risk.immediate_intervention:
        immediate.append(FollowupItem(
            action="Emergency psychiatric intervention for suicide risk",
            specialist_type="Psychiatrist",
            urgency=FollowupUrgency.STAT,
            automated=True,
        ))
    if SEVERE_ASTHMA_EXACERBATION in respiratory.emergency_indicators:
        immediate.append(FollowupItem(
            action="Emergency care for severe asthma exacerbation",
            specialist_type="Pulmonologist/Emergency physician",
            urgency=FollowupUrgency.STAT,
            automated=True,
        ))
    if DIABETIC_KETOACIDOSIS in diabetes.emergency_indicators:
        immediate.append(FollowupItem(
            action="Emergency department evaluation for diabetic ketoacidosis",
            specialist_type="Emergency physician",
            urgency=FollowupUrgency.STAT,
            automated=True,
        ))
    if COPD_EXACERBATION in respiratory.emergency_indicators:
        immediate.append(FollowupItem(
            action="Emergency department evaluation for COPD exacerbation",
            specialist_type="Pulmonologist/Emergency physician",
            urgency=FollowupUrgency.STAT,
            automated=True,
        ))

    # Within 24 hours
    if (
        cardiovascular.risk_level is CardiovascularRiskLevel.VERY_HIGH
        and not cardiovascular.emergency_indicators
    ):
        within_24h.append(FollowupItem(
            action="Urgent cardiology consultation with ECG",
            specialist_type="Cardiologist",
            urgency=FollowupUrgency.URGENT,
            automated=True,
        ))
    if diabetes.risk_level is DiabetesRiskLevel.CRITICAL:
        within_24h.append(FollowupItem(
            action="Laboratory tests: glucose, HbA1c, renal function",
            urgency=FollowupUrgency.URGENT,
            automated=True,
        ))

    # Within 1 week
    if cardiovascular.risk_level is CardiovascularRiskLevel.HIGH:
        within_1_week.append(FollowupItem(
            action="Cardiology consultation and echocardiogram",
            specialist_type="Cardiologist",
            urgency=FollowupUrgency.URGENT,
            automated=False,
        ))
    if diabetes.classic_triad.triad_complete:
        within_1_week.append(FollowupItem(
            action="Endocrinology consultation for diagnosis and treatment",
            specialist_type="Endocrinologist",
            urgency=FollowupUrgency.URGENT,
            automated=False,
        ))
    if mental_health.risk_level.is_high_or_worse:
        within_1_week.append(FollowupItem(
            action="Psychiatric evaluation and start of treatment",
            specialist_type="Psychiatrist",
            urgency=FollowupUrgency.URGENT,
            automated=False,
        ))
    if respiratory.risk_level.is_high_or_worse:
        within_1_week.append(FollowupItem(
            action="Pulmonology consultation and spirometry",
            specialist_type="Pulmonologist",
            urgency=FollowupUrgency.URGENT,
            automated=False,
        ))

    # Within 1 month
    if diabetes.risk_level in (DiabetesRiskLevel.MODERATE, DiabetesRiskLevel.HIGH):
        within_1_month.append(FollowupItem(
            action="Ophthalmology evaluation (fundoscopy)",
            specialist_type="Ophthalmologist",
            urgency=FollowupUrgency.ROUTINE,
            automated=False,
        ))
        within_1_month.append(FollowupItem(
            action="Nutritionist consultation",
            specialist_type="Nutritionist",
            urgency=FollowupUrgency.ROUTINE,
            automated=False,
        ))
    if respiratory.sleep_apnea_indicators.stop_bang_score >= STOP_BANG_INTERMEDIATE:
        within_1_month.append(FollowupItem(
            action="Polysomnography",
            specialist_type="Sleep physician",
            urgency=FollowupUrgency.ROUTINE,
            automated=False,
        ))

    # Routine
    if composite.routine_followup:
        routine.append(FollowupItem(
            action="Family medicine follow-up consultation",
            specialist_type="General practitioner",
            urgency=FollowupUrgency.ROUTINE,
            automated=False,
            estimated_cost=SUS_COST,
        ))
    if (
        cardiovascular.risk_level is not CardiovascularRiskLevel.LOW
        or diabetes.risk_level is not DiabetesRiskLevel.LOW
    ):
        routine.append(FollowupItem(
            action="Quarterly routine labs (glucose, lipid panel, renal function)",
            urgency=FollowupUrgency.ROUTINE,
            automated=False,
            estimated_cost=SUS_COST,
        ))

    return FollowupSchedule(
        immediate=tuple(immediate),
        within_24h=tuple(within_24h),
        within_1_week=tuple(within_1_week),
        within_1_month=tuple(within_1_month),
        routine=tuple(routine),
    )
