"""Emergency alert generation.

Every emergency indicator raised by a domain assessor maps to exactly one
alert template. An indicator without a template still produces a generic
critical alert so no emergency is ever dropped.

Contact numbers are Brazilian public services:
- 192: SAMU (mobile emergency care)
- 193: Fire department rescue
- 188: CVV (24h suicide prevention line)
"""
import logging
from typing import Dict, List

from clinirisk.shared.models import (
    AlertSeverity,
    CardiovascularRisk,
    DiabetesRisk,
    EmergencyAlert,
    MentalHealthRisk,
    RespiratoryRisk,
)
from .cardiovascular import ACUTE_CORONARY_SYNDROME, CARDIAC_SYNCOPE
from .diabetes import DIABETIC_KETOACIDOSIS, KETOSIS_DETECTED
from .mental_health import IMMINENT_SUICIDE_RISK
from .respiratory import COPD_EXACERBATION, SEVERE_ASTHMA_EXACERBATION

logger = logging.getLogger(__name__)

SAMU = "192"
FIRE_RESCUE = "193"
CVV = "188"

ALERT_TEMPLATES: Dict[str, EmergencyAlert] = {
    ACUTE_CORONARY_SYNDROME: EmergencyAlert(
        alert_id="alert_acs",
        severity=AlertSeverity.IMMEDIATE,
        condition="Suspected acute coronary syndrome",
        indicator=ACUTE_CORONARY_SYNDROME,
        time_to_action=15,
        symptoms=("Chest pain", "Shortness of breath"),
        actions=(
            "Call 192 (SAMU) immediately",
            "Do not drive to the hospital; wait for the ambulance",
            "Chew 200mg of aspirin if available",
            "Stay at complete rest",
        ),
        contact_numbers=(SAMU, FIRE_RESCUE),
    ),
    CARDIAC_SYNCOPE: EmergencyAlert(
        alert_id="alert_syncope",
        severity=AlertSeverity.CRITICAL,
        condition="Suspected cardiac syncope",
        indicator=CARDIAC_SYNCOPE,
        time_to_action=30,
        symptoms=("Fainting", "Chest pain"),
        actions=(
            "Urgent medical evaluation within 1 hour",
            "ECG and cardiac monitoring",
            "Do not stay alone until evaluated",
        ),
        contact_numbers=(SAMU,),
    ),
    DIABETIC_KETOACIDOSIS: EmergencyAlert(
        alert_id="alert_dka",
        severity=AlertSeverity.CRITICAL,
        condition="Diabetic ketoacidosis risk",
        indicator=DIABETIC_KETOACIDOSIS,
        time_to_action=120,
        symptoms=("Classic diabetes triad", "Weight loss"),
        actions=(
            "Go to the emergency department now",
            "Urgent tests: glucose, blood gas, ketones",
            "IV hydration and insulin therapy",
            "Do not wait for a scheduled appointment",
        ),
        contact_numbers=(SAMU,),
    ),
    KETOSIS_DETECTED: EmergencyAlert(
        alert_id="alert_ketosis",
        severity=AlertSeverity.HIGH,
        condition="Ketosis detected",
        indicator=KETOSIS_DETECTED,
        time_to_action=180,
        symptoms=("Ketone breath", "Nausea"),
        actions=(
            "Measure capillary blood glucose",
            "Drink plenty of fluids",
            "Seek medical care within 3 hours",
            "Watch for worsening symptoms",
        ),
        contact_numbers=(),
    ),
    IMMINENT_SUICIDE_RISK: EmergencyAlert(
        alert_id="alert_suicide",
        severity=AlertSeverity.IMMEDIATE,
        condition="Imminent suicide risk",
        indicator=IMMINENT_SUICIDE_RISK,
        time_to_action=0,
        symptoms=("Suicidal ideation", "Structured plan"),
        actions=(
            "CVV 188 (24h, free and confidential)",
            "SAMU 192 if an attempt is in progress",
            "Do not leave the person alone",
            "Remove lethal means from the environment",
            "Refer to CAPS or psychiatric emergency",
        ),
        contact_numbers=(CVV, SAMU),
    ),
    SEVERE_ASTHMA_EXACERBATION: EmergencyAlert(
        alert_id="alert_asthma",
        severity=AlertSeverity.IMMEDIATE,
        condition="Severe asthma exacerbation",
        indicator=SEVERE_ASTHMA_EXACERBATION,
        time_to_action=30,
        symptoms=("Severe shortness of breath", "Wheezing", "Difficulty speaking"),
        actions=(
            "Use rescue bronchodilator (up to 3 doses)",
            "Call 192 if there is no improvement",
            "Sit upright",
            "Emergency department immediately if lips or nails turn blue",
        ),
        contact_numbers=(SAMU,),
    ),
    COPD_EXACERBATION: EmergencyAlert(
        alert_id="alert_copd",
        severity=AlertSeverity.CRITICAL,
        condition="COPD exacerbation",
        indicator=COPD_EXACERBATION,
        time_to_action=60,
        symptoms=("Dyspnea", "Purulent sputum", "Fever"),
        actions=(
            "Go to the emergency department within 2 hours",
            "Bring current medications",
            "Oxygen therapy may be required",
            "Urgent antibiotics and corticosteroids",
        ),
        contact_numbers=(SAMU,),
    ),
}

GENERIC_TIME_TO_ACTION = 60

SEVERITY_ORDER = {
    AlertSeverity.IMMEDIATE: 0,
    AlertSeverity.CRITICAL: 1,
    AlertSeverity.HIGH: 2,
}


def generic_alert(indicator: str) -> EmergencyAlert:
    return EmergencyAlert(
        alert_id=f"alert_{indicator.lower()}",
        severity=AlertSeverity.CRITICAL,
        condition=indicator.replace("_", " ").capitalize(),
        indicator=indicator,
        time_to_action=GENERIC_TIME_TO_ACTION,
        actions=("Urgent medical evaluation",),
        contact_numbers=(SAMU,),
    )


def generate_emergency_alerts(
    cardiovascular: CardiovascularRisk,
    diabetes: DiabetesRisk,
    mental_health: MentalHealthRisk,
    respiratory: RespiratoryRisk,
) -> List[EmergencyAlert]:
    """Map every domain emergency indicator to an alert.

    Returns:
        Alerts ordered by severity, then time to action; ties keep the
        domain order (cardiovascular, diabetes, mental health, respiratory)
    """
    alerts: List[EmergencyAlert] = []
    seen = set()

    for domain in (cardiovascular, diabetes, mental_health, respiratory):
        for indicator in domain.emergency_indicators:
            if indicator in seen:
                continue
            seen.add(indicator)

            template = ALERT_TEMPLATES.get(indicator)
            if template is None:
                logger.warning(
                    "UNKNOWN_EMERGENCY_INDICATOR",
                    extra={"indicator": indicator}
                )
                template = generic_alert(indicator)
            alerts.append(template)

    return sorted(alerts, key=lambda a: (SEVERITY_ORDER[a.severity], a.time_to_action))
