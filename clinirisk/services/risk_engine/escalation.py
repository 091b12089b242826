"""Escalation protocol resolution.

Decides who has to act (emergency services, physician, nurse or nobody
beyond the automated flow), how fast, and over which channels.
"""
import logging

from clinirisk.shared.models import (
    CardiovascularRisk,
    CardiovascularRiskLevel,
    CompositeRisk,
    CompositeRiskLevel,
    DiabetesRisk,
    DiabetesRiskLevel,
    EscalationLevel,
    EscalationProtocol,
    MentalHealthRisk,
    MentalHealthRiskLevel,
    NotificationChannel,
    RespiratoryRisk,
    RespiratoryRiskLevel,
)
from .respiratory import SEVERE_ASTHMA_EXACERBATION

logger = logging.getLogger(__name__)

ROUTINE_ESCALATION_HOURS = 72
DEFAULT_URGENT_HOURS = 24


def determine_escalation_protocol(
    cardiovascular: CardiovascularRisk,
    diabetes: DiabetesRisk,
    mental_health: MentalHealthRisk,
    respiratory: RespiratoryRisk,
    composite: CompositeRisk,
) -> EscalationProtocol:
    """Resolve the escalation protocol for an assessment.

    Immediate escalation is reserved for conditions where minutes matter:
    acute cardiac events, imminent suicide risk and severe asthma. Any
    other emergency indicator escalates as urgent.
    """
    immediate = (
        bool(cardiovascular.emergency_indicators)
        or mental_health.suicide_risk.immediate_intervention
        or SEVERE_ASTHMA_EXACERBATION in respiratory.emergency_indicators
    )

    other_emergency = bool(diabetes.emergency_indicators) or bool(respiratory.emergency_indicators)
    urgent = not immediate and (
        composite.urgent_escalation
        or cardiovascular.risk_level is CardiovascularRiskLevel.VERY_HIGH
        or diabetes.risk_level is DiabetesRiskLevel.CRITICAL
        or mental_health.risk_level is MentalHealthRiskLevel.SEVERE
        or respiratory.risk_level is RespiratoryRiskLevel.CRITICAL
        or other_emergency
    )

    if immediate:
        time_to_escalation = 0.0
    elif urgent:
        times = [
            t for t in (
                cardiovascular.time_to_escalation,
                diabetes.time_to_escalation,
                mental_health.time_to_escalation,
                respiratory.time_to_escalation,
            )
            if t > 0
        ]
        time_to_escalation = min(times) if times else DEFAULT_URGENT_HOURS
    else:
        time_to_escalation = ROUTINE_ESCALATION_HOURS

    if immediate:
        level = EscalationLevel.EMERGENCY_SERVICES
    elif urgent:
        level = EscalationLevel.PHYSICIAN_REVIEW
    elif composite.risk_level in (CompositeRiskLevel.MODERATE, CompositeRiskLevel.HIGH):
        level = EscalationLevel.NURSE_REVIEW
    else:
        level = EscalationLevel.AI_ONLY

    channels = [NotificationChannel.EMAIL]
    if immediate:
        channels.extend([NotificationChannel.CALL, NotificationChannel.SMS, NotificationChannel.WHATSAPP])
    elif urgent:
        channels.extend([NotificationChannel.SMS, NotificationChannel.WHATSAPP])
    elif level is EscalationLevel.NURSE_REVIEW:
        channels.append(NotificationChannel.WHATSAPP)

    logger.debug(
        "ESCALATION_PROTOCOL_RESOLVED",
        extra={
            "escalation_level": level.value,
            "time_to_escalation": time_to_escalation,
            "channels": [c.value for c in channels],
        }
    )

    return EscalationProtocol(
        immediate=immediate,
        urgent=urgent,
        time_to_escalation=time_to_escalation,
        escalation_level=level,
        notification_channels=tuple(channels),
        automatic_scheduling=immediate or urgent,
    )
