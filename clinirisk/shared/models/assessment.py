"""Assessment output models.

AdvancedRiskAssessment is the aggregate root handed to the persistence and
notification collaborators. It is created once per engine call and never
mutated afterwards.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .risk import (
    CardiovascularRisk,
    CompositeRisk,
    DiabetesRisk,
    MentalHealthRisk,
    RespiratoryRisk,
    as_primitive,
)


class AlertSeverity(Enum):
    IMMEDIATE = "immediate"
    CRITICAL = "critical"
    HIGH = "high"


class RecommendationCategory(Enum):
    IMMEDIATE = "immediate"
    URGENT = "urgent"
    ROUTINE = "routine"
    PREVENTIVE = "preventive"


class FollowupUrgency(Enum):
    STAT = "stat"
    URGENT = "urgent"
    ROUTINE = "routine"


class EscalationLevel(Enum):
    EMERGENCY_SERVICES = "emergency_services"
    PHYSICIAN_REVIEW = "physician_review"
    NURSE_REVIEW = "nurse_review"
    AI_ONLY = "ai_only"


class NotificationChannel(Enum):
    EMAIL = "email"
    CALL = "call"
    SMS = "sms"
    WHATSAPP = "whatsapp"


@dataclass(frozen=True)
class EmergencyAlert:
    """Dispatchable alert produced by rule matching, never by scoring."""
    alert_id: str
    severity: AlertSeverity
    condition: str
    indicator: str
    time_to_action: int     # minutes
    symptoms: Tuple[str, ...] = field(default_factory=tuple)
    actions: Tuple[str, ...] = field(default_factory=tuple)
    contact_numbers: Tuple[str, ...] = field(default_factory=tuple)
    automated: bool = True


@dataclass(frozen=True)
class ClinicalRecommendation:
    recommendation_id: str
    category: RecommendationCategory
    condition: str
    recommendation: str
    evidence_level: str
    timeframe: str
    priority: int
    cost_effectiveness: str


@dataclass(frozen=True)
class FollowupItem:
    action: str
    urgency: FollowupUrgency
    automated: bool
    specialist_type: Optional[str] = None
    estimated_cost: Optional[float] = None


@dataclass(frozen=True)
class FollowupSchedule:
    """Follow-up actions bucketed by time horizon, most urgent first."""
    immediate: Tuple[FollowupItem, ...] = field(default_factory=tuple)
    within_24h: Tuple[FollowupItem, ...] = field(default_factory=tuple)
    within_1_week: Tuple[FollowupItem, ...] = field(default_factory=tuple)
    within_1_month: Tuple[FollowupItem, ...] = field(default_factory=tuple)
    routine: Tuple[FollowupItem, ...] = field(default_factory=tuple)

    @property
    def total_items(self) -> int:
        return (
            len(self.immediate) + len(self.within_24h) + len(self.within_1_week)
            + len(self.within_1_month) + len(self.routine)
        )


@dataclass(frozen=True)
class EscalationProtocol:
    immediate: bool
    urgent: bool
    time_to_escalation: float   # hours
    escalation_level: EscalationLevel
    notification_channels: Tuple[NotificationChannel, ...]
    automatic_scheduling: bool


@dataclass(frozen=True)
class AdvancedRiskAssessment:
    """Complete risk assessment for one processed questionnaire."""
    user_id: str
    assessment_id: str
    timestamp: datetime
    cardiovascular: CardiovascularRisk
    diabetes: DiabetesRisk
    mental_health: MentalHealthRisk
    respiratory: RespiratoryRisk
    composite: CompositeRisk
    emergency_alerts: Tuple[EmergencyAlert, ...]
    recommendations: Tuple[ClinicalRecommendation, ...]
    followup_schedule: FollowupSchedule
    escalation_protocol: EscalationProtocol

    @property
    def has_emergency(self) -> bool:
        return bool(self.emergency_alerts)

    def summary(self) -> Dict[str, Any]:
        """Domain levels only; contains no patient identifiers."""
        return {
            "assessment_id": self.assessment_id,
            "cardiovascular": self.cardiovascular.risk_level.value,
            "diabetes": self.diabetes.risk_level.value,
            "mental_health": self.mental_health.risk_level.value,
            "respiratory": self.respiratory.risk_level.value,
            "composite": self.composite.risk_level.value,
            "composite_score": round(self.composite.overall_score, 2),
            "escalation_tier": self.composite.escalation_tier.value,
            "escalation_level": self.escalation_protocol.escalation_level.value,
            "alert_count": len(self.emergency_alerts),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-serializable output contract."""
        return {
            "user_id": self.user_id,
            "assessment_id": self.assessment_id,
            "timestamp": as_primitive(self.timestamp),
            "cardiovascular": as_primitive(self.cardiovascular),
            "diabetes": as_primitive(self.diabetes),
            "mental_health": as_primitive(self.mental_health),
            "respiratory": as_primitive(self.respiratory),
            "composite": self.composite.to_dict(),
            "emergency_alerts": as_primitive(self.emergency_alerts),
            "recommendations": as_primitive(self.recommendations),
            "followup_schedule": as_primitive(self.followup_schedule),
            "escalation_protocol": as_primitive(self.escalation_protocol),
        }
