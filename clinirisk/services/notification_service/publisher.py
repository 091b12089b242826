"""Immediate action publisher for emergency risk assessments.

Publishes an event to a Kinesis stream whenever an assessment carries
emergency alerts. The dispatcher consuming the stream places calls and
sends SMS/WhatsApp/email over the channels chosen by the escalation
protocol.

Publishing failure never raises: the assessment and its alerts are still
returned to the caller, and the failure is logged at CRITICAL with the
full payload for manual processing.
"""
import json
import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import boto3
from botocore.config import Config

from clinirisk.shared.models import AdvancedRiskAssessment, as_primitive
from clinirisk.shared.utils import hash_pii
from clinirisk.services.risk_engine.engine import ImmediateActionTrigger

logger = logging.getLogger(__name__)

DEFAULT_STREAM_NAME = "clinirisk-immediate-actions"


@dataclass(frozen=True)
class ImmediateActionEvent:
    """Immutable event describing the actions an emergency requires.

    Carries the hashed user id only.
    """
    event_id: str
    assessment_id: str
    user_id_hash: str
    escalation_level: str
    time_to_escalation: float
    notification_channels: Tuple[str, ...]
    alerts: Tuple[Dict[str, Any], ...]
    automatic_scheduling: bool
    composite_level: str
    event_type: str = "risk.emergency.detected"
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_assessment(cls, assessment: AdvancedRiskAssessment) -> "ImmediateActionEvent":
        protocol = assessment.escalation_protocol
        return cls(
            event_id=f"evt_{uuid.uuid4().hex[:12]}",
            assessment_id=assessment.assessment_id,
            user_id_hash=hash_pii(assessment.user_id),
            escalation_level=protocol.escalation_level.value,
            time_to_escalation=protocol.time_to_escalation,
            notification_channels=tuple(c.value for c in protocol.notification_channels),
            alerts=tuple(as_primitive(alert) for alert in assessment.emergency_alerts),
            automatic_scheduling=protocol.automatic_scheduling,
            composite_level=assessment.composite.risk_level.value,
        )

    def to_kinesis_payload(self) -> dict:
        """Convert to the Kinesis put_record Data payload."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "timestamp": as_primitive(self.timestamp),
            "source": "risk-engine",
            "data": {
                "assessment_id": self.assessment_id,
                "user_id_hash": self.user_id_hash,
                "escalation_level": self.escalation_level,
                "time_to_escalation": self.time_to_escalation,
                "notification_channels": list(self.notification_channels),
                "alerts": list(self.alerts),
                "automatic_scheduling": self.automatic_scheduling,
                "composite_level": self.composite_level,
            }
        }


class ImmediateActionPublisher(ImmediateActionTrigger):
    """Publishes immediate action events to Kinesis.

    Failure Handling:
        - Publishing failure does NOT discard the assessment
        - Failures are logged at CRITICAL level for alerting
        - The full payload is logged when the stream is unreachable
    """

    def __init__(
        self,
        stream_name: Optional[str] = None,
        enabled: bool = True,
        region: Optional[str] = None,
        connect_timeout: int = 2,
        read_timeout: int = 5,
    ):
        """Initialize publisher.

        Args:
            stream_name: Kinesis stream name (defaults to RISK_EVENTS_STREAM_NAME env var)
            enabled: Whether publishing is enabled (disable for local dev)
            region: AWS region (defaults to AWS_REGION env var)
            connect_timeout: Seconds to wait for a connection to Kinesis
            read_timeout: Seconds to wait for a Kinesis response
        """
        self.stream_name = stream_name or os.getenv("RISK_EVENTS_STREAM_NAME", DEFAULT_STREAM_NAME)
        self.enabled = enabled
        self.region = region or os.getenv("AWS_REGION", "us-east-1")
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self._kinesis_client = None

        logger.info(
            "IMMEDIATE_ACTION_PUBLISHER_INITIALIZED",
            extra={
                "stream_name": self.stream_name,
                "enabled": enabled,
                "region": self.region,
            }
        )

    @property
    def kinesis_client(self):
        """Lazy initialization of Kinesis client."""
        if self._kinesis_client is None and self.enabled:
            try:
                self._kinesis_client = boto3.client(
                    "kinesis",
                    region_name=self.region,
                    config=Config(
                        connect_timeout=self.connect_timeout,
                        read_timeout=self.read_timeout,
                        retries={"max_attempts": 2},
                    ),
                )
            except Exception as e:
                logger.error(
                    "KINESIS_CLIENT_INIT_FAILED",
                    extra={"error": str(e)}
                )
        return self._kinesis_client

    def trigger_immediate_actions(self, assessment: AdvancedRiskAssessment) -> bool:
        """Publish the immediate action event for an emergency assessment.

        Args:
            assessment: Assessment with at least one emergency alert

        Returns:
            True if published successfully, False otherwise
        """
        if not self.enabled:
            logger.info(
                "IMMEDIATE_ACTION_PUBLISH_SKIPPED",
                extra={
                    "assessment_id": assessment.assessment_id,
                    "reason": "publishing_disabled",
                }
            )
            return False

        if not assessment.emergency_alerts:
            logger.info(
                "IMMEDIATE_ACTION_PUBLISH_SKIPPED",
                extra={
                    "assessment_id": assessment.assessment_id,
                    "reason": "no_emergency_alerts",
                }
            )
            return False

        event = None
        payload = None
        try:
            event = ImmediateActionEvent.from_assessment(assessment)
            payload = event.to_kinesis_payload()

            if self.kinesis_client is None:
                logger.critical(
                    "IMMEDIATE_ACTION_FALLBACK_LOG",
                    extra={
                        "event_id": event.event_id,
                        "assessment_id": event.assessment_id,
                        "payload": json.dumps(payload),
                        "reason": "kinesis_client_unavailable",
                        "action": "MANUAL_PROCESSING_REQUIRED",
                    }
                )
                return False

            response = self.kinesis_client.put_record(
                StreamName=self.stream_name,
                Data=json.dumps(payload),
                PartitionKey=event.user_id_hash,
            )

            logger.critical(
                "IMMEDIATE_ACTION_PUBLISHED",
                extra={
                    "event_id": event.event_id,
                    "assessment_id": event.assessment_id,
                    "user_id_hash": event.user_id_hash,
                    "escalation_level": event.escalation_level,
                    "alert_count": len(event.alerts),
                    "shard_id": response.get("ShardId"),
                    "sequence_number": response.get("SequenceNumber"),
                }
            )
            return True

        except Exception as e:
            logger.critical(
                "IMMEDIATE_ACTION_PUBLISH_FAILED",
                extra={
                    "event_id": event.event_id if event else None,
                    "assessment_id": assessment.assessment_id,
                    "user_id_hash": event.user_id_hash if event else None,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "action": "MANUAL_REVIEW_REQUIRED",
                    "payload": json.dumps(payload) if payload else None,
                }
            )
            return False
