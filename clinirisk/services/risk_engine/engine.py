"""Risk assessment engine - orchestrates the scoring pipeline.

Extracts the questionnaire, runs the four domain assessors, aggregates
the composite risk, derives alerts/recommendations/follow-up/escalation
and hands the resulting assessment to the store and, on emergencies, to
the immediate action trigger.

Collaborator failures never discard the assessment: emergency alerts
must still reach the caller even when persistence is down.
"""
import logging
import time
import uuid
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from clinirisk.shared.models import (
    AdvancedRiskAssessment,
    ProcessedQuestionnaire,
)
from clinirisk.shared.utils import hash_pii
from .alerts import generate_emergency_alerts
from .cardiovascular import assess_cardiovascular
from .composite import aggregate_composite
from .config import EngineSettings, RiskEngineConfig
from .diabetes import assess_diabetes
from .escalation import determine_escalation_protocol
from .extractor import MedicalDataExtractor
from .followup import create_followup_schedule
from .mental_health import assess_mental_health
from .recommendations import generate_recommendations
from .respiratory import assess_respiratory

logger = logging.getLogger(__name__)

ASSESSOR_WORKERS = 4


class AssessmentStore(ABC):
    """Persistence collaborator. `store` must be idempotent on assessment_id."""

    @abstractmethod
    def store(self, assessment: AdvancedRiskAssessment) -> None:
        pass


class ImmediateActionTrigger(ABC):
    """Notification collaborator for assessments with emergency alerts."""

    @abstractmethod
    def trigger_immediate_actions(self, assessment: AdvancedRiskAssessment) -> bool:
        pass


def generate_assessment_id(timestamp: datetime) -> str:
    """Sortable unique id: 13-digit epoch millis plus 12 random hex chars."""
    millis = int(timestamp.timestamp() * 1000)
    return f"assessment_{millis:013d}_{uuid.uuid4().hex[:12]}"


class RiskAssessmentEngine:
    """Runs a complete clinical risk assessment for one questionnaire.

    The engine holds no per-assessment state and can be shared across
    threads.
    """

    def __init__(
        self,
        config: Optional[RiskEngineConfig] = None,
        settings: Optional[EngineSettings] = None,
        store: Optional[AssessmentStore] = None,
        notifier: Optional[ImmediateActionTrigger] = None,
    ):
        """Initialize engine with dependencies.

        Args:
            config: Rule configuration (weights, thresholds, interactions)
            settings: Runtime behaviour; read from the environment if omitted
            store: Persistence collaborator (optional)
            notifier: Immediate action collaborator (optional)
        """
        self.config = config or RiskEngineConfig()
        self.settings = settings or EngineSettings.from_env()
        self.store = store
        self.notifier = notifier
        self.extractor = MedicalDataExtractor(self.settings)

        logger.info(
            "RISK_ENGINE_INITIALIZED",
            extra={
                "rules_version": self.config.rules_version,
                "parallel_assessors": self.settings.parallel_assessors,
                "substring_symptom_fallback": self.settings.substring_symptom_fallback,
                "store_enabled": store is not None,
                "notifier_enabled": notifier is not None,
            }
        )

    def assess_payload(self, payload: Mapping[str, Any]) -> AdvancedRiskAssessment:
        """Assess a questionnaire given as the upstream JSON payload."""
        return self.assess(ProcessedQuestionnaire.from_dict(payload))

    def assess(self, questionnaire: ProcessedQuestionnaire) -> AdvancedRiskAssessment:
        """Run the full assessment pipeline.

        Args:
            questionnaire: Processed questionnaire from the extraction service

        Returns:
            AdvancedRiskAssessment (immutable)

        Raises:
            QuestionnaireValidationError: If the questionnaire is malformed

        Logs:
            - RISK_ASSESSMENT_STARTED: Once the questionnaire is validated
            - EMERGENCY_ESCALATION_DETECTED: When alerts were generated (critical)
            - RISK_ASSESSMENT_COMPLETED: After the assessment is built
        """
        start_time = time.perf_counter()
        data = self.extractor.extract(questionnaire)
        user_id_hash = hash_pii(data.user_id)

        logger.info(
            "RISK_ASSESSMENT_STARTED",
            extra={
                "user_id_hash": user_id_hash,
                "questionnaire_id": questionnaire.questionnaire_id,
                "symptom_count": len(data.symptoms),
            }
        )

        if self.settings.parallel_assessors:
            with ThreadPoolExecutor(max_workers=ASSESSOR_WORKERS) as executor:
                cv_future = executor.submit(assess_cardiovascular, data)
                dm_future = executor.submit(assess_diabetes, data)
                mh_future = executor.submit(assess_mental_health, data)
                resp_future = executor.submit(assess_respiratory, data)
                cardiovascular = cv_future.result()
                diabetes = dm_future.result()
                mental_health = mh_future.result()
                respiratory = resp_future.result()
        else:
            cardiovascular = assess_cardiovascular(data)
            diabetes = assess_diabetes(data)
            mental_health = assess_mental_health(data)
            respiratory = assess_respiratory(data)

        composite = aggregate_composite(
            cardiovascular, diabetes, mental_health, respiratory, data, self.config
        )

        timestamp = datetime.now(timezone.utc)
        assessment = AdvancedRiskAssessment(
            user_id=questionnaire.user_id,
            assessment_id=generate_assessment_id(timestamp),
            timestamp=timestamp,
            cardiovascular=cardiovascular,
            diabetes=diabetes,
            mental_health=mental_health,
            respiratory=respiratory,
            composite=composite,
            emergency_alerts=tuple(generate_emergency_alerts(
                cardiovascular, diabetes, mental_health, respiratory
            )),
            recommendations=tuple(generate_recommendations(
                cardiovascular, diabetes, mental_health, respiratory, composite
            )),
            followup_schedule=create_followup_schedule(
                cardiovascular, diabetes, mental_health, respiratory, composite
            ),
            escalation_protocol=determine_escalation_protocol(
                cardiovascular, diabetes, mental_health, respiratory, composite
            ),
        )

        if assessment.has_emergency:
            logger.critical(
                "EMERGENCY_ESCALATION_DETECTED",
                extra={
                    "assessment_id": assessment.assessment_id,
                    "user_id_hash": user_id_hash,
                    "indicators": [a.indicator for a in assessment.emergency_alerts],
                    "escalation_level": assessment.escalation_protocol.escalation_level.value,
                }
            )

        self._store(assessment)
        if assessment.has_emergency:
            self._trigger_immediate_actions(assessment)

        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "RISK_ASSESSMENT_COMPLETED",
            extra={
                "user_id_hash": user_id_hash,
                "latency_ms": round(latency_ms, 2),
                **assessment.summary(),
            }
        )

        return assessment

    def _store(self, assessment: AdvancedRiskAssessment) -> None:
        if self.store is None:
            return
        try:
            self.store.store(assessment)
        except Exception as e:
            logger.critical(
                "ASSESSMENT_STORE_FAILED",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    **assessment.summary(),
                }
            )

    def _trigger_immediate_actions(self, assessment: AdvancedRiskAssessment) -> None:
        if self.notifier is None:
            logger.critical(
                "IMMEDIATE_ACTIONS_NOT_CONFIGURED",
                extra=assessment.summary(),
            )
            return
        try:
            delivered = self.notifier.trigger_immediate_actions(assessment)
        except Exception as e:
            logger.critical(
                "IMMEDIATE_ACTIONS_FAILED",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    **assessment.summary(),
                }
            )
            return

        if delivered is False:
            logger.critical(
                "IMMEDIATE_ACTIONS_FAILED",
                extra={
                    "error": "notifier reported delivery failure",
                    **assessment.summary(),
                }
            )
