"""Assessment repository for the risk engine.

Stores completed assessments in PostgreSQL for:
- Longitudinal risk tracking per patient
- Emergency review queues
- Clinical audit of the rules version that produced each result

Summary columns carry the hashed user id only, so emergency queues and
per-patient lookups never filter on the raw identifier.
"""
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from clinirisk.shared.database import BaseRepository, ConnectionManager
from clinirisk.shared.models import AdvancedRiskAssessment
from clinirisk.shared.utils import hash_pii
from .engine import AssessmentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssessmentRecord:
    """Stored form of an AdvancedRiskAssessment."""
    assessment_id: str
    user_id_hash: str
    created_at: datetime
    composite_level: str
    composite_score: float
    escalation_tier: str
    escalation_level: str
    has_emergency: bool
    payload: Dict[str, Any]

    @classmethod
    def from_assessment(cls, assessment: AdvancedRiskAssessment) -> "AssessmentRecord":
        return cls(
            assessment_id=assessment.assessment_id,
            user_id_hash=hash_pii(assessment.user_id),
            created_at=assessment.timestamp,
            composite_level=assessment.composite.risk_level.value,
            composite_score=assessment.composite.overall_score,
            escalation_tier=assessment.composite.escalation_tier.value,
            escalation_level=assessment.escalation_protocol.escalation_level.value,
            has_emergency=assessment.has_emergency,
            payload=assessment.to_dict(),
        )


class AssessmentRepository(BaseRepository[AssessmentRecord], AssessmentStore):
    """Repository for risk assessments, keyed on assessment_id."""

    def __init__(self, connection_manager: ConnectionManager):
        super().__init__(connection_manager, "risk_assessments", key_column="assessment_id")

    def _row_to_entity(self, row: tuple) -> AssessmentRecord:
        """Convert database row to AssessmentRecord.

        Expected columns:
            0: assessment_id
            1: user_id_hash
            2: created_at
            3: composite_level
            4: composite_score
            5: escalation_tier
            6: escalation_level
            7: has_emergency
            8: payload (jsonb)
        """
        payload = json.loads(row[8]) if isinstance(row[8], str) else row[8]
        return AssessmentRecord(
            assessment_id=row[0],
            user_id_hash=row[1],
            created_at=row[2],
            composite_level=row[3],
            composite_score=row[4],
            escalation_tier=row[5],
            escalation_level=row[6],
            has_emergency=row[7],
            payload=payload,
        )

    def _entity_to_params(self, entity: AssessmentRecord) -> Dict[str, Any]:
        return {
            "assessment_id": entity.assessment_id,
            "user_id_hash": entity.user_id_hash,
            "created_at": entity.created_at,
            "composite_level": entity.composite_level,
            "composite_score": entity.composite_score,
            "escalation_tier": entity.escalation_tier,
            "escalation_level": entity.escalation_level,
            "has_emergency": entity.has_emergency,
            "payload": json.dumps(entity.payload),
        }

    def store(self, assessment: AdvancedRiskAssessment) -> None:
        """Persist an assessment; storing it again overwrites the same row."""
        record = AssessmentRecord.from_assessment(assessment)
        self.save(record)

        logger.info(
            "ASSESSMENT_STORED",
            extra={
                "assessment_id": record.assessment_id,
                "user_id_hash": record.user_id_hash,
                "composite_level": record.composite_level,
                "has_emergency": record.has_emergency,
            }
        )

    def find_by_user(self, user_id_hash: str, limit: int = 50) -> List[AssessmentRecord]:
        """Assessments for one patient, newest first.

        Args:
            user_id_hash: Hashed user identifier
            limit: Maximum records to return
        """
        return self._fetch_all(
            f"""
            SELECT * FROM {self.table_name}
            WHERE user_id_hash = %s
            ORDER BY created_at DESC
            LIMIT %s
            """,
            (user_id_hash, limit)
        )

    def find_emergencies(
        self,
        since: Optional[datetime] = None,
        limit: int = 100,
    ) -> List[AssessmentRecord]:
        """Assessments with emergency alerts, newest first.

        Args:
            since: Only assessments created at or after this time (optional)
            limit: Maximum records to return
        """
        query = f"""
            SELECT * FROM {self.table_name}
            WHERE has_emergency = true
        """
        params: list = []

        if since:
            query += " AND created_at >= %s"
            params.append(since)

        query += " ORDER BY created_at DESC LIMIT %s"
        params.append(limit)

        return self._fetch_all(query, tuple(params))
