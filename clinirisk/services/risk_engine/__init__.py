"""Risk Engine: deterministic multi-domain clinical risk assessment.

Given a processed questionnaire, the engine:
1. Scores four independent domains (cardiovascular, diabetes, mental
   health, respiratory)
2. Combines them into a composite risk with interaction effects
3. Derives emergency alerts, recommendations, a follow-up schedule and
   an escalation protocol
4. Hands the assessment to the store and, on emergencies, to the
   immediate action trigger

Scoring is pure: no I/O happens outside RiskAssessmentEngine's
collaborator calls.
"""

from .config import (
    CompositeWeights,
    CompositeThresholds,
    InteractionFactors,
    RiskEngineConfig,
    EngineSettings,
)
from .extractor import ExtractedMedicalData, MedicalDataExtractor
from .cardiovascular import assess_cardiovascular
from .diabetes import assess_diabetes
from .mental_health import assess_mental_health
from .respiratory import assess_respiratory
from .composite import aggregate_composite
from .alerts import generate_emergency_alerts
from .recommendations import generate_recommendations
from .followup import create_followup_schedule
from .escalation import determine_escalation_protocol
from .engine import (
    AssessmentStore,
    ImmediateActionTrigger,
    RiskAssessmentEngine,
)
from .assessment_repository import AssessmentRecord, AssessmentRepository

__all__ = [
    "CompositeWeights",
    "CompositeThresholds",
    "InteractionFactors",
    "RiskEngineConfig",
    "EngineSettings",
    "ExtractedMedicalData",
    "MedicalDataExtractor",
    "assess_cardiovascular",
    "assess_diabetes",
    "assess_mental_health",
    "assess_respiratory",
    "aggregate_composite",
    "generate_emergency_alerts",
    "generate_recommendations",
    "create_followup_schedule",
    "determine_escalation_protocol",
    "AssessmentStore",
    "ImmediateActionTrigger",
    "RiskAssessmentEngine",
    "AssessmentRecord",
    "AssessmentRepository",
]
