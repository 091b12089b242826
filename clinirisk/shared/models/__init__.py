"""Shared domain models for the clinical risk platform."""
from .questionnaire import (
    QuestionnaireValidationError,
    ExtractedSymptom,
    ExtractedRiskFactor,
    EmergencyFlag,
    QuestionnaireResponse,
    ProcessedQuestionnaire,
    validate_questionnaire,
)
from .risk import (
    as_primitive,
    OrderedLevel,
    Gender,
    CardiovascularRiskLevel,
    DiabetesRiskLevel,
    MentalHealthRiskLevel,
    SuicideRiskLevel,
    RespiratoryRiskLevel,
    CompositeRiskLevel,
    EscalationTier,
    CardiovascularFactors,
    CardiovascularRisk,
    ClassicTriad,
    DiabetesFactors,
    DiabetesRisk,
    DepressionIndicators,
    AnxietyIndicators,
    SuicideRisk,
    MentalHealthRisk,
    AsthmaIndicators,
    CopdIndicators,
    SleepApneaIndicators,
    RespiratoryRisk,
    PrioritizedCondition,
    CompositeRisk,
)
from .assessment import (
    AlertSeverity,
    RecommendationCategory,
    FollowupUrgency,
    EscalationLevel,
    NotificationChannel,
    EmergencyAlert,
    ClinicalRecommendation,
    FollowupItem,
    FollowupSchedule,
    EscalationProtocol,
    AdvancedRiskAssessment,
)

__all__ = [
    "QuestionnaireValidationError",
    "ExtractedSymptom",
    "ExtractedRiskFactor",
    "EmergencyFlag",
    "QuestionnaireResponse",
    "ProcessedQuestionnaire",
    "validate_questionnaire",
    "as_primitive",
    "OrderedLevel",
    "Gender",
    "CardiovascularRiskLevel",
    "DiabetesRiskLevel",
    "MentalHealthRiskLevel",
    "SuicideRiskLevel",
    "RespiratoryRiskLevel",
    "CompositeRiskLevel",
    "EscalationTier",
    "CardiovascularFactors",
    "CardiovascularRisk",
    "ClassicTriad",
    "DiabetesFactors",
    "DiabetesRisk",
    "DepressionIndicators",
    "AnxietyIndicators",
    "SuicideRisk",
    "MentalHealthRisk",
    "AsthmaIndicators",
    "CopdIndicators",
    "SleepApneaIndicators",
    "RespiratoryRisk",
    "PrioritizedCondition",
    "CompositeRisk",
    "AlertSeverity",
    "RecommendationCategory",
    "FollowupUrgency",
    "EscalationLevel",
    "NotificationChannel",
    "EmergencyAlert",
    "ClinicalRecommendation",
    "FollowupItem",
    "FollowupSchedule",
    "EscalationProtocol",
    "AdvancedRiskAssessment",
]
