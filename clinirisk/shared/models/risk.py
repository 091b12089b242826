"""Risk level and clinical domain models.

Core enums and immutable records produced by the domain assessors and the
composite aggregator. Level enums are declared from least to most severe;
the declaration order is what `rank` compares.
"""
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Tuple


def as_primitive(value: Any) -> Any:
    """Convert model values into JSON-serializable primitives."""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: as_primitive(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [as_primitive(v) for v in value]
    if isinstance(value, dict):
        return {k: as_primitive(v) for k, v in value.items()}
    if isinstance(value, datetime):
        return value.isoformat().replace("+00:00", "Z")
    return value


class OrderedLevel(Enum):
    """Enum whose members are ordered by declaration."""

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    @property
    def is_high_or_worse(self) -> bool:
        """True for the two most severe members of the scale."""
        return self.rank >= len(type(self)) - 2

    @classmethod
    def highest(cls) -> "OrderedLevel":
        return list(cls)[-1]


class Gender(Enum):
    """Patient gender as reported in the questionnaire.

    UNKNOWN covers missing or unrecognised answers. It is never folded
    into FEMALE.
    """
    MALE = "M"
    FEMALE = "F"
    UNKNOWN = "unknown"


class CardiovascularRiskLevel(OrderedLevel):
    LOW = "low"
    INTERMEDIATE = "intermediate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class DiabetesRiskLevel(OrderedLevel):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class MentalHealthRiskLevel(OrderedLevel):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    SEVERE = "severe"


class SuicideRiskLevel(OrderedLevel):
    """Rule-based suicide risk tiers (not derived from a score)."""
    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    IMMINENT = "imminent"


class RespiratoryRiskLevel(OrderedLevel):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class CompositeRiskLevel(OrderedLevel):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class EscalationTier(OrderedLevel):
    """Single decision tier for the composite risk.

    Precedence is EMERGENCY > URGENT > ROUTINE > NONE.
    """
    NONE = "none"
    ROUTINE = "routine"
    URGENT = "urgent"
    EMERGENCY = "emergency"


# =============================================================================
# CARDIOVASCULAR
# =============================================================================

@dataclass(frozen=True)
class CardiovascularFactors:
    chest_pain: bool
    shortness_of_breath: bool
    palpitations: bool
    syncope: bool
    family_history: bool
    hypertension: bool
    diabetes: bool
    smoking: bool
    cholesterol: bool
    age: Optional[int]
    gender: Gender


@dataclass(frozen=True)
class CardiovascularRisk:
    overall_score: float
    risk_level: CardiovascularRiskLevel
    factors: CardiovascularFactors
    framingham_score: int
    emergency_indicators: Tuple[str, ...] = field(default_factory=tuple)
    recommendations: Tuple[str, ...] = field(default_factory=tuple)
    escalation_required: bool = False
    time_to_escalation: float = 12

    @property
    def has_emergency(self) -> bool:
        return bool(self.emergency_indicators)


# =============================================================================
# DIABETES
# =============================================================================

@dataclass(frozen=True)
class ClassicTriad:
    """Polydipsia, polyphagia and polyuria: the cardinal diabetes symptoms."""
    polydipsia: bool
    polyphagia: bool
    polyuria: bool
    triad_complete: bool
    triad_score: int

    POINTS_PER_SYMPTOM = 20

    @classmethod
    def from_symptoms(cls, polydipsia: bool, polyphagia: bool, polyuria: bool) -> "ClassicTriad":
        present = sum((polydipsia, polyphagia, polyuria))
        return cls(
            polydipsia=polydipsia,
            polyphagia=polyphagia,
            polyuria=polyuria,
            triad_complete=present == 3,
            triad_score=present * cls.POINTS_PER_SYMPTOM,
        )


@dataclass(frozen=True)
class DiabetesFactors:
    weight_loss: bool
    fatigue: bool
    blurred_vision: bool
    slow_healing: bool
    frequent_infections: bool
    family_history: bool
    obesity: bool
    age: Optional[int]
    gestational_diabetes: bool


@dataclass(frozen=True)
class DiabetesRisk:
    overall_score: float
    risk_level: DiabetesRiskLevel
    classic_triad: ClassicTriad
    additional_factors: DiabetesFactors
    ketosis_risk: float
    dka_risk: float
    emergency_indicators: Tuple[str, ...] = field(default_factory=tuple)
    escalation_required: bool = False
    time_to_escalation: float = 72

    @property
    def has_emergency(self) -> bool:
        return bool(self.emergency_indicators)


# =============================================================================
# MENTAL HEALTH
# =============================================================================

@dataclass(frozen=True)
class DepressionIndicators:
    """PHQ-9 style indicators (0-27 scale)."""
    persistent_sadness: bool
    anhedonia: bool
    fatigue: bool
    sleep_disturbances: bool
    appetite_changes: bool
    concentration_problems: bool
    guilt: bool
    hopelessness: bool
    suicidal_ideation: bool
    phq9_score: int


@dataclass(frozen=True)
class AnxietyIndicators:
    """GAD-7 style indicators (0-21 scale)."""
    excessive_worry: bool
    restlessness: bool
    fatigue: bool
    concentration_difficulty: bool
    irritability: bool
    muscular_tension: bool
    sleep_problems: bool
    gad7_score: int


@dataclass(frozen=True)
class SuicideRisk:
    risk_level: SuicideRiskLevel
    risk_factors: Tuple[str, ...] = field(default_factory=tuple)
    protective_factors: Tuple[str, ...] = field(default_factory=tuple)
    immediate_intervention: bool = False


@dataclass(frozen=True)
class MentalHealthRisk:
    overall_score: float
    risk_level: MentalHealthRiskLevel
    depression_indicators: DepressionIndicators
    anxiety_indicators: AnxietyIndicators
    suicide_risk: SuicideRisk
    emergency_indicators: Tuple[str, ...] = field(default_factory=tuple)
    escalation_required: bool = False
    time_to_escalation: float = 48

    @property
    def has_emergency(self) -> bool:
        return bool(self.emergency_indicators)


# =============================================================================
# RESPIRATORY
# =============================================================================

@dataclass(frozen=True)
class AsthmaIndicators:
    wheezing: bool
    shortness_of_breath: bool
    chest_tightness: bool
    coughing: bool
    nighttime_symptoms: bool
    exercise_triggered: bool
    allergen_triggered: bool
    peak_flow_reduction: bool


@dataclass(frozen=True)
class CopdIndicators:
    chronic_cough: bool
    sputum_production: bool
    dyspnea: bool
    smoking_history: bool
    age: Optional[int]
    occupational_exposure: bool


@dataclass(frozen=True)
class SleepApneaIndicators:
    snoring: bool
    breathing_pauses: bool
    daytime_sleepiness: bool
    morning_headaches: bool
    bmi: Optional[float]
    neck_circumference: Optional[float]
    hypertension: bool
    berlin_score: int      # 0-5
    stop_bang_score: int   # 0-8


@dataclass(frozen=True)
class RespiratoryRisk:
    overall_score: float
    risk_level: RespiratoryRiskLevel
    asthma_indicators: AsthmaIndicators
    copd_indicators: CopdIndicators
    sleep_apnea_indicators: SleepApneaIndicators
    asthma_score: int = 0
    copd_score: int = 0
    sleep_apnea_score: int = 0
    emergency_indicators: Tuple[str, ...] = field(default_factory=tuple)
    escalation_required: bool = False
    time_to_escalation: float = 12

    @property
    def has_emergency(self) -> bool:
        return bool(self.emergency_indicators)


# =============================================================================
# COMPOSITE
# =============================================================================

@dataclass(frozen=True)
class PrioritizedCondition:
    """A condition ranked for treatment order."""
    condition: str
    priority: int
    time_to_escalation: float
    emergency: bool


@dataclass(frozen=True)
class CompositeRisk:
    """Multi-domain risk with interaction effects.

    `escalation_tier` is the single source of truth; the three escalation
    booleans are views over it, so at most one is ever true.
    """
    weighted_score: float
    multiple_conditions_penalty: float
    synergy_factor: float
    age_adjustment: float
    gender_adjustment: float
    overall_score: float
    risk_level: CompositeRiskLevel
    high_risk_domain_count: int
    escalation_tier: EscalationTier
    prioritized_conditions: Tuple[PrioritizedCondition, ...] = field(default_factory=tuple)

    @property
    def emergency_escalation(self) -> bool:
        return self.escalation_tier is EscalationTier.EMERGENCY

    @property
    def urgent_escalation(self) -> bool:
        return self.escalation_tier is EscalationTier.URGENT

    @property
    def routine_followup(self) -> bool:
        return self.escalation_tier is EscalationTier.ROUTINE

    def to_dict(self) -> dict:
        result = as_primitive(self)
        result["emergency_escalation"] = self.emergency_escalation
        result["urgent_escalation"] = self.urgent_escalation
        result["routine_followup"] = self.routine_followup
        return result
