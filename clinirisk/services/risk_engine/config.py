"""Risk engine configuration and composite-risk constants.

Rules are static per deployment: the config objects are frozen, built once
at startup and passed by reference into the scoring functions.

Sources:
- Weights and interaction factors: SBD Guidelines 2023 and the
  diabetes/cardiovascular compounding evidence (level A)
- Domain point tables live beside each assessor
"""
import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CompositeWeights:
    """Contribution of each domain score to the composite."""
    cardiovascular: float = 0.30
    diabetes: float = 0.25
    mental_health: float = 0.25
    respiratory: float = 0.20


@dataclass(frozen=True)
class CompositeThresholds:
    """Composite score bucket boundaries (lower bounds)."""
    moderate_min: float = 30.0
    high_min: float = 50.0
    critical_min: float = 70.0


@dataclass(frozen=True)
class InteractionFactors:
    """Multiplicative adjustments applied to the weighted score."""
    # Penalty is base ** (k - 1) for k > 1 high-or-worse domains
    multiple_conditions_base: float = 1.5

    diabetes_cardiovascular_synergy: float = 1.8
    mental_health_chronic_synergy: float = 1.4

    elderly_age: int = 65
    elderly_adjustment: float = 1.3
    middle_age: int = 45
    middle_age_adjustment: float = 1.1
    minor_age: int = 18
    minor_adjustment: float = 0.8

    male_cardiovascular_adjustment: float = 1.2
    female_mental_health_adjustment: float = 1.1


@dataclass(frozen=True)
class RiskEngineConfig:
    """Immutable rule configuration shared by every assessment."""
    weights: CompositeWeights = field(default_factory=CompositeWeights)
    thresholds: CompositeThresholds = field(default_factory=CompositeThresholds)
    interactions: InteractionFactors = field(default_factory=InteractionFactors)

    # Version tracking for the audit trail
    rules_version: str = "2026.10.01"


@dataclass(frozen=True)
class EngineSettings:
    """Runtime behaviour of the orchestrator."""

    # Run the four domain assessors on a thread pool
    parallel_assessors: bool = False

    # Substring matching on free-text symptoms when no code matches.
    # Kept on until every extractor version emits symptom codes.
    substring_symptom_fallback: bool = True

    @classmethod
    def from_env(cls) -> "EngineSettings":
        """Create settings from environment variables.

        Environment variables:
            RISK_ENGINE_PARALLEL: "true" to fan out assessors (default false)
            RISK_ENGINE_SUBSTRING_FALLBACK: "false" to require exact symptom
                codes (default true)
        """
        return cls(
            parallel_assessors=os.getenv("RISK_ENGINE_PARALLEL", "false").lower() == "true",
            substring_symptom_fallback=os.getenv(
                "RISK_ENGINE_SUBSTRING_FALLBACK", "true"
            ).lower() == "true",
        )
