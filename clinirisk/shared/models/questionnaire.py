"""Processed questionnaire input types.

The upstream NLP extraction service turns a patient conversation into a
ProcessedQuestionnaire. The risk engine only ever reads it: every type here
is frozen and carries tuples instead of lists.
"""
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple


class QuestionnaireValidationError(ValueError):
    """Raised when a questionnaire is missing clinically required data.

    Collects every problem found so the upstream collaborator can fix the
    payload in one pass.
    """

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("Invalid questionnaire: " + "; ".join(self.problems))


@dataclass(frozen=True)
class ExtractedSymptom:
    """A symptom identified upstream.

    `code` is the normalized symptom code when the extractor provides one;
    older extractor versions only fill the free-text `symptom`.
    """
    symptom: str
    severity: str = ""
    duration: str = ""
    onset: Optional[str] = None
    code: Optional[str] = None
    confidence: Optional[float] = None


@dataclass(frozen=True)
class ExtractedRiskFactor:
    factor: str
    severity: str = ""
    confidence: Optional[float] = None


@dataclass(frozen=True)
class EmergencyFlag:
    flag: str
    severity: str = ""


@dataclass(frozen=True)
class QuestionnaireResponse:
    question: str
    answer: str


@dataclass(frozen=True)
class ProcessedQuestionnaire:
    """Structured questionnaire consumed by the risk engine."""
    user_id: str
    extracted_symptoms: Tuple[ExtractedSymptom, ...] = field(default_factory=tuple)
    risk_factors: Tuple[ExtractedRiskFactor, ...] = field(default_factory=tuple)
    emergency_flags: Tuple[EmergencyFlag, ...] = field(default_factory=tuple)
    responses: Tuple[QuestionnaireResponse, ...] = field(default_factory=tuple)
    questionnaire_id: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ProcessedQuestionnaire":
        """Build a questionnaire from the upstream JSON payload.

        Accepts camelCase keys (``userId``, ``extractedSymptoms``...) as sent
        by the extraction service, or snake_case keys.

        Raises:
            QuestionnaireValidationError: If required fields are missing or
                have the wrong shape
        """
        if not isinstance(payload, Mapping):
            raise QuestionnaireValidationError(["payload must be an object"])

        problems: List[str] = []

        user_id = _pick(payload, "userId", "user_id")
        if not isinstance(user_id, str) or not user_id.strip():
            problems.append("userId is required")

        symptoms = _entries(
            payload, problems, ("extractedSymptoms", "extracted_symptoms"),
            required=("symptom",), build=_build_symptom,
        )
        risk_factors = _entries(
            payload, problems, ("riskFactors", "risk_factors"),
            required=("factor",), build=_build_risk_factor,
        )
        emergency_flags = _entries(
            payload, problems, ("emergencyFlags", "emergency_flags"),
            required=("flag",), build=_build_emergency_flag, optional=True,
        )
        responses = _entries(
            payload, problems, ("responses",),
            required=("question", "answer"), build=_build_response,
        )

        if problems:
            raise QuestionnaireValidationError(problems)

        return cls(
            user_id=user_id.strip(),
            extracted_symptoms=symptoms,
            risk_factors=risk_factors,
            emergency_flags=emergency_flags,
            responses=responses,
            questionnaire_id=_pick(payload, "questionnaireId", "questionnaire_id"),
        )


def _pick(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload:
            return payload[key]
    return None


def _entries(
    payload: Mapping[str, Any],
    problems: List[str],
    keys: Tuple[str, ...],
    required: Tuple[str, ...],
    build,
    optional: bool = False,
) -> tuple:
    """Validate and convert one list-valued field of the payload."""
    name = keys[0]
    raw = _pick(payload, *keys)
    if raw is None:
        if not optional:
            problems.append(f"{name} is required")
        return ()
    if not isinstance(raw, list):
        problems.append(f"{name} must be a list")
        return ()

    built = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, Mapping):
            problems.append(f"{name}[{index}] must be an object")
            continue
        missing = [
            key for key in required
            if entry.get(key) is None or str(entry.get(key)).strip() == ""
        ]
        if missing:
            problems.append(f"{name}[{index}] missing {', '.join(missing)}")
            continue
        built.append(build(entry))
    return tuple(built)


def _build_symptom(entry: Mapping[str, Any]) -> ExtractedSymptom:
    code = str(entry["code"]).strip() if entry.get("code") is not None else ""
    return ExtractedSymptom(
        symptom=str(entry["symptom"]),
        severity=str(entry.get("severity", "")),
        duration=str(entry.get("duration", "")),
        onset=entry.get("onset"),
        code=code or None,
        confidence=entry.get("confidence"),
    )


def _build_risk_factor(entry: Mapping[str, Any]) -> ExtractedRiskFactor:
    return ExtractedRiskFactor(
        factor=str(entry["factor"]),
        severity=str(entry.get("severity", "")),
        confidence=entry.get("confidence"),
    )


def _build_emergency_flag(entry: Mapping[str, Any]) -> EmergencyFlag:
    return EmergencyFlag(flag=str(entry["flag"]), severity=str(entry.get("severity", "")))


def _build_response(entry: Mapping[str, Any]) -> QuestionnaireResponse:
    return QuestionnaireResponse(question=str(entry["question"]), answer=str(entry["answer"]))


_ENTRY_FIELDS = (
    ("extractedSymptoms", "extracted_symptoms", ExtractedSymptom, ("symptom",)),
    ("riskFactors", "risk_factors", ExtractedRiskFactor, ("factor",)),
    ("emergencyFlags", "emergency_flags", EmergencyFlag, ("flag",)),
    ("responses", "responses", QuestionnaireResponse, ("question", "answer")),
)


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def validate_questionnaire(questionnaire: ProcessedQuestionnaire) -> List[str]:
    """Structural problems of a questionnaire built in code.

    Applies the same rules as ``ProcessedQuestionnaire.from_dict`` to an
    already constructed instance, whose dataclass fields are not type
    checked. Returns an empty list when the questionnaire is well formed.
    """
    problems: List[str] = []
    if not _is_text(questionnaire.user_id):
        problems.append("userId is required")

    for name, attr, entry_type, required in _ENTRY_FIELDS:
        entries = getattr(questionnaire, attr)
        if entries is None:
            problems.append(f"{name} is required")
            continue
        if not isinstance(entries, (tuple, list)):
            problems.append(f"{name} must be a list")
            continue
        for index, entry in enumerate(entries):
            if not isinstance(entry, entry_type):
                problems.append(f"{name}[{index}] must be of type {entry_type.__name__}")
                continue
            missing = [key for key in required if not _is_text(getattr(entry, key))]
            if missing:
                problems.append(f"{name}[{index}] missing {', '.join(missing)}")
            elif entry_type is ExtractedSymptom and entry.code is not None and not _is_text(entry.code):
                problems.append(f"{name}[{index}] code must be a non-empty string")
    return problems
