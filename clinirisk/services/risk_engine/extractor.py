"""Medical data extraction - normalizes a questionnaire for the assessors.

ExtractedMedicalData is a read-only lookup view built once per assessment.
Symptom lookups prefer exact normalized codes; substring matching on the
free-text description is the migration fallback for extractor versions that
do not emit codes yet.
"""
import logging
import re
from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

from clinirisk.shared.models import (
    EmergencyFlag,
    ExtractedRiskFactor,
    ExtractedSymptom,
    Gender,
    ProcessedQuestionnaire,
    QuestionnaireResponse,
    QuestionnaireValidationError,
    validate_questionnaire,
)
from .config import EngineSettings

logger = logging.getLogger(__name__)

MAX_PLAUSIBLE_AGE = 130

AGE_QUESTION_KEYWORD = "idade"
GENDER_QUESTION_KEYWORD = "sexo"

MALE_ANSWERS: FrozenSet[str] = frozenset({"masculino", "m", "male", "homem"})
FEMALE_ANSWERS: FrozenSet[str] = frozenset({"feminino", "f", "female", "mulher"})

_INTEGER = re.compile(r"\d+")
_NUMBER = re.compile(r"\d+(?:[.,]\d+)?")


def normalize_code(value: str) -> str:
    """Normalize a symptom description into code form (`Dor Peito` -> `dor_peito`)."""
    return re.sub(r"[\s\-]+", "_", value.strip().lower())


@dataclass(frozen=True)
class ExtractedMedicalData:
    """Flat, read-only view over one questionnaire."""
    user_id: str
    symptoms: Tuple[ExtractedSymptom, ...]
    risk_factors: Tuple[ExtractedRiskFactor, ...]
    emergency_flags: Tuple[EmergencyFlag, ...]
    responses: Tuple[QuestionnaireResponse, ...]
    symptom_codes: FrozenSet[str]
    age: Optional[int]
    gender: Gender
    substring_fallback: bool = True

    def has_symptom(self, *names: str) -> bool:
        """True if any of the given symptom names is present.

        Exact code match first; substring match on the descriptions only
        when the fallback is enabled.
        """
        for name in names:
            code = normalize_code(name)
            if code in self.symptom_codes:
                return True
            if self.substring_fallback and any(
                code in normalize_code(s.symptom) for s in self.symptoms
            ):
                return True
        return False

    def has_risk_factor(self, *needles: str) -> bool:
        """True if any risk-factor record contains any of the needles."""
        lowered = [n.lower() for n in needles]
        return any(
            needle in rf.factor.lower()
            for rf in self.risk_factors
            for needle in lowered
        )

    def has_risk_factor_with_all(self, *needles: str) -> bool:
        """True if a single risk-factor record contains every needle."""
        lowered = [n.lower() for n in needles]
        return any(
            all(needle in rf.factor.lower() for needle in lowered)
            for rf in self.risk_factors
        )

    def has_finding(self, *names: str) -> bool:
        """Present either as a symptom or as a risk factor."""
        return self.has_symptom(*names) or self.has_risk_factor(*names)

    def numeric_response(self, *keywords: str) -> Optional[float]:
        """First numeric answer whose question mentions any keyword."""
        response = _find_response(self.responses, *keywords)
        if response is None:
            return None
        match = _NUMBER.search(response.answer)
        if match is None:
            return None
        return float(match.group().replace(",", "."))


class MedicalDataExtractor:
    """Validates a questionnaire and builds its ExtractedMedicalData view."""

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()

    def extract(self, questionnaire: ProcessedQuestionnaire) -> ExtractedMedicalData:
        """Extract the lookup structure used by every assessor.

        Args:
            questionnaire: Processed questionnaire from the NLP collaborator

        Returns:
            ExtractedMedicalData for this assessment only

        Raises:
            QuestionnaireValidationError: If clinically significant fields
                are missing or unparseable
        """
        problems = validate_questionnaire(questionnaire)

        age = None
        # age is only parsed from well-formed responses
        if not any(p.startswith("responses") for p in problems):
            try:
                age = extract_age(questionnaire.responses)
            except QuestionnaireValidationError as e:
                problems.extend(e.problems)

        if problems:
            logger.warning(
                "QUESTIONNAIRE_VALIDATION_FAILED",
                extra={
                    "questionnaire_id": questionnaire.questionnaire_id,
                    "problem_count": len(problems),
                    "problems": problems,
                }
            )
            raise QuestionnaireValidationError(problems)

        symptom_codes = frozenset(
            normalize_code(s.code or s.symptom) for s in questionnaire.extracted_symptoms
        ) | frozenset(normalize_code(s.symptom) for s in questionnaire.extracted_symptoms)

        data = ExtractedMedicalData(
            user_id=questionnaire.user_id,
            symptoms=tuple(questionnaire.extracted_symptoms),
            risk_factors=tuple(questionnaire.risk_factors),
            emergency_flags=tuple(questionnaire.emergency_flags),
            responses=tuple(questionnaire.responses),
            symptom_codes=symptom_codes,
            age=age,
            gender=extract_gender(questionnaire.responses),
            substring_fallback=self.settings.substring_symptom_fallback,
        )

        logger.debug(
            "MEDICAL_DATA_EXTRACTED",
            extra={
                "symptom_count": len(data.symptoms),
                "risk_factor_count": len(data.risk_factors),
                "emergency_flag_count": len(data.emergency_flags),
                "age_known": data.age is not None,
                "gender": data.gender.value,
            }
        )
        return data


def _find_response(
    responses: Tuple[QuestionnaireResponse, ...],
    *keywords: str,
) -> Optional[QuestionnaireResponse]:
    for response in responses:
        question = response.question.lower()
        if any(keyword in question for keyword in keywords):
            return response
    return None


def extract_age(responses: Tuple[QuestionnaireResponse, ...]) -> Optional[int]:
    """Age from the first response asking for `idade`.

    Returns None when no age question was answered. An answer that does
    not carry a plausible integer is rejected instead of defaulted.
    """
    response = _find_response(responses, AGE_QUESTION_KEYWORD)
    if response is None:
        return None

    match = _INTEGER.search(response.answer)
    if match is None:
        raise QuestionnaireValidationError([f"age answer is not a number: {response.answer!r}"])

    age = int(match.group())
    if age > MAX_PLAUSIBLE_AGE:
        raise QuestionnaireValidationError([f"age out of range: {age}"])
    return age


def extract_gender(responses: Tuple[QuestionnaireResponse, ...]) -> Gender:
    """Gender from the first response asking for `sexo`; UNKNOWN otherwise."""
    response = _find_response(responses, GENDER_QUESTION_KEYWORD)
    if response is None:
        return Gender.UNKNOWN

    answer = response.answer.strip().lower()
    if answer in MALE_ANSWERS:
        return Gender.MALE
    if answer in FEMALE_ANSWERS:
        return Gender.FEMALE
    return Gender.UNKNOWN
