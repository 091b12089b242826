"""Shared fixtures for risk engine tests."""
from typing import NamedTuple

import pytest

from clinirisk.shared.models import (
    CardiovascularRisk,
    CompositeRisk,
    DiabetesRisk,
    ExtractedRiskFactor,
    ExtractedSymptom,
    MentalHealthRisk,
    ProcessedQuestionnaire,
    QuestionnaireResponse,
    RespiratoryRisk,
)
from clinirisk.shared.utils import configure_pii_salt
from clinirisk.services.risk_engine.cardiovascular import assess_cardiovascular
from clinirisk.services.risk_engine.composite import aggregate_composite
from clinirisk.services.risk_engine.config import EngineSettings
from clinirisk.services.risk_engine.diabetes import assess_diabetes
from clinirisk.services.risk_engine.extractor import (
    ExtractedMedicalData,
    MedicalDataExtractor,
)
from clinirisk.services.risk_engine.mental_health import assess_mental_health
from clinirisk.services.risk_engine.respiratory import assess_respiratory


@pytest.fixture(autouse=True)
def setup_pii_salt():
    configure_pii_salt("test_salt_that_is_at_least_32_characters_long")


def make_questionnaire(
    symptoms=(),
    risk_factors=(),
    age=None,
    gender=None,
    responses=(),
    user_id="patient_001",
):
    """Build a questionnaire from symptom codes and risk factor names."""
    all_responses = list(responses)
    if age is not None:
        all_responses.append(("Qual a sua idade?", str(age)))
    if gender is not None:
        all_responses.append(("Qual o seu sexo?", gender))

    return ProcessedQuestionnaire(
        user_id=user_id,
        extracted_symptoms=tuple(
            ExtractedSymptom(symptom=s, severity="high", duration="2 weeks")
            for s in symptoms
        ),
        risk_factors=tuple(
            ExtractedRiskFactor(factor=f, severity="moderate") for f in risk_factors
        ),
        responses=tuple(
            QuestionnaireResponse(question=q, answer=a) for q, a in all_responses
        ),
    )


def make_data(substring_fallback=True, **kwargs):
    """Extracted medical data for a questionnaire built by make_questionnaire."""
    extractor = MedicalDataExtractor(
        EngineSettings(substring_symptom_fallback=substring_fallback)
    )
    return extractor.extract(make_questionnaire(**kwargs))


class DomainRisks(NamedTuple):
    data: ExtractedMedicalData
    cardiovascular: CardiovascularRisk
    diabetes: DiabetesRisk
    mental_health: MentalHealthRisk
    respiratory: RespiratoryRisk
    composite: CompositeRisk

    @property
    def domains(self):
        return (self.cardiovascular, self.diabetes, self.mental_health, self.respiratory)


def make_risks(**kwargs):
    """Run the four assessors and the composite aggregation."""
    data = make_data(**kwargs)
    cardiovascular = assess_cardiovascular(data)
    diabetes = assess_diabetes(data)
    mental_health = assess_mental_health(data)
    respiratory = assess_respiratory(data)
    composite = aggregate_composite(cardiovascular, diabetes, mental_health, respiratory, data)
    return DomainRisks(data, cardiovascular, diabetes, mental_health, respiratory, composite)


@pytest.fixture
def questionnaire_factory():
    return make_questionnaire


@pytest.fixture
def data_factory():
    return make_data


@pytest.fixture
def risks_factory():
    return make_risks
