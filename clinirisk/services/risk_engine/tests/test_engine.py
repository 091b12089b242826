"""Tests for RiskAssessmentEngine.

End-to-end clinical scenarios plus collaborator behaviour: the assessment
must come back to the caller even when storage or notification fails.
"""
import json
import logging
import re
from datetime import timezone
from unittest.mock import MagicMock, patch

import pytest

from clinirisk.shared.models import (
    CardiovascularRiskLevel,
    CompositeRiskLevel,
    DiabetesRiskLevel,
    EscalationLevel,
    EscalationTier,
    ExtractedRiskFactor,
    ExtractedSymptom,
    NotificationChannel,
    ProcessedQuestionnaire,
    QuestionnaireValidationError,
    SuicideRiskLevel,
)
from clinirisk.services.risk_engine.cardiovascular import ACUTE_CORONARY_SYNDROME
from clinirisk.services.risk_engine.config import EngineSettings
from clinirisk.services.risk_engine.engine import (
    AssessmentStore,
    ImmediateActionTrigger,
    RiskAssessmentEngine,
)

TRIAD = ["sede_excessiva", "fome_excessiva", "urina_frequente"]


@pytest.fixture
def store():
    return MagicMock(spec=AssessmentStore)


@pytest.fixture
def notifier():
    trigger = MagicMock(spec=ImmediateActionTrigger)
    trigger.trigger_immediate_actions.return_value = True
    return trigger


@pytest.fixture
def engine(store, notifier):
    return RiskAssessmentEngine(settings=EngineSettings(), store=store, notifier=notifier)


class TestClinicalScenarios:

    def test_acute_coronary_syndrome(self, questionnaire_factory, engine):
        assessment = engine.assess(questionnaire_factory(symptoms=["dor_peito", "falta_ar"]))

        assert ACUTE_CORONARY_SYNDROME in assessment.cardiovascular.emergency_indicators
        assert assessment.cardiovascular.risk_level is CardiovascularRiskLevel.VERY_HIGH
        assert assessment.cardiovascular.time_to_escalation <= 2
        assert assessment.composite.emergency_escalation is True
        assert assessment.has_emergency is True

    def test_classic_diabetes_triad(self, questionnaire_factory, engine):
        assessment = engine.assess(questionnaire_factory(symptoms=TRIAD))

        assert assessment.diabetes.classic_triad.triad_complete is True
        assert assessment.diabetes.classic_triad.triad_score == 60
        assert assessment.diabetes.risk_level in (DiabetesRiskLevel.HIGH, DiabetesRiskLevel.CRITICAL)

    def test_imminent_suicide_risk(self, questionnaire_factory, engine):
        assessment = engine.assess(
            questionnaire_factory(symptoms=["pensamento_suicida", "plano_suicida"])
        )
        protocol = assessment.escalation_protocol

        assert assessment.mental_health.suicide_risk.risk_level is SuicideRiskLevel.IMMINENT
        assert assessment.mental_health.suicide_risk.immediate_intervention is True
        assert protocol.immediate is True
        assert protocol.escalation_level is EscalationLevel.EMERGENCY_SERVICES
        assert NotificationChannel.CALL in protocol.notification_channels

    def test_low_risk_young_adult(self, questionnaire_factory, engine):
        assessment = engine.assess(questionnaire_factory(age=25))

        assert assessment.composite.risk_level is CompositeRiskLevel.LOW
        assert assessment.composite.emergency_escalation is False
        assert assessment.composite.routine_followup is False
        assert assessment.emergency_alerts == ()
        assert assessment.escalation_protocol.escalation_level is EscalationLevel.AI_ONLY

    def test_diabetes_cardiovascular_synergy(self, questionnaire_factory, engine):
        assessment = engine.assess(questionnaire_factory(symptoms=TRIAD + ["dor_peito"]))

        assert assessment.composite.synergy_factor > 1

    def test_emergency_tier_excludes_other_flags(self, questionnaire_factory, engine):
        assessment = engine.assess(questionnaire_factory(symptoms=["dor_peito", "falta_ar"]))
        composite = assessment.composite

        assert composite.escalation_tier is EscalationTier.EMERGENCY
        assert composite.urgent_escalation is False
        assert composite.routine_followup is False


class TestAssessmentOutput:

    def test_assessment_id_format(self, questionnaire_factory, engine):
        assessment = engine.assess(questionnaire_factory())

        assert re.fullmatch(r"assessment_\d{13}_[0-9a-f]{12}", assessment.assessment_id)

    def test_assessment_ids_unique(self, questionnaire_factory, engine):
        ids = {engine.assess(questionnaire_factory()).assessment_id for _ in range(20)}

        assert len(ids) == 20

    def test_timestamp_is_utc(self, questionnaire_factory, engine):
        assessment = engine.assess(questionnaire_factory())

        assert assessment.timestamp.tzinfo is timezone.utc

    def test_to_dict_is_json_serializable(self, questionnaire_factory, engine):
        assessment = engine.assess(
            questionnaire_factory(symptoms=["dor_peito", "falta_ar", "pensamento_suicida", "plano_suicida"])
        )

        result = json.loads(json.dumps(assessment.to_dict()))

        assert result["user_id"] == "patient_001"
        assert result["composite"]["emergency_escalation"] is True
        assert result["escalation_protocol"]["escalation_level"] == "emergency_services"
        assert result["emergency_alerts"][0]["alert_id"] == "alert_suicide"
        assert result["timestamp"].endswith("Z")

    def test_summary_has_no_identifiers(self, questionnaire_factory, engine):
        summary = engine.assess(questionnaire_factory(user_id="maria.silva")).summary()

        assert "maria.silva" not in json.dumps(summary)

    def test_same_input_same_clinical_output(self, questionnaire_factory, engine):
        questionnaire = questionnaire_factory(symptoms=TRIAD + ["dor_peito", "tentativa_anterior"], age=58)

        first = engine.assess(questionnaire).to_dict()
        second = engine.assess(questionnaire).to_dict()

        for result in (first, second):
            del result["assessment_id"]
            del result["timestamp"]
        assert first == second

    def test_parallel_matches_sequential(self, questionnaire_factory):
        questionnaire = questionnaire_factory(
            symptoms=TRIAD + ["dor_peito", "falta_ar", "chiado", "ronco"],
            risk_factors=["fumante"],
            age=67,
            gender="masculino",
        )
        sequential = RiskAssessmentEngine(settings=EngineSettings(parallel_assessors=False))
        parallel = RiskAssessmentEngine(settings=EngineSettings(parallel_assessors=True))

        first = sequential.assess(questionnaire).to_dict()
        second = parallel.assess(questionnaire).to_dict()

        for result in (first, second):
            del result["assessment_id"]
            del result["timestamp"]
        assert first == second

    def test_assess_payload(self, engine):
        assessment = engine.assess_payload({
            "userId": "patient_009",
            "extractedSymptoms": [{"symptom": "dor_peito"}, {"symptom": "falta_ar"}],
            "riskFactors": [],
            "responses": [{"question": "Qual a sua idade?", "answer": "58"}],
        })

        assert assessment.user_id == "patient_009"
        assert assessment.has_emergency is True


class TestValidation:

    def test_malformed_payload_rejected(self, engine, store):
        with pytest.raises(QuestionnaireValidationError):
            engine.assess_payload({"userId": "patient_001"})

        store.store.assert_not_called()

    def test_bad_age_rejected_before_storage(self, questionnaire_factory, engine, store, notifier):
        questionnaire = questionnaire_factory(responses=[("Qual a sua idade?", "muitos")])

        with pytest.raises(QuestionnaireValidationError):
            engine.assess(questionnaire)

        store.store.assert_not_called()
        notifier.trigger_immediate_actions.assert_not_called()

    @pytest.mark.parametrize("fields", [
        {"extracted_symptoms": (ExtractedSymptom(symptom=None),)},
        {"extracted_symptoms": None},
        {"risk_factors": (ExtractedRiskFactor(factor=None),)},
        {"responses": None},
    ])
    def test_malformed_questionnaire_rejected(self, engine, store, notifier, fields, caplog):
        questionnaire = ProcessedQuestionnaire(user_id="patient_001", **fields)

        with caplog.at_level(logging.INFO):
            with pytest.raises(QuestionnaireValidationError):
                engine.assess(questionnaire)

        assert "RISK_ASSESSMENT_STARTED" not in caplog.text
        store.store.assert_not_called()
        notifier.trigger_immediate_actions.assert_not_called()


class TestCollaborators:

    def test_store_called_once(self, questionnaire_factory, engine, store):
        assessment = engine.assess(questionnaire_factory(age=25))

        store.store.assert_called_once_with(assessment)

    def test_notifier_only_on_emergency(self, questionnaire_factory, engine, notifier):
        engine.assess(questionnaire_factory(symptoms=["dor_peito"]))
        notifier.trigger_immediate_actions.assert_not_called()

        assessment = engine.assess(questionnaire_factory(symptoms=["dor_peito", "falta_ar"]))
        notifier.trigger_immediate_actions.assert_called_once_with(assessment)

    def test_store_failure_still_returns_assessment(self, questionnaire_factory, engine, store, notifier, caplog):
        store.store.side_effect = ConnectionError("database down")

        with caplog.at_level(logging.CRITICAL):
            assessment = engine.assess(questionnaire_factory(symptoms=["dor_peito", "falta_ar"]))

        assert assessment.has_emergency is True
        assert "ASSESSMENT_STORE_FAILED" in caplog.text
        notifier.trigger_immediate_actions.assert_called_once()

    def test_notifier_failure_still_returns_assessment(self, questionnaire_factory, engine, notifier, caplog):
        notifier.trigger_immediate_actions.side_effect = RuntimeError("stream unavailable")

        with caplog.at_level(logging.CRITICAL):
            assessment = engine.assess(
                questionnaire_factory(symptoms=["pensamento_suicida", "plano_suicida"])
            )

        assert assessment.escalation_protocol.immediate is True
        assert "IMMEDIATE_ACTIONS_FAILED" in caplog.text

    def test_notifier_reporting_failure_is_logged(self, questionnaire_factory, engine, notifier, caplog):
        notifier.trigger_immediate_actions.return_value = False

        with caplog.at_level(logging.CRITICAL):
            engine.assess(questionnaire_factory(symptoms=["cetose"]))

        assert "IMMEDIATE_ACTIONS_FAILED" in caplog.text

    def test_missing_notifier_logged_on_emergency(self, questionnaire_factory, caplog):
        engine = RiskAssessmentEngine(settings=EngineSettings())

        with caplog.at_level(logging.CRITICAL):
            assessment = engine.assess(questionnaire_factory(symptoms=["dor_peito", "falta_ar"]))

        assert assessment.has_emergency is True
        assert "IMMEDIATE_ACTIONS_NOT_CONFIGURED" in caplog.text

    def test_emergency_logged_critical(self, questionnaire_factory, engine, caplog):
        with caplog.at_level(logging.CRITICAL):
            engine.assess(questionnaire_factory(symptoms=["dor_peito", "falta_ar"]))

        assert "EMERGENCY_ESCALATION_DETECTED" in caplog.text


class TestEngineSettings:

    def test_defaults_from_env(self):
        with patch.dict("os.environ", {}, clear=True):
            settings = EngineSettings.from_env()

        assert settings.parallel_assessors is False
        assert settings.substring_symptom_fallback is True

    def test_overrides_from_env(self):
        env = {"RISK_ENGINE_PARALLEL": "true", "RISK_ENGINE_SUBSTRING_FALLBACK": "false"}
        with patch.dict("os.environ", env, clear=True):
            settings = EngineSettings.from_env()

        assert settings.parallel_assessors is True
        assert settings.substring_symptom_fallback is False
