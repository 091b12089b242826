"""Tests for ImmediateActionPublisher.

Emergency assessments publish to Kinesis; the dispatcher behind the stream
owns calls and messages. These tests verify the event format and that a
publishing failure never raises.
"""
import json
import pytest
from unittest.mock import patch, MagicMock

from clinirisk.shared.models import ExtractedSymptom, ProcessedQuestionnaire
from clinirisk.shared.utils import configure_pii_salt, hash_pii, reset_pii_salt
from clinirisk.services.notification_service.publisher import (
    ImmediateActionEvent,
    ImmediateActionPublisher,
)
from clinirisk.services.risk_engine.config import EngineSettings
from clinirisk.services.risk_engine.engine import RiskAssessmentEngine


SALT = "test_salt_that_is_at_least_32_characters_long"


@pytest.fixture(autouse=True)
def setup_pii_salt():
    configure_pii_salt(SALT)


def assess(*symptoms):
    engine = RiskAssessmentEngine(settings=EngineSettings())
    return engine.assess(ProcessedQuestionnaire(
        user_id="patient_001",
        extracted_symptoms=tuple(ExtractedSymptom(symptom=s) for s in symptoms),
    ))


@pytest.fixture
def suicide_assessment():
    return assess("pensamento_suicida", "plano_suicida")


class TestImmediateActionEvent:
    """Tests for ImmediateActionEvent dataclass."""

    def test_from_assessment(self, suicide_assessment):
        event = ImmediateActionEvent.from_assessment(suicide_assessment)

        assert event.event_type == "risk.emergency.detected"
        assert event.assessment_id == suicide_assessment.assessment_id
        assert event.user_id_hash == hash_pii("patient_001")
        assert event.escalation_level == "emergency_services"
        assert event.time_to_escalation == 0
        assert "call" in event.notification_channels
        assert event.alerts[0]["alert_id"] == "alert_suicide"
        assert event.event_id.startswith("evt_")

    def test_to_kinesis_payload(self, suicide_assessment):
        payload = ImmediateActionEvent.from_assessment(suicide_assessment).to_kinesis_payload()

        assert payload["event_type"] == "risk.emergency.detected"
        assert payload["source"] == "risk-engine"
        assert payload["timestamp"].endswith("Z")
        assert payload["data"]["composite_level"] == suicide_assessment.composite.risk_level.value
        assert payload["data"]["automatic_scheduling"] is True
        assert json.loads(json.dumps(payload)) == payload

    def test_payload_has_no_raw_user_id(self, suicide_assessment):
        payload = ImmediateActionEvent.from_assessment(suicide_assessment).to_kinesis_payload()

        assert "patient_001" not in json.dumps(payload)

    def test_event_is_immutable(self, suicide_assessment):
        event = ImmediateActionEvent.from_assessment(suicide_assessment)

        with pytest.raises(Exception):  # FrozenInstanceError
            event.escalation_level = "ai_only"


class TestImmediateActionPublisher:
    """Tests for ImmediateActionPublisher."""

    def test_publisher_initialization(self):
        publisher = ImmediateActionPublisher(
            stream_name="test-stream",
            enabled=True,
            region="sa-east-1",
        )

        assert publisher.stream_name == "test-stream"
        assert publisher.enabled is True
        assert publisher.region == "sa-east-1"

    def test_defaults_from_env(self):
        with patch.dict("os.environ", {
            "RISK_EVENTS_STREAM_NAME": "env-stream",
            "AWS_REGION": "eu-west-1",
        }):
            publisher = ImmediateActionPublisher()

        assert publisher.stream_name == "env-stream"
        assert publisher.region == "eu-west-1"

    def test_publish_disabled_returns_false(self, suicide_assessment):
        publisher = ImmediateActionPublisher(enabled=False)

        assert publisher.trigger_immediate_actions(suicide_assessment) is False

    def test_no_alerts_returns_false(self):
        publisher = ImmediateActionPublisher(enabled=True)
        publisher._kinesis_client = MagicMock()

        assert publisher.trigger_immediate_actions(assess("dor_peito")) is False
        publisher._kinesis_client.put_record.assert_not_called()

    @patch('boto3.client')
    def test_client_created_with_timeouts(self, mock_boto_client):
        publisher = ImmediateActionPublisher(region="sa-east-1", connect_timeout=1, read_timeout=3)

        client = publisher.kinesis_client

        assert client is mock_boto_client.return_value
        args, kwargs = mock_boto_client.call_args
        assert args == ("kinesis",)
        assert kwargs["region_name"] == "sa-east-1"
        assert kwargs["config"].connect_timeout == 1
        assert kwargs["config"].read_timeout == 3

    @patch('boto3.client')
    def test_publish_success(self, mock_boto_client, suicide_assessment):
        """Successful publish should return True."""
        mock_kinesis = MagicMock()
        mock_kinesis.put_record.return_value = {
            "ShardId": "shard-001",
            "SequenceNumber": "12345",
        }
        mock_boto_client.return_value = mock_kinesis

        publisher = ImmediateActionPublisher(stream_name="test-stream", enabled=True)

        result = publisher.trigger_immediate_actions(suicide_assessment)

        assert result is True
        mock_kinesis.put_record.assert_called_once()

        call_kwargs = mock_kinesis.put_record.call_args.kwargs
        assert call_kwargs["StreamName"] == "test-stream"
        assert call_kwargs["PartitionKey"] == hash_pii("patient_001")

        payload = json.loads(call_kwargs["Data"])
        assert payload["data"]["assessment_id"] == suicide_assessment.assessment_id
        assert payload["data"]["escalation_level"] == "emergency_services"

    @patch('boto3.client')
    def test_publish_failure_returns_false(self, mock_boto_client, suicide_assessment):
        """Failed publish should return False, not raise."""
        mock_kinesis = MagicMock()
        mock_kinesis.put_record.side_effect = Exception("Kinesis error")
        mock_boto_client.return_value = mock_kinesis

        publisher = ImmediateActionPublisher(stream_name="test-stream", enabled=True)

        assert publisher.trigger_immediate_actions(suicide_assessment) is False

    @patch('boto3.client')
    def test_publish_without_client_logs_fallback(self, mock_boto_client, suicide_assessment, caplog):
        mock_boto_client.side_effect = Exception("no credentials")
        publisher = ImmediateActionPublisher(stream_name="test-stream", enabled=True)

        with caplog.at_level("CRITICAL"):
            result = publisher.trigger_immediate_actions(suicide_assessment)

        assert result is False
        assert "IMMEDIATE_ACTION_FALLBACK_LOG" in caplog.text

    @patch('boto3.client')
    def test_engine_integration(self, mock_boto_client):
        """The engine hands emergency assessments to the publisher."""
        mock_kinesis = MagicMock()
        mock_kinesis.put_record.return_value = {}
        mock_boto_client.return_value = mock_kinesis

        engine = RiskAssessmentEngine(
            settings=EngineSettings(),
            notifier=ImmediateActionPublisher(stream_name="test-stream"),
        )
        engine.assess(ProcessedQuestionnaire(
            user_id="patient_001",
            extracted_symptoms=(
                ExtractedSymptom(symptom="dor_peito"),
                ExtractedSymptom(symptom="falta_ar"),
            ),
        ))

        payload = json.loads(mock_kinesis.put_record.call_args.kwargs["Data"])
        assert payload["data"]["alerts"][0]["alert_id"] == "alert_acs"

    def test_missing_salt_returns_false(self, suicide_assessment, caplog):
        """Event building errors are reported like publish failures."""
        publisher = ImmediateActionPublisher(stream_name="test-stream", enabled=True)
        publisher._kinesis_client = MagicMock()
        reset_pii_salt()

        try:
            with caplog.at_level("CRITICAL"):
                result = publisher.trigger_immediate_actions(suicide_assessment)
        finally:
            configure_pii_salt(SALT)

        assert result is False
        assert "IMMEDIATE_ACTION_PUBLISH_FAILED" in caplog.text
        publisher._kinesis_client.put_record.assert_not_called()
