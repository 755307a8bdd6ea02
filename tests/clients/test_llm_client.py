"""
Unit tests for the Gemini LLM client

Tests cover:
1. Configuration from arguments and environment
2. Request payload and endpoint
3. Failure classification (transport, empty response, schema violation)
4. Successful schema-shaped responses
"""

import json
import pytest
import requests
from unittest.mock import Mock
from impact_tester.clients.llm_client import LLMClient, UNKNOWN_API_ERROR, DEFAULT_MODEL
from impact_tester.core.models import FailureKind
from impact_tester.core.schemas import PrimaryResponse, RegressionResponse, response_schema


@pytest.fixture
def session():
    """Create a mock requests session"""
    return Mock()


@pytest.fixture
def client(session):
    """Create a client bound to the mock session"""
    return LLMClient(api_key="test-key", model="gemini-test", api_base="https://api.test/v1beta/", session=session)


# ============================================================================
# CONFIGURATION TESTS
# ============================================================================

class TestLLMClientConfiguration:
    """Tests for LLMClient initialization"""

    def test_endpoint(self, client):
        assert client.endpoint == "https://api.test/v1beta/models/gemini-test:generateContent"

    def test_env_configuration(self, monkeypatch, session):
        """Test that settings come from the environment"""
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        monkeypatch.setenv("GEMINI_MODEL", "gemini-env")
        monkeypatch.setenv("GEMINI_TIMEOUT", "5")

        llm = LLMClient(session=session)

        assert llm.api_key == "env-key"
        assert llm.model == "gemini-env"
        assert llm.timeout == 5.0

    def test_defaults_without_key(self, monkeypatch, session):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("GEMINI_MODEL", raising=False)

        llm = LLMClient(session=session)

        assert llm.model == DEFAULT_MODEL
        assert llm.status_label() == "AI: OFF (no key)"

    def test_status_label_on(self, client):
        assert client.status_label() == "AI: ON (gemini-test)"


# ============================================================================
# REQUEST TESTS
# ============================================================================

class TestGenerateRequest:
    """Tests for the outgoing request"""

    def test_payload_shape(self, client, session, make_response, gemini_body):
        """Test that prompt and schema are sent in the Gemini format"""
        session.post.return_value = make_response(200, gemini_body("[]"))

        client.generate("Hola", RegressionResponse)

        args, kwargs = session.post.call_args
        assert args[0] == client.endpoint
        assert kwargs["params"] == {"key": "test-key"}
        assert kwargs["json"] == {
            "contents": [{"role": "user", "parts": [{"text": "Hola"}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": response_schema(RegressionResponse),
            },
        }
        assert kwargs["headers"] == {"Content-Type": "application/json"}
        assert kwargs["timeout"] == client.timeout

    def test_caller_session_left_untouched(self):
        """Test that a caller-supplied session keeps its own headers"""
        session = requests.Session()
        before = dict(session.headers)

        LLMClient(api_key="k", session=session)

        assert dict(session.headers) == before

    def test_no_retries(self, client, session, make_response):
        """Test that a failure is returned after a single attempt"""
        session.post.return_value = make_response(503, {"message": "busy"})

        client.generate("p", RegressionResponse)

        assert session.post.call_count == 1


# ============================================================================
# FAILURE CLASSIFICATION TESTS
# ============================================================================

class TestGenerateFailures:
    """Tests for failure classification"""

    def test_network_error(self, client, session):
        session.post.side_effect = requests.ConnectionError("connection refused")

        value, failure = client.generate("p", RegressionResponse)

        assert value is None
        assert failure.kind == FailureKind.TRANSPORT
        assert "connection refused" in failure.message
        assert failure.status_code is None

    def test_http_error_with_message(self, client, session, make_response):
        session.post.return_value = make_response(400, {"message": "Bad prompt"})

        _, failure = client.generate("p", RegressionResponse)

        assert failure.kind == FailureKind.TRANSPORT
        assert failure.status_code == 400
        assert failure.message == "Error 400: Bad prompt"

    def test_http_error_google_envelope(self, client, session, make_response):
        """Test that Google's {error: {message}} body is understood"""
        session.post.return_value = make_response(401, {"error": {"code": 401, "message": "API key not valid"}})

        _, failure = client.generate("p", RegressionResponse)

        assert failure.status_code == 401
        assert failure.message == "Error 401: API key not valid"

    def test_http_error_without_message(self, client, session, make_response):
        """Test the generic fallback message"""
        session.post.return_value = make_response(500)

        _, failure = client.generate("p", RegressionResponse)

        assert failure.message == f"Error 500: {UNKNOWN_API_ERROR}"

    @pytest.mark.parametrize("body", [
        {},
        {"candidates": []},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"finishReason": "SAFETY"}]},
        {"candidates": [{"content": {"parts": [{"text": None}]}}]},
    ])
    def test_empty_response(self, client, session, make_response, body):
        session.post.return_value = make_response(200, body)

        value, failure = client.generate("p", RegressionResponse)

        assert value is None
        assert failure.kind == FailureKind.EMPTY_RESPONSE

    def test_invalid_json_text(self, client, session, make_response, gemini_body):
        session.post.return_value = make_response(200, gemini_body("not { json"))

        _, failure = client.generate("p", RegressionResponse)

        assert failure.kind == FailureKind.SCHEMA_VIOLATION
        assert failure.raw_payload == "not { json"

    def test_wrong_shape(self, client, session, make_response, gemini_body):
        """Test that an object where an array is declared is a schema violation"""
        text = json.dumps({"testCases": []})
        session.post.return_value = make_response(200, gemini_body(text))

        _, failure = client.generate("p", RegressionResponse)

        assert failure.kind == FailureKind.SCHEMA_VIOLATION
        assert failure.raw_payload == text
        assert failure.message.startswith("La respuesta de la IA no cumple el esquema esperado ($:")


# ============================================================================
# SUCCESS TESTS
# ============================================================================

class TestGenerateSuccess:
    """Tests for successful generation"""

    def test_returns_parsed_value(self, client, session, make_response, gemini_body, primary_payload):
        session.post.return_value = make_response(200, gemini_body(json.dumps(primary_payload)))

        value, failure = client.generate("p", PrimaryResponse)

        assert failure is None
        assert isinstance(value, PrimaryResponse)
        assert value.model_dump() == primary_payload

    def test_returns_scenario_list(self, client, session, make_response, gemini_body, regression_payload):
        session.post.return_value = make_response(200, gemini_body(json.dumps(regression_payload)))

        value, failure = client.generate("p", RegressionResponse)

        assert failure is None
        assert [s.priority for s in value] == ["Media", "High"]

    def test_missing_key_still_calls_service(self, monkeypatch, session, make_response):
        """Test that a missing key surfaces as the service's transport failure"""
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        session.post.return_value = make_response(403, {"error": {"message": "Method doesn't allow unregistered callers"}})

        _, failure = LLMClient(session=session).generate("p", RegressionResponse)

        assert session.post.called
        assert failure.kind == FailureKind.TRANSPORT
        assert failure.status_code == 403
