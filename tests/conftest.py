"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides
fixtures that can be used across all test files.
"""
import json
import pytest
from unittest.mock import Mock

from impact_tester.core.models import (
    TestScenario,
    AnalysisRequest,
    AnalysisResult,
    AnalysisFailure,
    FailureKind
)


# ===== Test Data Fixtures =====

@pytest.fixture
def sample_scenario_payload():
    """Fixture providing one scenario object as returned by the model"""
    return {
        "jiraId": "PROJ-123",
        "feature": "Gestión de Usuarios (Use Case Testing)",
        "scenario": "Validar Inicio de sesión exitoso",
        "given": "Estoy en la página de inicio de sesión\nY tengo credenciales válidas",
        "when": "Ingreso mis credenciales",
        "then": "Debería ser redirigido al panel de control",
        "priority": "Alta"
    }


@pytest.fixture
def primary_payload(sample_scenario_payload):
    """Fixture providing a full stage 1 payload"""
    return {
        "testCases": [
            dict(sample_scenario_payload, scenario="Validar cierre de sesión", priority="Baja"),
            sample_scenario_payload,
            dict(sample_scenario_payload, scenario="Validar bloqueo de cuenta", priority="Media"),
        ],
        "impacts": "Impacto en el módulo de sesiones\nImpacto en auditoría",
        "regressionTests": "Regresión de recuperación de contraseña\nRegresión de registro"
    }


@pytest.fixture
def regression_payload(sample_scenario_payload):
    """Fixture providing a stage 2 payload"""
    return [
        dict(sample_scenario_payload, scenario="Validar registro", priority="Media"),
        dict(sample_scenario_payload, scenario="Validar recuperación de contraseña", priority="High"),
    ]


@pytest.fixture
def sample_request():
    """Fixture providing a valid analysis request"""
    return AnalysisRequest(
        reference_link="https://jira.example.com/browse/PROJ-123",
        description="Como usuario, quiero iniciar sesión con mi correo y contraseña."
    )


@pytest.fixture
def sample_result():
    """Fixture providing a populated analysis result"""
    return AnalysisResult(
        primary_scenarios=[
            TestScenario(
                ticket_id="PROJ-123",
                feature="Login",
                scenario="Validar acceso",
                given="Dado algo",
                when="Cuando algo",
                then="Entonces algo",
                priority="Alta"
            )
        ],
        impact_notes="Impacto 1\nImpacto 2",
        regression_suggestions="Regresión 1",
        regression_scenarios=[
            TestScenario(ticket_id="PROJ-123", scenario="Validar regresión 1", priority="Media")
        ]
    )


# ===== Mock Fixtures =====

@pytest.fixture
def mock_llm_client():
    """Fixture providing a mocked LLM client with a generate() method"""
    mock = Mock()
    mock.generate.return_value = ({"testCases": [], "impacts": "", "regressionTests": ""}, None)
    return mock


@pytest.fixture
def transport_failure():
    """Fixture providing a transport failure"""
    return AnalysisFailure(
        kind=FailureKind.TRANSPORT,
        message="Error 500: backend unavailable",
        status_code=500
    )


@pytest.fixture
def make_response():
    """Fixture providing a factory for fake requests.Response objects"""
    def _factory(status_code=200, body=None, text=None):
        resp = Mock()
        resp.status_code = status_code
        resp.ok = 200 <= status_code < 300
        if body is None and text is None:
            resp.json.side_effect = ValueError("No JSON")
        else:
            resp.json.return_value = body
        resp.text = text if text is not None else json.dumps(body)
        return resp

    return _factory


@pytest.fixture
def gemini_body():
    """Fixture providing a factory wrapping a JSON text in a Gemini envelope"""
    def _factory(payload_text):
        return {"candidates": [{"content": {"parts": [{"text": payload_text}]}}]}

    return _factory


# ===== Pytest Configuration =====

def pytest_configure(config):
    """Pytest configuration hook"""
    # Add custom markers
    config.addinivalue_line(
        "markers",
        "unit: Unit tests (fast, isolated)"
    )
    config.addinivalue_line(
        "markers",
        "integration: Integration tests (slower, may use real APIs)"
    )
    config.addinivalue_line(
        "markers",
        "requires_api_key: Tests that require a Gemini API key"
    )
