"""
Gemini LLM Client
Handles schema-constrained JSON generation through the Gemini REST API
"""

import json
import logging
import os
from typing import Any, Dict, Optional, Tuple

import requests
from pydantic import ValidationError

from impact_tester.core.models import AnalysisFailure, FailureKind
from impact_tester.core.schemas import describe_validation_error, response_schema, validate_response

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TIMEOUT = 60

UNKNOWN_API_ERROR = "Error desconocido al llamar a la API."
EMPTY_RESPONSE_ERROR = (
    "No se pudieron generar casos de prueba ni análisis. "
    "La respuesta de la IA no fue la esperada."
)

GenerationOutcome = Tuple[Optional[Any], Optional[AnalysisFailure]]


class LLMClient:
    """Client for Gemini generateContent calls with a response schema."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize LLM client.

        Args:
            api_key: Gemini API key (default: GEMINI_API_KEY)
            model: Model to use (default: GEMINI_MODEL or gemini-2.0-flash)
            api_base: API base URL (default: GEMINI_API_BASE)
            timeout: Request timeout in seconds (default: GEMINI_TIMEOUT or 60)
            session: Optional requests session, mainly for tests
        """
        self.api_key = api_key if api_key is not None else os.getenv("GEMINI_API_KEY", "")
        self.model = model or os.getenv("GEMINI_MODEL", DEFAULT_MODEL)
        self.api_base = (api_base or os.getenv("GEMINI_API_BASE", DEFAULT_API_BASE)).rstrip("/")
        self.timeout = timeout or float(os.getenv("GEMINI_TIMEOUT", DEFAULT_TIMEOUT))
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/models/{self.model}:generateContent"

    def status_label(self) -> str:
        """Get a status label for the LLM."""
        if not self.api_key:
            return "AI: OFF (no key)"
        return f"AI: ON ({self.model})"

    def build_payload(self, prompt: str, response_model: Any) -> Dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": response_schema(response_model),
            },
        }

    def generate(self, prompt: str, response_model: Any) -> GenerationOutcome:
        """
        Send a prompt and return the validated response.

        Args:
            prompt: Prompt text
            response_model: Pydantic model (or List[...] of one) describing
                the response; sent as responseSchema and enforced on the
                parsed JSON

        Returns:
            Tuple of (value, failure) where exactly one is set. The value is
            an instance of response_model.
        """
        logger.debug("Calling %s (prompt: %d chars)", self.model, len(prompt))

        # Sent even without a key; the service rejection surfaces as a
        # transport failure
        try:
            resp = self.session.post(
                self.endpoint,
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=self.build_payload(prompt, response_model),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Generation request failed: %s", e)
            return None, AnalysisFailure(
                kind=FailureKind.TRANSPORT,
                message=f"Ocurrió un error de red: {e}",
            )

        if not resp.ok:
            message = self._error_message(resp)
            logger.warning("Generation API returned %s: %s", resp.status_code, message)
            return None, AnalysisFailure(
                kind=FailureKind.TRANSPORT,
                message=f"Error {resp.status_code}: {message}",
                status_code=resp.status_code,
            )

        text = self._extract_text(resp)
        if text is None:
            logger.warning("Generation response had no candidate text")
            return None, AnalysisFailure(
                kind=FailureKind.EMPTY_RESPONSE,
                message=EMPTY_RESPONSE_ERROR,
                status_code=resp.status_code,
            )

        try:
            value = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("Generation response is not valid JSON: %s", e)
            return None, AnalysisFailure(
                kind=FailureKind.SCHEMA_VIOLATION,
                message=f"Error al parsear la respuesta JSON: {e}.",
                raw_payload=text,
            )

        try:
            value = validate_response(value, response_model)
        except ValidationError as e:
            mismatch = describe_validation_error(e)
            logger.warning("Generation response does not match schema: %s", mismatch)
            return None, AnalysisFailure(
                kind=FailureKind.SCHEMA_VIOLATION,
                message=f"La respuesta de la IA no cumple el esquema esperado ({mismatch}).",
                raw_payload=text,
            )

        logger.debug("Generation succeeded (%d chars)", len(text))
        return value, None

    @staticmethod
    def _error_message(resp: requests.Response) -> str:
        """Service-provided error message, or the generic fallback."""
        try:
            body = resp.json()
        except ValueError:
            return UNKNOWN_API_ERROR
        if not isinstance(body, dict):
            return UNKNOWN_API_ERROR
        if body.get("message"):
            return str(body["message"])
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        return UNKNOWN_API_ERROR

    @staticmethod
    def _extract_text(resp: requests.Response) -> Optional[str]:
        """candidates[0].content.parts[0].text, or None when absent."""
        try:
            body = resp.json()
            text = body["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError):
            return None
        return text if isinstance(text, str) else None
