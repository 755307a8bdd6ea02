"""
Analysis Orchestrator

Runs one analysis end to end:

    IDLE -> VALIDATING -> STAGE1_RUNNING -> STAGE1_DONE -> [STAGE2_RUNNING] -> COMPLETE

with ERRORED reachable from validation and from either running stage.
Stage 2 only runs when stage 1 produced regression suggestions, and a
stage 2 failure keeps the stage 1 data.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import urlparse

from impact_tester.agents.regression_converter import RegressionConverterAgent
from impact_tester.agents.scenario_analyzer import ScenarioAnalyzerAgent
from impact_tester.core.models import (
    AnalysisFailure,
    AnalysisRequest,
    AnalysisResult,
    FailureKind,
    RunState,
)
from impact_tester.utils.identifiers import extract_ticket_id, is_valid_url

logger = logging.getLogger(__name__)

LINK_REQUIRED_MESSAGE = "El enlace de Jira es obligatorio para el análisis de impacto."
DESCRIPTION_REQUIRED_MESSAGE = "Por favor, ingresa la descripción de la historia o épica de Jira."
INVALID_LINK_MESSAGE = "El enlace de Jira no es una URL válida."
CANCELLED_MESSAGE = "El análisis fue cancelado."

# Links on this domain get the simulated context note
PLACEHOLDER_DOMAIN = "example.com"

RunOutcome = Tuple[AnalysisResult, Optional[AnalysisFailure]]


class RunInProgressError(RuntimeError):
    """Raised when a run is requested while another one is in flight"""


def derive_context_note(link: str) -> str:
    """
    Context note for the primary prompt.

    The reference link is never fetched; the note only depends on whether
    its host belongs to the placeholder domain.
    """
    host = (urlparse(link.strip()).hostname or "").lower()
    if host == PLACEHOLDER_DOMAIN or host.endswith("." + PLACEHOLDER_DOMAIN):
        return (
            f"Contexto adicional simulado del enlace de Jira ({link}): Este enlace podría "
            "contener información sobre el proyecto, módulos afectados, historial de cambios, etc."
        )
    return f"No se pudo obtener contexto adicional significativo del enlace: {link}."


def validate_request(request: AnalysisRequest) -> Optional[AnalysisFailure]:
    """Check the run input; no network access."""
    link = (request.reference_link or "").strip()
    if not link:
        return AnalysisFailure(kind=FailureKind.VALIDATION, message=LINK_REQUIRED_MESSAGE)
    if not (request.description or "").strip():
        return AnalysisFailure(kind=FailureKind.VALIDATION, message=DESCRIPTION_REQUIRED_MESSAGE)
    if not is_valid_url(link):
        return AnalysisFailure(kind=FailureKind.VALIDATION, message=INVALID_LINK_MESSAGE)
    return None


class AnalysisOrchestrator:
    """
    Sequences the two generation stages for one UI session.

    The instance keeps the state of the latest run only. Every run gets a
    token; state is committed only while that token is current, so a run
    abandoned through reset() cannot overwrite a newer one.
    """

    def __init__(
        self,
        llm,
        context_provider: Callable[[str], str] = derive_context_note,
        technique_guidance: bool = True,
        language: str = "español"
    ):
        """
        Args:
            llm: Object with generate(prompt, schema) -> (value, failure)
            context_provider: Link to context note
            technique_guidance: Include the technique directive in stage 1
            language: Answer language requested from the model
        """
        self.analyzer = ScenarioAnalyzerAgent(llm, technique_guidance=technique_guidance, language=language)
        self.converter = RegressionConverterAgent(llm)
        self.context_provider = context_provider

        self._lock = threading.Lock()
        self._token = 0
        self._in_flight = False

        self.state = RunState.IDLE
        self.result = AnalysisResult()
        self.error: Optional[AnalysisFailure] = None

    @property
    def is_running(self) -> bool:
        return self._in_flight

    def reset(self) -> None:
        """Abandon the current run, if any, and go back to IDLE."""
        with self._lock:
            self._token += 1
            self._in_flight = False
            self.state = RunState.IDLE
            self.result = AnalysisResult()
            self.error = None

    def run(self, request: AnalysisRequest, cancel_event: Optional[threading.Event] = None) -> RunOutcome:
        """
        Run a full analysis.

        Args:
            request: Reference link and description
            cancel_event: Optional event checked before each network call

        Returns:
            Tuple of (result, failure). On a stage 2 failure the result still
            holds the stage 1 data.

        Raises:
            RunInProgressError: Another run of this orchestrator is in flight
        """
        result = AnalysisResult()
        with self._lock:
            if self._in_flight:
                raise RunInProgressError("Ya hay un análisis en curso.")
            self._token += 1
            token = self._token
            self._in_flight = True
            self.state = RunState.IDLE
            self.result = result
            self.error = None

        try:
            return self._execute(token, request, result, cancel_event)
        finally:
            with self._lock:
                if token == self._token:
                    self._in_flight = False

    def _execute(
        self,
        token: int,
        request: AnalysisRequest,
        result: AnalysisResult,
        cancel_event: Optional[threading.Event]
    ) -> RunOutcome:
        self._transition(token, RunState.VALIDATING)
        failure = validate_request(request)
        if failure:
            return self._fail(token, result, failure)

        link = request.reference_link.strip()
        ticket_id = extract_ticket_id(link)
        try:
            context_note = self.context_provider(link)
        except Exception as e:
            logger.exception("Context provider failed for %s", link)
            return self._fail(token, result, AnalysisFailure(
                FailureKind.TRANSPORT, f"No se pudo obtener contexto del enlace: {e}", stage=1
            ))

        if self._cancelled(cancel_event):
            return self._fail(token, result, AnalysisFailure(FailureKind.CANCELLED, CANCELLED_MESSAGE, stage=1))

        self._transition(token, RunState.STAGE1_RUNNING)
        stage1, failure = self._run_stage(self.analyzer, {
            "description": request.description,
            "context_note": context_note,
            "ticket_id": ticket_id,
        })
        if failure:
            return self._fail(token, result, failure)

        result.primary_scenarios = stage1.primary_scenarios
        result.impact_notes = stage1.impact_notes
        result.regression_suggestions = stage1.regression_suggestions
        self._transition(token, RunState.STAGE1_DONE)

        if not result.regression_suggestions.strip():
            logger.info("No regression suggestions; skipping stage 2")
            self._transition(token, RunState.COMPLETE)
            return result, None

        if self._cancelled(cancel_event):
            return self._fail(token, result, AnalysisFailure(FailureKind.CANCELLED, CANCELLED_MESSAGE, stage=2))

        self._transition(token, RunState.STAGE2_RUNNING)
        scenarios, failure = self._run_stage(self.converter, {
            "regression_suggestions": result.regression_suggestions,
            "ticket_id": ticket_id,
        })
        if failure:
            return self._fail(token, result, failure)

        result.regression_scenarios = scenarios
        self._transition(token, RunState.COMPLETE)
        return result, None

    @staticmethod
    def _run_stage(agent, context: Dict[str, Any]) -> Tuple[Any, Optional[AnalysisFailure]]:
        """Run a stage agent; anything it raises becomes a failure value"""
        try:
            return agent.run(context)
        except Exception as e:
            logger.exception("%s raised", agent.name)
            return None, AnalysisFailure(
                kind=FailureKind.TRANSPORT,
                message=f"Error inesperado en la etapa {agent.stage}: {e}",
                stage=agent.stage,
            )

    @staticmethod
    def _cancelled(cancel_event: Optional[threading.Event]) -> bool:
        return cancel_event is not None and cancel_event.is_set()

    def _transition(self, token: int, state: RunState) -> bool:
        with self._lock:
            if token != self._token:
                logger.debug("Ignoring %s from stale run %d", state.value, token)
                return False
            self.state = state
        logger.info("Analysis run %d -> %s", token, state.value)
        return True

    def _fail(self, token: int, result: AnalysisResult, failure: AnalysisFailure) -> RunOutcome:
        logger.warning("Analysis run %d failed (%s): %s", token, failure.kind.value, failure.message)
        with self._lock:
            if token == self._token:
                self.error = failure
                self.state = RunState.ERRORED
        return result, failure
