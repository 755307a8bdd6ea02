"""
Base Agent Class
Provides common functionality for the generation stage agents
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from impact_tester.core.models import AnalysisFailure, FailureKind, TestScenario
from impact_tester.core.schemas import ScenarioModel, describe_validation_error, validate_response
from impact_tester.utils.priority import sort_by_priority

logger = logging.getLogger(__name__)


class BaseAgent:
    """Base class for the agents of the analysis pipeline"""

    stage: Optional[int] = None

    def __init__(self, llm):
        """
        Initialize the agent with an LLM client

        Args:
            llm: LLMClient instance for making API calls
        """
        self.llm = llm
        self.name = self.__class__.__name__

    def run(self, context: Dict[str, Any], **kwargs) -> Tuple[Any, Optional[AnalysisFailure]]:
        """
        Main execution method - must be implemented by subclasses

        Args:
            context: Dictionary containing all necessary context for the agent
            **kwargs: Additional keyword arguments

        Returns:
            Tuple of (result, failure) where failure is None on success
        """
        raise NotImplementedError(f"{self.name} must implement run()")

    def _call_llm(self, prompt: str, response_model: Any) -> Tuple[Optional[Any], Optional[AnalysisFailure]]:
        """
        Standard LLM call with error handling

        Unexpected exceptions from the client are reported as transport
        failures so a run always ends in a terminal state. The returned value
        is validated against response_model whatever generate()
        implementation produced it.

        Args:
            prompt: Prompt text
            response_model: Pydantic response model (or List[...] of one)

        Returns:
            Tuple of (value, failure) where failure is None on success
        """
        try:
            value, failure = self.llm.generate(prompt, response_model)
        except Exception as e:
            logger.exception("%s LLM call raised", self.name)
            return None, self._tag(AnalysisFailure(
                kind=FailureKind.TRANSPORT,
                message=self._format_error(f"LLM call failed: {e}"),
            ))
        if failure is not None:
            return None, self._tag(failure)

        try:
            return validate_response(value, response_model), None
        except ValidationError as e:
            mismatch = describe_validation_error(e)
            logger.warning("%s got a malformed response: %s", self.name, mismatch)
            return None, self._tag(AnalysisFailure(
                kind=FailureKind.SCHEMA_VIOLATION,
                message=f"La respuesta de la IA no cumple el esquema esperado ({mismatch}).",
                raw_payload=json.dumps(value, ensure_ascii=False, default=str),
            ))

    def _parse_scenarios(self, items: List[ScenarioModel]) -> List[TestScenario]:
        """Validated scenario models to priority-sorted scenarios"""
        return sort_by_priority(TestScenario.from_payload(item.model_dump()) for item in items)

    def _tag(self, failure: AnalysisFailure) -> AnalysisFailure:
        if failure.stage is None:
            failure.stage = self.stage
        return failure

    def _format_error(self, error_msg: str) -> str:
        """
        Format error message with agent name

        Args:
            error_msg: Raw error message

        Returns:
            Formatted error message
        """
        return f"[{self.name}] {error_msg}"
