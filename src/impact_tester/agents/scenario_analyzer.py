"""
Scenario Analyzer Agent - stage 1 of the analysis.

Generates Gherkin scenarios, impact notes and regression suggestions for a
ticket description.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from impact_tester.agents.base_agent import BaseAgent
from impact_tester.agents.prompts import build_primary_prompt
from impact_tester.core.models import AnalysisFailure, AnalysisResult
from impact_tester.core.schemas import PrimaryResponse

logger = logging.getLogger(__name__)


class ScenarioAnalyzerAgent(BaseAgent):
    """Stage 1: description and context note to a partial AnalysisResult."""

    stage = 1

    def __init__(self, llm, technique_guidance: bool = True, language: str = "español"):
        super().__init__(llm)
        self.technique_guidance = technique_guidance
        self.language = language

    def run(self, context: Dict[str, Any], **kwargs) -> Tuple[Optional[AnalysisResult], Optional[AnalysisFailure]]:
        """
        Args:
            context: Must hold "description", "context_note" and "ticket_id"

        Returns:
            Tuple of (result, failure). The result has regression_scenarios
            left as None.
        """
        prompt = build_primary_prompt(
            context["description"],
            context.get("context_note", ""),
            context.get("ticket_id", ""),
            technique_guidance=self.technique_guidance,
            language=self.language,
        )

        response, failure = self._call_llm(prompt, PrimaryResponse)
        if failure:
            return None, failure

        result = AnalysisResult(
            primary_scenarios=self._parse_scenarios(response.testCases),
            impact_notes=response.impacts,
            regression_suggestions=response.regressionTests,
        )
        logger.info(
            "Stage 1 produced %d scenarios (impacts: %s, regression suggestions: %s)",
            len(result.primary_scenarios),
            bool(result.impact_notes.strip()),
            bool(result.regression_suggestions.strip()),
        )
        return result, None
