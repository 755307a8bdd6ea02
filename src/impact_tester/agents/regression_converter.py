"""
Regression Converter Agent - stage 2 of the analysis.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from impact_tester.agents.base_agent import BaseAgent
from impact_tester.agents.prompts import build_regression_conversion_prompt
from impact_tester.core.models import AnalysisFailure, TestScenario
from impact_tester.core.schemas import RegressionResponse

logger = logging.getLogger(__name__)


class RegressionConverterAgent(BaseAgent):
    """Stage 2: free-text regression suggestions to scenario records."""

    stage = 2

    def run(self, context: Dict[str, Any], **kwargs) -> Tuple[Optional[List[TestScenario]], Optional[AnalysisFailure]]:
        """
        Args:
            context: Must hold "regression_suggestions" and "ticket_id"

        Returns:
            Tuple of (scenarios, failure)
        """
        prompt = build_regression_conversion_prompt(
            context["regression_suggestions"],
            context.get("ticket_id", ""),
        )

        response, failure = self._call_llm(prompt, RegressionResponse)
        if failure:
            return None, failure

        scenarios = self._parse_scenarios(response)
        logger.info("Stage 2 produced %d regression scenarios", len(scenarios))
        return scenarios, None
