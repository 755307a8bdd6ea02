"""Impact Tester - test scenarios and impact analysis for Jira stories"""

__version__ = "1.0.0"

from .core.models import (
    TestScenario,
    AnalysisRequest,
    AnalysisResult,
    AnalysisFailure,
    FailureKind,
    RunState
)

from .clients.llm_client import LLMClient
from .orchestrators.analysis_orchestrator import AnalysisOrchestrator

__all__ = [
    'TestScenario',
    'AnalysisRequest',
    'AnalysisResult',
    'AnalysisFailure',
    'FailureKind',
    'RunState',
    'LLMClient',
    'AnalysisOrchestrator',
]
