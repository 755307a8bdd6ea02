"""
Impact Tester Agents Module
One agent per generation stage of the analysis pipeline
"""

from .base_agent import BaseAgent
from .scenario_analyzer import ScenarioAnalyzerAgent
from .regression_converter import RegressionConverterAgent

__all__ = [
    'BaseAgent',
    'ScenarioAnalyzerAgent',
    'RegressionConverterAgent',
]
