"""
Core data models for Impact Tester.

Scenario records, run input/output and the typed failure carried through
the client, agents and orchestrator.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from enum import Enum


class FailureKind(Enum):
    """Classification of a failed analysis step"""
    VALIDATION = "ValidationError"
    TRANSPORT = "TransportError"
    EMPTY_RESPONSE = "EmptyResponse"
    SCHEMA_VIOLATION = "SchemaViolation"
    CANCELLED = "Cancelled"


class RunState(Enum):
    """Lifecycle of a single analysis run"""
    IDLE = "idle"
    VALIDATING = "validating"
    STAGE1_RUNNING = "stage1_running"
    STAGE1_DONE = "stage1_done"
    STAGE2_RUNNING = "stage2_running"
    COMPLETE = "complete"
    ERRORED = "errored"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.COMPLETE, RunState.ERRORED)


@dataclass(frozen=True)
class TestScenario:
    """One Given/When/Then test case with its ticket, feature and priority"""
    ticket_id: str = ""
    feature: str = ""
    scenario: str = ""
    given: str = ""
    when: str = ""
    then: str = ""
    priority: str = ""

    # JSON keys used by the generation schema
    FIELD_KEYS = (
        ("ticket_id", "jiraId"),
        ("feature", "feature"),
        ("scenario", "scenario"),
        ("given", "given"),
        ("when", "when"),
        ("then", "then"),
        ("priority", "priority"),
    )

    @classmethod
    def from_payload(cls, item: Dict[str, Any]) -> "TestScenario":
        """Build a scenario from one schema-validated response object"""
        values = {}
        for attr, key in cls.FIELD_KEYS:
            value = item.get(key)
            values[attr] = value if isinstance(value, str) else ""
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary using the response JSON keys"""
        return {key: getattr(self, attr) for attr, key in self.FIELD_KEYS}

    def to_row(self) -> List[str]:
        """Values in export column order"""
        return [getattr(self, attr) for attr, _ in self.FIELD_KEYS]


@dataclass
class AnalysisRequest:
    """Input of one analysis run"""
    reference_link: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reference_link": self.reference_link,
            "description": self.description,
        }


@dataclass
class AnalysisResult:
    """
    Aggregate output of one orchestration run.

    regression_scenarios is None when stage 2 never ran (or failed) and an
    empty list when it ran but produced nothing.
    """
    primary_scenarios: List[TestScenario] = field(default_factory=list)
    impact_notes: str = ""
    regression_suggestions: str = ""
    regression_scenarios: Optional[List[TestScenario]] = None

    def has_content(self) -> bool:
        """True when there is anything worth exporting"""
        return bool(
            self.primary_scenarios
            or self.regression_scenarios
            or self.impact_notes.strip()
            or self.regression_suggestions.strip()
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisResult":
        regression = data.get("regression_scenarios")
        return cls(
            primary_scenarios=[
                TestScenario.from_payload(item) for item in data.get("primary_scenarios") or []
            ],
            impact_notes=data.get("impact_notes") or "",
            regression_suggestions=data.get("regression_suggestions") or "",
            regression_scenarios=(
                None if regression is None
                else [TestScenario.from_payload(item) for item in regression]
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "primary_scenarios": [s.to_dict() for s in self.primary_scenarios],
            "impact_notes": self.impact_notes,
            "regression_suggestions": self.regression_suggestions,
            "regression_scenarios": (
                None if self.regression_scenarios is None
                else [s.to_dict() for s in self.regression_scenarios]
            ),
            "stats": {
                "primary_count": len(self.primary_scenarios),
                "regression_count": len(self.regression_scenarios or []),
            },
        }


@dataclass
class AnalysisFailure:
    """A classified failure with a user-facing message"""
    kind: FailureKind
    message: str
    status_code: Optional[int] = None
    raw_payload: Optional[str] = None
    stage: Optional[int] = None

    def __post_init__(self):
        if not self.message or not self.message.strip():
            raise ValueError("Failure message cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "status_code": self.status_code,
            "raw_payload": self.raw_payload,
            "stage": self.stage,
        }
