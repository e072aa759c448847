"""Data models for the lab validation harness."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

COMMAND_PREVIEW_LENGTH = 100


class OutcomeKind(str, Enum):
    """Classification of a single lab step.

    PASS: result count met the expectation.
    FUNCTIONAL_FAIL: the store answered, but with too few results.
    SYNTAX_FAIL: the call was malformed (parse or syntax error text).
    RUNTIME_FAIL: any other raised error.
    STRUCTURAL_FAIL: the step's shell text would hang an interactive
        shell when pasted, so it was not executed.
    """
    PASS = "PASS"
    FUNCTIONAL_FAIL = "FUNCTIONAL_FAIL"
    SYNTAX_FAIL = "SYNTAX_FAIL"
    RUNTIME_FAIL = "RUNTIME_FAIL"
    STRUCTURAL_FAIL = "STRUCTURAL_FAIL"

    @property
    def passed(self) -> bool:
        return self is OutcomeKind.PASS


@dataclass(frozen=True)
class Expectation:
    """Minimum result count for a step; 0 means "must not raise"."""

    min_results: int = 1

    def __post_init__(self) -> None:
        if self.min_results < 0:
            raise ValueError(f"min_results must be >= 0, got {self.min_results}")


@dataclass(frozen=True)
class TestStep:
    """One unit of lab work, evaluated exactly once per run."""

    __test__ = False

    lab: str
    step_id: str
    description: str
    operation: Callable[[], Any]
    expectation: Expectation = field(default_factory=Expectation)
    source: str | None = None

    @property
    def command_text(self) -> str:
        """Shell text shown to students, falling back to the description."""
        return self.source if self.source is not None else self.description


@dataclass(frozen=True)
class StepOutcome:
    """Result of evaluating one TestStep."""

    lab: str
    step_id: str
    description: str
    kind: OutcomeKind
    result_count: int = 0
    message: str = ""
    command: str = ""
    deprecated: bool = False

    @property
    def passed(self) -> bool:
        return self.kind.passed


@dataclass(frozen=True)
class FailureRecord:
    """A non-passing step as listed in the report."""

    lab: str
    step_id: str
    command: str
    error: str


def truncate_command(text: str, limit: int = COMMAND_PREVIEW_LENGTH) -> str:
    """Shorten command text for the failure list."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


@dataclass(frozen=True)
class TestReport:
    """Accumulated results of one validation run.

    The report is immutable; ``record`` returns a new report with the
    outcome folded in, so ``passed + failed == total`` holds after every
    step.
    """

    __test__ = False

    total: int = 0
    passed: int = 0
    failed: int = 0
    structural_issues: int = 0
    deprecated_issues: int = 0
    outcomes: tuple[StepOutcome, ...] = ()
    failures: tuple[FailureRecord, ...] = ()
    prerequisite_issues: tuple[str, ...] = ()

    def record(self, outcome: StepOutcome) -> TestReport:
        """Fold a step outcome into a new report."""
        if outcome.passed:
            return replace(
                self,
                total=self.total + 1,
                passed=self.passed + 1,
                outcomes=self.outcomes + (outcome,),
            )

        failure = FailureRecord(
            lab=outcome.lab,
            step_id=outcome.step_id,
            command=outcome.command,
            error=outcome.message,
        )
        return replace(
            self,
            total=self.total + 1,
            failed=self.failed + 1,
            structural_issues=self.structural_issues + int(outcome.kind is OutcomeKind.STRUCTURAL_FAIL),
            deprecated_issues=self.deprecated_issues + int(outcome.deprecated),
            outcomes=self.outcomes + (outcome,),
            failures=self.failures + (failure,),
        )

    def record_prerequisite_issue(self, issue: str) -> TestReport:
        """Note a missing prerequisite; does not count toward totals."""
        return replace(self, prerequisite_issues=self.prerequisite_issues + (issue,))

    def count_by_kind(self, kind: OutcomeKind) -> int:
        return sum(1 for o in self.outcomes if o.kind is kind)

    def lab_summary(self) -> list[tuple[str, int, int]]:
        """Per-lab (lab, passed, total) in first-seen order."""
        summary: dict[str, list[int]] = {}
        for outcome in self.outcomes:
            counts = summary.setdefault(outcome.lab, [0, 0])
            counts[0] += int(outcome.passed)
            counts[1] += 1
        return [(lab, passed, total) for lab, (passed, total) in summary.items()]
