"""Sequential lab step runner.

Each step is evaluated exactly once, in order, and folded into an
immutable ``TestReport``. No step can abort the run: every exception is
caught at the step boundary and recorded as a failure.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from .models import (
    OutcomeKind,
    StepOutcome,
    TestReport,
    TestStep,
    truncate_command,
)
from .results import normalize_result

logger = logging.getLogger(__name__)

# Constructs that hang a line-oriented shell when pasted across lines
STRUCTURAL_MARKERS = ("function", "{", "forEach", "switch(", "try {", "} catch")
SYNTAX_ERROR_MARKERS = (
    "SyntaxError",
    "syntax",
    "Unexpected token",
    "semicolon",
    "unknown operator",
    "FailedToParse",
)
DEPRECATION_MARKERS = (
    "not callable",
    "not a function",
    "deprecated",
    "no such command",
)
STRUCTURAL_MESSAGE = "Multi-line command will lock the shell when copy-pasted"


def is_structural_hazard(source: str | None) -> bool:
    """Check whether shell text is unsafe to paste into an interactive shell."""
    if not source or "\n" not in source:
        return False
    return any(marker in source for marker in STRUCTURAL_MARKERS)


def error_text(exc: BaseException) -> str:
    """Error message used for classification and reporting."""
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


def classify_error(exc: BaseException) -> OutcomeKind:
    """SYNTAX_FAIL for malformed calls, RUNTIME_FAIL for everything else."""
    if isinstance(exc, SyntaxError):
        return OutcomeKind.SYNTAX_FAIL
    text = error_text(exc)
    if any(marker in text for marker in SYNTAX_ERROR_MARKERS):
        return OutcomeKind.SYNTAX_FAIL
    return OutcomeKind.RUNTIME_FAIL


def is_deprecated_error(message: str) -> bool:
    """Check whether an error points at a removed or deprecated call."""
    return any(marker in message for marker in DEPRECATION_MARKERS)


def evaluate_step(step: TestStep) -> StepOutcome:
    """Execute one step and classify its outcome without raising."""
    command = truncate_command(step.command_text)
    base = {
        "lab": step.lab,
        "step_id": step.step_id,
        "description": step.description,
        "command": command,
    }

    if is_structural_hazard(step.source):
        return StepOutcome(kind=OutcomeKind.STRUCTURAL_FAIL, message=STRUCTURAL_MESSAGE, **base)

    try:
        normalized = normalize_result(step.operation())
    except Exception as e:
        message = error_text(e)
        return StepOutcome(
            kind=classify_error(e),
            message=message,
            deprecated=is_deprecated_error(message),
            **base,
        )

    minimum = step.expectation.min_results
    if normalized.count >= minimum:
        return StepOutcome(kind=OutcomeKind.PASS, result_count=normalized.count, **base)

    return StepOutcome(
        kind=OutcomeKind.FUNCTIONAL_FAIL,
        result_count=normalized.count,
        message=f"Expected {minimum}+ results, got {normalized.count}",
        **base,
    )


def run_step(step: TestStep, report: TestReport) -> tuple[StepOutcome, TestReport]:
    """Evaluate a step and fold it into the report."""
    outcome = evaluate_step(step)
    if outcome.passed:
        logger.debug(f"PASS {step.lab} {step.step_id}: {step.description} ({outcome.result_count} results)")
    else:
        logger.debug(f"{outcome.kind.value} {step.lab} {step.step_id}: {outcome.message}")
    return outcome, report.record(outcome)


def run_steps(
    steps: Iterable[TestStep],
    report: TestReport | None = None,
    on_outcome: Callable[[StepOutcome], None] | None = None,
) -> TestReport:
    """Run steps strictly in order and return the folded report.

    Args:
        steps: Steps in declaration order.
        report: Report to continue from (a fresh one by default).
        on_outcome: Called after each step, e.g. to print progress.
    """
    if report is None:
        report = TestReport()

    for step in steps:
        outcome, report = run_step(step, report)
        if on_outcome is not None:
            on_outcome(outcome)

    return report


def check_prerequisite(
    description: str,
    check: Callable[[], object],
    report: TestReport,
) -> tuple[bool, TestReport]:
    """Evaluate a precondition; failures are noted but not counted as steps."""
    try:
        ok = bool(check())
    except Exception as e:
        return False, report.record_prerequisite_issue(
            f"Prerequisite error: {description} - {error_text(e)}"
        )

    if not ok:
        return False, report.record_prerequisite_issue(f"Prerequisite missing: {description}")
    return True, report
