"""Lab validation harness - run lab steps and report pass/fail counts."""

from .models import (
    Expectation,
    FailureRecord,
    OutcomeKind,
    StepOutcome,
    TestReport,
    TestStep,
)
from .registry import StepDefinition, StepRegistry
from .report import is_ready, pass_rate, print_report, render_report
from .results import NormalizedResult, ResultKind, normalize_result
from .runner import (
    check_prerequisite,
    classify_error,
    evaluate_step,
    is_deprecated_error,
    is_structural_hazard,
    run_step,
    run_steps,
)

__all__ = [
    "Expectation",
    "FailureRecord",
    "NormalizedResult",
    "OutcomeKind",
    "ResultKind",
    "StepDefinition",
    "StepOutcome",
    "StepRegistry",
    "TestReport",
    "TestStep",
    "check_prerequisite",
    "classify_error",
    "evaluate_step",
    "is_deprecated_error",
    "is_ready",
    "is_structural_hazard",
    "normalize_result",
    "pass_rate",
    "print_report",
    "render_report",
    "run_step",
    "run_steps",
]
