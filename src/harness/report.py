"""Render a completed TestReport as a console summary."""

from __future__ import annotations

from rich.console import Console

from .models import OutcomeKind, TestReport

BANNER = "=" * 80
READY_VERDICT = "COURSE READY"
NOT_READY_VERDICT = "COURSE NOT READY"


def pass_rate(report: TestReport) -> str:
    """Pass percentage with one decimal, e.g. ``"90.0"``."""
    if report.total == 0:
        return "0.0"
    return f"{report.passed / report.total * 100:.1f}"


def is_ready(report: TestReport) -> bool:
    """Course is ready only when every step ran and passed."""
    return report.total > 0 and report.failed == 0 and pass_rate(report) == "100.0"


def render_report(report: TestReport) -> str:
    """Deterministic text summary of a run."""
    lines = [
        BANNER,
        "LAB VALIDATION RESULTS SUMMARY",
        BANNER,
        "",
        "RESULTS BY LAB:",
    ]
    lab_summary = report.lab_summary()
    if lab_summary:
        for lab, passed, total in lab_summary:
            lines.append(f"  {lab}: {passed}/{total} passed")
    else:
        lines.append("  No steps were run.")

    lines += [
        "",
        f"Total Commands Tested: {report.total}",
        f"Passed: {report.passed}",
        f"Failed: {report.failed}",
        f"  Functional Failures: {report.count_by_kind(OutcomeKind.FUNCTIONAL_FAIL)}",
        f"  Syntax Errors: {report.count_by_kind(OutcomeKind.SYNTAX_FAIL)}",
        f"  Runtime Errors: {report.count_by_kind(OutcomeKind.RUNTIME_FAIL)}",
        f"Structural Issues: {report.structural_issues}",
        f"Deprecated Issues: {report.deprecated_issues}",
        "",
        "DETAILED ERROR REPORT:",
    ]
    if not report.failures:
        lines.append("  No errors found. All commands passed.")
    for number, failure in enumerate(report.failures, start=1):
        lines += [
            f"{number}. {failure.lab} {failure.step_id}:",
            f"   Command: {failure.command}",
            f"   Error: {failure.error}",
        ]

    if report.prerequisite_issues:
        lines += ["", "PREREQUISITE ISSUES:"]
        lines += [f"  - {issue}" for issue in report.prerequisite_issues]

    verdict = READY_VERDICT if is_ready(report) else NOT_READY_VERDICT
    lines += [
        "",
        f"Pass Rate: {pass_rate(report)}%",
        f"Verdict: {verdict}",
    ]
    return "\n".join(lines)


def _line_style(line: str, report: TestReport) -> str | None:
    if line.startswith("Verdict:"):
        return "bold green" if is_ready(report) else "bold red"
    if line.startswith("Passed:"):
        return "green"
    if line.startswith("Failed:") and report.failed:
        return "red"
    if line.startswith(("Structural Issues:", "Deprecated Issues:")) and not line.endswith(" 0"):
        return "yellow"
    if line in (BANNER, "LAB VALIDATION RESULTS SUMMARY"):
        return "bold blue"
    return None


def print_report(report: TestReport, console: Console | None = None) -> None:
    """Print the rendered summary, coloring the key lines."""
    if console is None:
        console = Console()
    for line in render_report(report).splitlines():
        console.print(line, style=_line_style(line, report), markup=False, highlight=False)
