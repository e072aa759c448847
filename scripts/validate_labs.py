"""Run every lab step against the seeded databases and report results.

Each step is classified as:
- PASS: enough results came back
- FUNCTIONAL_FAIL: the call worked but returned too little data
- SYNTAX_FAIL / RUNTIME_FAIL: the call raised
- STRUCTURAL_FAIL: the step's shell text is unsafe to paste

The summary ends with a pass rate and a readiness verdict. The exit code
does not reflect readiness; read the printed verdict.
"""

from __future__ import annotations

import logging

import click
from rich.console import Console

from src.harness import OutcomeKind, StepOutcome, TestReport, print_report, run_steps
from src.labs import LabContext, check_prerequisites, registry
from src.store import StoreConfig, get_mongo_client

console = Console()
logger = logging.getLogger(__name__)

_OUTCOME_STYLES = {
    OutcomeKind.PASS: ("✓", "green"),
    OutcomeKind.FUNCTIONAL_FAIL: ("✗", "red"),
    OutcomeKind.SYNTAX_FAIL: ("✗", "red"),
    OutcomeKind.RUNTIME_FAIL: ("✗", "red"),
    OutcomeKind.STRUCTURAL_FAIL: ("⚠", "yellow"),
}


def print_outcome(outcome: StepOutcome) -> None:
    symbol, color = _OUTCOME_STYLES[outcome.kind]
    line = f"  [{color}]{symbol}[/{color}] {outcome.lab} {outcome.step_id}: {outcome.description}"
    if outcome.passed:
        line += f" [dim]({outcome.result_count} results)[/dim]"
    else:
        line += f" [{color}]- {outcome.kind.value}[/{color}]"
    console.print(line)


def run_validation(
    ctx: LabContext,
    labs: tuple[str, ...] = (),
    skip_prerequisites: bool = False,
) -> TestReport:
    """Check prerequisites, then run the selected labs in order."""
    report = TestReport()

    if not skip_prerequisites:
        ok, report = check_prerequisites(ctx, report)
        if not ok:
            console.print("[bold yellow]⚠ Some prerequisites are missing - run seed-labs first[/bold yellow]")

    current_lab = None

    def on_outcome(outcome: StepOutcome) -> None:
        nonlocal current_lab
        if outcome.lab != current_lab:
            current_lab = outcome.lab
            console.print(f"\n[bold cyan]Testing {outcome.lab}[/bold cyan]")
        print_outcome(outcome)

    steps = registry.bind(ctx, labs or None)
    return run_steps(steps, report, on_outcome=on_outcome)


@click.command()
@click.option(
    "--lab",
    "labs",
    multiple=True,
    help="Lab to run, e.g. Lab3 (repeatable; default: all)",
)
@click.option(
    "--skip-prerequisites",
    is_flag=True,
    default=False,
    help="Do not check that seed data is present",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output",
)
def main(labs: tuple[str, ...], skip_prerequisites: bool, verbose: bool) -> None:
    """Validate every lab command against the course databases."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)

    unknown = sorted(set(labs).difference(registry.labs))
    if unknown:
        raise click.BadParameter(
            f"Unknown lab(s): {', '.join(unknown)}. Available: {', '.join(registry.labs)}",
            param_hint="--lab",
        )

    console.print("\n[bold blue]Validating course labs...[/bold blue]")

    config = StoreConfig.from_env()
    client = get_mongo_client(config)
    try:
        report = run_validation(LabContext.from_client(client, config), labs, skip_prerequisites)
    finally:
        client.close()

    console.print()
    print_report(report, console)


if __name__ == "__main__":
    main()
