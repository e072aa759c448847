"""Orchestrate connection check, data seeding and lab validation."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import click
from rich.console import Console

from src.seeding import DEFAULT_DATA_PATH

console = Console()

PROJECT_ROOT = Path(__file__).parent.parent


def run_module(module: str, *args: str) -> int:
    """Run a script module from the project root and return its exit code."""
    result = subprocess.run(
        [sys.executable, "-m", module, *args],
        cwd=PROJECT_ROOT,
        capture_output=False,
    )
    return result.returncode


@click.command()
@click.option(
    "--data-path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=DEFAULT_DATA_PATH,
    help="Path to the data directory",
)
@click.option("--reset", is_flag=True, help="Drop every collection in the course databases first")
@click.option("--skip-check", is_flag=True, help="Skip the connection check")
@click.option("--skip-validation", is_flag=True, help="Skip lab validation")
def main(
    data_path: Path,
    reset: bool,
    skip_check: bool,
    skip_validation: bool,
) -> None:
    """Check the connection, seed all datasets and validate the labs."""
    console.print("[bold blue]Starting full course setup...[/bold blue]")
    console.print()

    # Connection check
    if not skip_check:
        console.print("[bold cyan]Step 1/3: Checking connection...[/bold cyan]")
        if run_module("scripts.check_connection") != 0:
            console.print("[bold red]Connection check failed![/bold red]")
            sys.exit(1)
        console.print()

    # Seed
    console.print("[bold cyan]Step 2/3: Seeding datasets...[/bold cyan]")
    seed_args = ["--data-path", str(data_path)]
    if reset:
        seed_args.append("--reset")
    if run_module("scripts.seed_labs", *seed_args) != 0:
        console.print("[bold red]Seeding failed![/bold red]")
        sys.exit(1)
    console.print()

    # Validate
    if not skip_validation:
        console.print("[bold cyan]Step 3/3: Validating labs...[/bold cyan]")
        if run_module("scripts.validate_labs") != 0:
            console.print("[bold red]Lab validation crashed![/bold red]")
            sys.exit(1)
        console.print()

    console.print("[bold green]✓ Full course setup complete![/bold green]")


if __name__ == "__main__":
    main()
