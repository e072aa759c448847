"""Seed the course databases with fixed sample data.

This script seeds MongoDB with:
1. E-commerce data (stores, products, customers, orders)
2. Insurance data (branches, policies, customers, agents, claims,
   payments, reviews)
3. Supporting indexes (geospatial, text, unique, compound)

Every collection is dropped and re-inserted, so re-running the script
leaves the same dataset rather than a growing one.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.progress import Progress
from rich.table import Table

from src.seeding import (
    DEFAULT_DATA_PATH,
    SeedingStats,
    discover_datasets,
    load_dataset,
    reset_databases,
    seed_dataset,
)
from src.store import StoreConfig, get_mongo_client

console = Console()
logger = logging.getLogger(__name__)


def select_datasets(data_path: Path, names: tuple[str, ...]) -> list[Path]:
    """Pick dataset directories by name (all of them when none given)."""
    available = discover_datasets(data_path)
    if not names:
        return available

    by_name = {p.name: p for p in available}
    missing = [n for n in names if n not in by_name]
    if missing:
        raise click.BadParameter(
            f"Unknown dataset(s): {', '.join(missing)}. Available: {', '.join(sorted(by_name))}",
            param_hint="--dataset",
        )
    return [by_name[n] for n in names]


def print_stats(all_stats: list[SeedingStats]) -> None:
    table = Table(title="Seeded Collections")
    table.add_column("Database", style="cyan")
    table.add_column("Collection", style="cyan")
    table.add_column("Documents", justify="right")

    for stats in all_stats:
        for collection, count in stats.per_collection.items():
            table.add_row(stats.database, collection, str(count))

    console.print(table)


@click.command()
@click.option(
    "--data-path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=DEFAULT_DATA_PATH,
    help="Path to the data directory",
)
@click.option(
    "--dataset",
    "datasets",
    multiple=True,
    help="Dataset directory to seed (repeatable; default: all)",
)
@click.option(
    "--reset",
    is_flag=True,
    default=False,
    help="Drop every collection in the target databases first",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output",
)
def main(data_path: Path, datasets: tuple[str, ...], reset: bool, verbose: bool) -> None:
    """Seed MongoDB with the course sample datasets."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)

    dataset_paths = select_datasets(data_path, datasets)
    if not dataset_paths:
        console.print(f"[bold yellow]No datasets found in {data_path}[/bold yellow]")
        return

    console.print("\n[bold blue]Seeding course databases...[/bold blue]\n")

    client = get_mongo_client(StoreConfig.from_env())
    all_stats: list[SeedingStats] = []

    try:
        loaded = [load_dataset(p) for p in dataset_paths]

        if reset:
            dropped = reset_databases(client, [d.database for d in loaded])
            for name, count in dropped.items():
                console.print(f"  ✓ Reset {name}: dropped {count} collections")

        with Progress() as progress:
            task = progress.add_task("[green]Seeding...", total=len(loaded))
            for dataset in loaded:
                stats = seed_dataset(client, dataset)
                all_stats.append(stats)
                console.print(
                    f"  ✓ {stats.database}: {stats.documents_inserted} documents in "
                    f"{stats.collections_seeded} collections, {stats.indexes_created} indexes"
                )
                progress.update(task, advance=1)

        console.print()
        print_stats(all_stats)
        console.print("\n[bold green]Seeding complete![/bold green]")

    except Exception as e:
        console.print(f"\n[bold red]Error: {e}[/bold red]")
        raise
    finally:
        client.close()


if __name__ == "__main__":
    main()
