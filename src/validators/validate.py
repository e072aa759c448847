"""Dataset validation utilities.

Checks that each dataset manifest matches the manifest JSON schema and
that every document file it names decodes to an array of documents.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click
import jsonschema
from bson import json_util
from rich.console import Console

from src.datasets import DEFAULT_DATA_PATH, MANIFEST_FILENAME, MANIFEST_SCHEMA_PATH

console = Console()


def load_schema(schema_path: Path = MANIFEST_SCHEMA_PATH) -> dict[str, Any]:
    """Load a JSON schema from file."""
    with open(schema_path) as f:
        return json.load(f)


def validate_manifest(manifest: dict[str, Any], schema: dict[str, Any] | None = None) -> list[str]:
    """Validate a parsed manifest against the schema.

    Returns:
        List of validation errors (empty if valid)
    """
    if schema is None:
        schema = load_schema()

    validator = jsonschema.Draft7Validator(schema)
    return [
        f"{'/'.join(str(p) for p in error.absolute_path) or '<root>'}: {error.message}"
        for error in sorted(validator.iter_errors(manifest), key=lambda e: list(e.absolute_path))
    ]


def validate_document_file(file_path: Path) -> list[str]:
    """Check that a file holds an Extended JSON array of documents."""
    errors: list[str] = []

    try:
        with open(file_path, encoding="utf-8") as f:
            documents = json_util.loads(f.read())
    except (json.JSONDecodeError, ValueError, TypeError) as e:
        return [f"Invalid Extended JSON: {e}"]

    if not isinstance(documents, list):
        return ["Expected a JSON array of documents"]

    for position, doc in enumerate(documents):
        if not isinstance(doc, dict):
            errors.append(f"Entry {position} is not a document")

    return errors


def validate_dataset_dir(
    dataset_path: Path,
    schema: dict[str, Any] | None = None,
) -> dict[str, list[str]]:
    """Validate a dataset directory's manifest and document files.

    Returns:
        Dict mapping file paths to their validation errors
    """
    results: dict[str, list[str]] = {}
    manifest_path = dataset_path / MANIFEST_FILENAME

    try:
        with open(manifest_path) as f:
            manifest = json.load(f)
    except FileNotFoundError:
        return {str(manifest_path): ["Manifest not found"]}
    except json.JSONDecodeError as e:
        return {str(manifest_path): [f"Invalid JSON: {e}"]}

    errors = validate_manifest(manifest, schema)
    if errors:
        results[str(manifest_path)] = errors
        return results

    for entry in manifest["collections"]:
        file_path = dataset_path / entry.get("file", f"{entry['name']}.json")
        if not file_path.exists():
            results[str(file_path)] = ["Document file not found"]
            continue
        errors = validate_document_file(file_path)
        if errors:
            results[str(file_path)] = errors

    return results


@click.command()
@click.argument(
    "data_path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=DEFAULT_DATA_PATH,
)
def main(data_path: Path) -> None:
    """Validate every dataset under DATA_PATH."""
    console.print(f"[bold blue]Validating datasets in {data_path}...[/bold blue]")

    schema = load_schema()
    dataset_dirs = sorted(p for p in data_path.iterdir() if p.is_dir())
    failed = 0

    for dataset_dir in dataset_dirs:
        results = validate_dataset_dir(dataset_dir, schema)
        if results:
            failed += 1
            for path, errors in results.items():
                console.print(f"[red]✗ {path}[/red]")
                for error in errors:
                    console.print(f"    {error}")
        else:
            console.print(f"[green]✓ {dataset_dir.name}[/green]")

    if failed:
        console.print(f"\n[red]{failed} dataset(s) failed validation[/red]")
    else:
        console.print("[green]✓ All datasets valid[/green]")


if __name__ == "__main__":
    main()
