"""Verify the MongoDB deployment before loading course data.

Checks, in order:
1. Connection (hello)
2. Replica set status (warning only; Labs 10, 11 and 13 need one)
3. Write to a scratch database
4. Read the write back, then drop the scratch database

Exits with status 1 when a required check fails.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from src.store import StoreConfig, get_mongo_client

console = Console()

SCRATCH_DATABASE = "test_connection"
PROBE_MESSAGE = "If you see this, writes are working!"


@dataclass
class ConnectionCheck:
    """Result of a connection check."""

    name: str
    passed: bool
    message: str = ""
    required: bool = True


def check_hello(client: Any) -> ConnectionCheck:
    try:
        result = client.admin.command("hello")
    except Exception as e:
        return ConnectionCheck(name="Connection", passed=False, message=str(e))
    return ConnectionCheck(
        name="Connection",
        passed=True,
        message=f"writable primary: {result.get('isWritablePrimary', False)}",
    )


def check_replica_set(client: Any) -> ConnectionCheck:
    try:
        status = client.admin.command("replSetGetStatus")
    except Exception as e:
        return ConnectionCheck(name="Replica set", passed=False, message=str(e), required=False)
    members = ", ".join(f"{m['name']} ({m['stateStr']})" for m in status.get("members", []))
    return ConnectionCheck(
        name="Replica set",
        passed=True,
        message=f"{status.get('set')}: {members}",
        required=False,
    )


def check_write_read(client: Any) -> list[ConnectionCheck]:
    """Insert a probe document, read it back and drop the scratch database."""
    db = client[SCRATCH_DATABASE]
    checks = []

    try:
        result = db.test.insert_one({
            "test": "connection",
            "timestamp": datetime.now(timezone.utc),
            "message": PROBE_MESSAGE,
        })
        checks.append(ConnectionCheck(name="Write", passed=result.acknowledged))
    except Exception as e:
        checks.append(ConnectionCheck(name="Write", passed=False, message=str(e)))
        return checks

    try:
        doc = db.test.find_one({"_id": result.inserted_id})
        found = doc is not None and doc.get("message") == PROBE_MESSAGE
        checks.append(ConnectionCheck(
            name="Read",
            passed=found,
            message="" if found else "probe document not found",
        ))
    except Exception as e:
        checks.append(ConnectionCheck(name="Read", passed=False, message=str(e)))
    finally:
        client.drop_database(SCRATCH_DATABASE)

    return checks


def run_checks(client: Any) -> list[ConnectionCheck]:
    checks = [check_hello(client)]
    if not checks[0].passed:
        return checks
    checks.append(check_replica_set(client))
    checks.extend(check_write_read(client))
    return checks


@click.command()
def main() -> None:
    """Check MongoDB connectivity, replica set status and read/write access."""
    console.print("\n[bold blue]Checking MongoDB connection...[/bold blue]\n")

    config = StoreConfig.from_env()
    client = get_mongo_client(config)
    try:
        checks = run_checks(client)
    finally:
        client.close()

    table = Table(title=f"MongoDB at {config.uri}")
    table.add_column("Check", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Details")

    for check in checks:
        if check.passed:
            status = "[green]✓[/green]"
        elif check.required:
            status = "[red]✗[/red]"
        else:
            status = "[yellow]⚠[/yellow]"
        table.add_row(check.name, status, check.message)

    console.print(table)
    console.print()

    if any(c.required and not c.passed for c in checks):
        console.print("[bold red]✗ MongoDB setup is not working[/bold red]\n")
        sys.exit(1)

    console.print("[bold green]✓ MongoDB setup is working - you can now run seed-labs[/bold green]\n")


if __name__ == "__main__":
    main()
