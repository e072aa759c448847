"""Repair claims that reference missing policies or customers."""

from __future__ import annotations

import logging

import click
from rich.console import Console

from src.seeding.relationships import (
    find_claims_with_unknown_customers,
    find_orphaned_claims,
    repair_claim_customers,
    repair_claim_policies,
)
from src.store import StoreConfig, get_mongo_client

console = Console()


@click.command()
@click.option("--dry-run", is_flag=True, help="Report broken references without fixing them")
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output",
)
def main(dry_run: bool, verbose: bool) -> None:
    """Fix claim-policy and claim-customer references."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)
    console.print("\n[bold blue]Checking data relationships...[/bold blue]\n")

    config = StoreConfig.from_env()
    client = get_mongo_client(config)
    db = client[config.insurance_db]

    try:
        orphaned = find_orphaned_claims(db)
        unknown_customers = find_claims_with_unknown_customers(db)

        console.print(f"  Claims with invalid policy references: {len(orphaned)}")
        for claim in orphaned:
            console.print(f"    - {claim.get('claimNumber')} -> {claim.get('policyNumber')}")
        console.print(f"  Claims with invalid customer references: {len(unknown_customers)}")
        for claim in unknown_customers:
            console.print(f"    - {claim.get('claimNumber')} -> {claim.get('customerId')}")

        if dry_run:
            console.print("\n[yellow]Dry run mode - no changes applied[/yellow]")
            return

        fixed_policies = repair_claim_policies(db)
        fixed_customers = repair_claim_customers(db)
        console.print(f"\n  ✓ Fixed {fixed_policies} policy references")
        console.print(f"  ✓ Fixed {fixed_customers} customer references")
        console.print("\n[bold green]Relationship repair complete![/bold green]")
    finally:
        client.close()


if __name__ == "__main__":
    main()
