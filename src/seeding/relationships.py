"""Detect and repair broken references between insurance collections.

Claims reference policies by ``policyNumber`` and customers by
``customerId``. Lab exercises that delete or rewrite documents can leave
claims pointing at records that no longer exist, which breaks the
``$lookup`` labs. Orphaned claims are reassigned round-robin to valid
references.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pymongo.database import Database

logger = logging.getLogger(__name__)


def _find_orphans(db: Database, field: str, source: str) -> tuple[list[Any], list[dict[str, Any]]]:
    valid = db[source].distinct(field)
    orphans = list(db.claims.find({field: {"$exists": True, "$nin": valid}}))
    return valid, orphans


def _reassign(db: Database, field: str, valid: list[Any], orphans: list[dict[str, Any]]) -> int:
    if not valid:
        logger.warning(f"No valid {field} values to reassign {len(orphans)} claims to")
        return 0

    fixed = 0
    for index, claim in enumerate(orphans):
        target = valid[index % len(valid)]
        result = db.claims.update_one({"_id": claim["_id"]}, {"$set": {field: target}})
        fixed += result.modified_count
        logger.info(f"Claim {claim.get('claimNumber', claim['_id'])}: {field} -> {target}")
    return fixed


def find_orphaned_claims(db: Database) -> list[dict[str, Any]]:
    """Claims whose policyNumber does not match any policy."""
    return _find_orphans(db, "policyNumber", "policies")[1]


def find_claims_with_unknown_customers(db: Database) -> list[dict[str, Any]]:
    """Claims whose customerId does not match any customer."""
    return _find_orphans(db, "customerId", "customers")[1]


def repair_claim_policies(db: Database) -> int:
    """Point orphaned claims at existing policies.

    Returns:
        Number of claims updated.
    """
    valid, orphans = _find_orphans(db, "policyNumber", "policies")
    if not orphans:
        return 0
    return _reassign(db, "policyNumber", sorted(valid), orphans)


def repair_claim_customers(db: Database) -> int:
    """Point claims with unknown customers at existing customers."""
    valid, orphans = _find_orphans(db, "customerId", "customers")
    if not orphans:
        return 0
    return _reassign(db, "customerId", sorted(valid), orphans)
