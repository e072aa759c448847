"""Shared context and registry for the lab catalog."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.harness import StepRegistry, TestReport, check_prerequisite
from src.store import StoreConfig

if TYPE_CHECKING:
    from pymongo import MongoClient
    from pymongo.database import Database

registry = StepRegistry()


@dataclass(frozen=True)
class LabContext:
    """Database handles every lab step receives."""

    client: MongoClient
    insurance: Database
    ecommerce: Database

    @classmethod
    def from_client(cls, client: MongoClient, config: StoreConfig | None = None) -> LabContext:
        if config is None:
            config = StoreConfig()
        return cls(
            client=client,
            insurance=client[config.insurance_db],
            ecommerce=client[config.ecommerce_db],
        )


PREREQUISITES: list[tuple[str, Callable[[LabContext], object]]] = [
    ("Insurance database has policies", lambda ctx: ctx.insurance.policies.count_documents({}) > 0),
    ("Insurance database has customers", lambda ctx: ctx.insurance.customers.count_documents({}) > 0),
    ("Insurance database has claims", lambda ctx: ctx.insurance.claims.count_documents({}) > 0),
    ("E-commerce database has stores", lambda ctx: ctx.ecommerce.stores.count_documents({}) > 0),
    ("E-commerce database has orders", lambda ctx: ctx.ecommerce.orders.count_documents({}) > 0),
]


def check_prerequisites(ctx: LabContext, report: TestReport) -> tuple[bool, TestReport]:
    """Check that seeded data is present before running the labs."""
    all_ok = True
    for description, check in PREREQUISITES:
        ok, report = check_prerequisite(description, lambda check=check: check(ctx), report)
        all_ok = all_ok and ok
    return all_ok, report
