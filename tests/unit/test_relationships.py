"""Tests for claim reference repair."""

from src.seeding.relationships import (
    find_claims_with_unknown_customers,
    find_orphaned_claims,
    repair_claim_customers,
    repair_claim_policies,
)


def seed_claims(db) -> None:
    db.policies.insert_many([{"policyNumber": "POL-B"}, {"policyNumber": "POL-A"}])
    db.customers.insert_many([{"customerId": "CUST1"}])
    db.claims.insert_many([
        {"_id": 1, "claimNumber": "CLM-1", "policyNumber": "POL-A", "customerId": "CUST1"},
        {"_id": 2, "claimNumber": "CLM-2", "policyNumber": "POL-GONE", "customerId": "CUST9"},
        {"_id": 3, "claimNumber": "CLM-3", "policyNumber": "POL-LOST", "customerId": "CUST1"},
        {"_id": 4, "claimNumber": "CLM-4"},
    ])


class TestFindOrphans:

    def test_orphaned_policies(self, fake_db) -> None:
        seed_claims(fake_db)
        assert [c["_id"] for c in find_orphaned_claims(fake_db)] == [2, 3]

    def test_unknown_customers(self, fake_db) -> None:
        seed_claims(fake_db)
        assert [c["_id"] for c in find_claims_with_unknown_customers(fake_db)] == [2]


class TestRepair:

    def test_policies_reassigned_round_robin(self, fake_db) -> None:
        seed_claims(fake_db)

        assert repair_claim_policies(fake_db) == 2

        claims = {c["_id"]: c for c in fake_db.claims.find()}
        assert claims[2]["policyNumber"] == "POL-A"
        assert claims[3]["policyNumber"] == "POL-B"
        assert find_orphaned_claims(fake_db) == []

    def test_customers_reassigned(self, fake_db) -> None:
        seed_claims(fake_db)
        assert repair_claim_customers(fake_db) == 1
        assert find_claims_with_unknown_customers(fake_db) == []

    def test_nothing_to_repair(self, fake_db) -> None:
        fake_db.policies.insert_many([{"policyNumber": "POL-A"}])
        fake_db.claims.insert_many([{"policyNumber": "POL-A"}])
        assert repair_claim_policies(fake_db) == 0

    def test_no_valid_targets(self, fake_db) -> None:
        fake_db.claims.insert_many([{"policyNumber": "POL-GONE"}])
        assert repair_claim_policies(fake_db) == 0
        assert len(find_orphaned_claims(fake_db)) == 1
