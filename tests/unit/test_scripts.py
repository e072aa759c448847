"""Tests for the command-line entry points."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import click
import pytest
from click.testing import CliRunner
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError
from pymongo.results import InsertOneResult

from scripts import check_connection, repair_relationships, seed_labs, validate_labs
from src.harness import OutcomeKind, StepOutcome, TestReport
from src.labs import LabContext, registry


@pytest.fixture(autouse=True)
def no_env_file(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("src.store.load_dotenv", lambda: None)
    monkeypatch.delenv("MONGODB_SERVER_SELECTION_TIMEOUT_MS", raising=False)


class TestSeedLabs:

    def test_seeds_all_datasets(self, fake_client, data_dir: Path) -> None:
        with patch("scripts.seed_labs.get_mongo_client", return_value=fake_client):
            result = CliRunner().invoke(seed_labs.main, ["--data-path", str(data_dir)])

        assert result.exit_code == 0, result.output
        assert "Seeding complete" in result.output
        assert fake_client["ecommerce"].stores.count_documents({}) > 0
        assert fake_client.closed

    def test_unknown_dataset(self, data_dir: Path) -> None:
        result = CliRunner().invoke(seed_labs.main, ["--data-path", str(data_dir), "--dataset", "nope"])
        assert result.exit_code == 2
        assert "Unknown dataset(s): nope" in result.output

    def test_select_named_dataset(self, data_dir: Path) -> None:
        assert [p.name for p in seed_labs.select_datasets(data_dir, ("ecommerce",))] == ["ecommerce"]

    def test_select_unknown_raises(self, data_dir: Path) -> None:
        with pytest.raises(click.BadParameter):
            seed_labs.select_datasets(data_dir, ("missing",))

    def test_reset_drops_first(self, fake_client, data_dir: Path) -> None:
        fake_client["ecommerce"].leftovers.insert_many([{"_id": 1}])
        with patch("scripts.seed_labs.get_mongo_client", return_value=fake_client):
            result = CliRunner().invoke(
                seed_labs.main,
                ["--data-path", str(data_dir), "--dataset", "ecommerce", "--reset"],
            )

        assert result.exit_code == 0, result.output
        assert "leftovers" not in fake_client["ecommerce"].list_collection_names()


class TestValidateLabs:

    def test_prints_summary(self) -> None:
        outcome = StepOutcome(lab="Lab1", step_id="Step1", description="Check", kind=OutcomeKind.PASS, result_count=1)
        report = TestReport().record(outcome)
        client = MagicMock()

        with patch("scripts.validate_labs.get_mongo_client", return_value=client), \
                patch("scripts.validate_labs.run_validation", return_value=report):
            result = CliRunner().invoke(validate_labs.main, [])

        assert result.exit_code == 0, result.output
        assert "Total Commands Tested: 1" in result.output
        assert "Verdict: COURSE READY" in result.output
        client.close.assert_called_once()

    def test_unknown_lab(self) -> None:
        result = CliRunner().invoke(validate_labs.main, ["--lab", "Lab99"])
        assert result.exit_code == 2
        assert "Unknown lab(s): Lab99" in result.output

    def test_run_validation_only_selected_lab(self) -> None:
        ctx = LabContext.from_client(MagicMock())
        report = validate_labs.run_validation(ctx, ("Lab1",), skip_prerequisites=True)

        assert report.total == len(registry.definitions(["Lab1"]))
        assert report.passed + report.failed == report.total
        assert {o.lab for o in report.outcomes} == {"Lab1"}
        assert report.prerequisite_issues == ()


class TestCheckConnection:

    def test_all_checks_pass(self) -> None:
        client = MagicMock()
        client.admin.command.side_effect = lambda name: {
            "hello": {"isWritablePrimary": True},
            "replSetGetStatus": {"set": "rs0", "members": [{"name": "mongo1:27017", "stateStr": "PRIMARY"}]},
        }[name]
        db = client.__getitem__.return_value
        db.test.insert_one.return_value = InsertOneResult("probe", True)
        db.test.find_one.return_value = {"_id": "probe", "message": check_connection.PROBE_MESSAGE}

        checks = check_connection.run_checks(client)

        assert [c.name for c in checks] == ["Connection", "Replica set", "Write", "Read"]
        assert all(c.passed for c in checks)
        client.drop_database.assert_called_once_with(check_connection.SCRATCH_DATABASE)

    def test_standalone_server_is_only_a_warning(self) -> None:
        client = MagicMock()

        def command(name):
            if name == "replSetGetStatus":
                raise OperationFailure("not running with --replSet")
            return {"isWritablePrimary": True}

        client.admin.command.side_effect = command
        db = client.__getitem__.return_value
        db.test.insert_one.return_value = InsertOneResult("probe", True)
        db.test.find_one.return_value = {"_id": "probe", "message": check_connection.PROBE_MESSAGE}

        checks = check_connection.run_checks(client)
        replica = checks[1]
        assert not replica.passed
        assert not replica.required

    def test_unreachable_server_exits_1(self) -> None:
        client = MagicMock()
        client.admin.command.side_effect = ServerSelectionTimeoutError("localhost:27017: connection refused")

        with patch("scripts.check_connection.get_mongo_client", return_value=client):
            result = CliRunner().invoke(check_connection.main, [])

        assert result.exit_code == 1
        assert "MongoDB setup is not working" in result.output


class TestRepairRelationships:

    def test_dry_run_changes_nothing(self, fake_client) -> None:
        db = fake_client["insurance_company"]
        db.policies.insert_many([{"policyNumber": "POL-A"}])
        db.claims.insert_many([{"_id": 1, "claimNumber": "CLM-1", "policyNumber": "POL-GONE"}])

        with patch("scripts.repair_relationships.get_mongo_client", return_value=fake_client):
            result = CliRunner().invoke(repair_relationships.main, ["--dry-run"])

        assert result.exit_code == 0, result.output
        assert "Claims with invalid policy references: 1" in result.output
        assert db.claims.find()[0]["policyNumber"] == "POL-GONE"

    def test_repairs(self, fake_client) -> None:
        db = fake_client["insurance_company"]
        db.policies.insert_many([{"policyNumber": "POL-A"}])
        db.claims.insert_many([{"_id": 1, "claimNumber": "CLM-1", "policyNumber": "POL-GONE"}])

        with patch("scripts.repair_relationships.get_mongo_client", return_value=fake_client):
            result = CliRunner().invoke(repair_relationships.main, [])

        assert result.exit_code == 0, result.output
        assert "Fixed 1 policy references" in result.output
        assert db.claims.find()[0]["policyNumber"] == "POL-A"
