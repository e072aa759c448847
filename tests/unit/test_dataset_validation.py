"""
Tests for dataset manifest validation.

Validates shipped manifests against src/datasets/schemas/dataset_manifest.schema.json.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from src.validators.validate import (
    load_schema,
    main,
    validate_dataset_dir,
    validate_document_file,
    validate_manifest,
)


@pytest.fixture
def schema(schemas_dir: Path) -> dict:
    return load_schema(schemas_dir / "dataset_manifest.schema.json")


class TestShippedData:

    @pytest.mark.parametrize("dataset", ["insurance_company", "ecommerce"])
    def test_dataset_is_valid(self, data_dir: Path, schema: dict, dataset: str) -> None:
        assert validate_dataset_dir(data_dir / dataset, schema) == {}

    def test_cli_reports_all_valid(self, data_dir: Path) -> None:
        result = CliRunner().invoke(main, [str(data_dir)])
        assert result.exit_code == 0
        assert "All datasets valid" in result.output


class TestManifestSchema:

    def test_minimal_manifest(self, schema: dict) -> None:
        assert validate_manifest({"database": "db", "collections": [{"name": "c"}]}, schema) == []

    def test_missing_database(self, schema: dict) -> None:
        errors = validate_manifest({"collections": []}, schema)
        assert len(errors) == 1
        assert "'database' is a required property" in errors[0]

    def test_bad_index_direction(self, schema: dict) -> None:
        manifest = {
            "database": "db",
            "collections": [{"name": "c", "indexes": [{"keys": [["a", 2]]}]}],
        }
        errors = validate_manifest(manifest, schema)
        assert errors
        assert errors[0].startswith("collections/0/indexes/0/keys/0/1")

    def test_unknown_property(self, schema: dict) -> None:
        errors = validate_manifest({"database": "db", "collections": [], "extra": 1}, schema)
        assert any("extra" in e for e in errors)


class TestDocumentFiles:

    def test_non_array(self, tmp_path: Path) -> None:
        path = tmp_path / "docs.json"
        path.write_text('{"a": 1}', encoding="utf-8")
        assert validate_document_file(path) == ["Expected a JSON array of documents"]

    def test_non_document_entry(self, tmp_path: Path) -> None:
        path = tmp_path / "docs.json"
        path.write_text('[{"a": 1}, 5]', encoding="utf-8")
        assert validate_document_file(path) == ["Entry 1 is not a document"]

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "docs.json"
        path.write_text("[{", encoding="utf-8")
        assert validate_document_file(path)[0].startswith("Invalid Extended JSON")

    def test_missing_manifest(self, tmp_path: Path) -> None:
        results = validate_dataset_dir(tmp_path)
        assert list(results.values()) == [["Manifest not found"]]
