"""
Tests for the packaged course datasets.

Data and schema ship inside ``src.datasets`` so the CLI defaults resolve
in an installed copy, and every module shares one set of path constants.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

import src.datasets as datasets
import src.seeding as seeding
from src.validators import validate

PYPROJECT = Path(__file__).parent.parent.parent / "pyproject.toml"


class TestPackagedPaths:

    def test_data_lives_inside_the_package(self) -> None:
        package_dir = Path(datasets.__file__).parent
        assert datasets.DEFAULT_DATA_PATH.is_relative_to(package_dir)
        assert datasets.MANIFEST_SCHEMA_PATH.is_relative_to(package_dir)
        assert datasets.DEFAULT_DATA_PATH.is_dir()
        assert datasets.MANIFEST_SCHEMA_PATH.is_file()

    def test_every_dataset_has_a_manifest(self) -> None:
        dirs = [p for p in datasets.DEFAULT_DATA_PATH.iterdir() if p.is_dir()]
        assert dirs
        for path in dirs:
            assert (path / datasets.MANIFEST_FILENAME).is_file(), path.name

    def test_validate_cli_default_path_accepted(self) -> None:
        result = CliRunner().invoke(validate.main, [])
        assert result.exit_code == 0, result.output
        assert "All datasets valid" in result.output

    def test_package_data_declared(self) -> None:
        tomllib = pytest.importorskip("tomllib")
        with open(PYPROJECT, "rb") as f:
            config = tomllib.load(f)

        package_data = config["tool"]["setuptools"]["package-data"]["src.datasets"]
        assert "data/*/*.json" in package_data
        assert "schemas/*.json" in package_data


class TestSharedDefinitions:

    def test_modules_share_one_definition(self) -> None:
        assert seeding.DEFAULT_DATA_PATH is datasets.DEFAULT_DATA_PATH
        assert seeding.MANIFEST_FILENAME is datasets.MANIFEST_FILENAME
        assert validate.DEFAULT_DATA_PATH is datasets.DEFAULT_DATA_PATH
        assert validate.MANIFEST_SCHEMA_PATH is datasets.MANIFEST_SCHEMA_PATH

    def test_index_directions_come_from_schema(self) -> None:
        schema = validate.load_schema()
        assert datasets.INDEX_DIRECTIONS == frozenset(schema["definitions"]["indexDirection"]["enum"])
        assert seeding.INDEX_DIRECTIONS is datasets.INDEX_DIRECTIONS

    def test_index_spec_follows_schema_directions(self) -> None:
        for direction in datasets.INDEX_DIRECTIONS:
            spec = seeding.IndexSpec.from_dict({"keys": [["field", direction]]})
            assert spec.keys == (("field", direction),)
