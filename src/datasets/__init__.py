"""Course datasets and the manifest schema, shipped as package data.

Layout::

    data/<database>/manifest.json
    data/<database>/<collection>.json
    schemas/dataset_manifest.schema.json
"""

from __future__ import annotations

import json
from pathlib import Path

PACKAGE_DIR = Path(__file__).parent
DEFAULT_DATA_PATH = PACKAGE_DIR / "data"
MANIFEST_SCHEMA_PATH = PACKAGE_DIR / "schemas" / "dataset_manifest.schema.json"
MANIFEST_FILENAME = "manifest.json"


def _load_index_directions() -> frozenset:
    with open(MANIFEST_SCHEMA_PATH, encoding="utf-8") as f:
        schema = json.load(f)
    return frozenset(schema["definitions"]["indexDirection"]["enum"])


# Index directions accepted by the manifest schema
INDEX_DIRECTIONS = _load_index_directions()

__all__ = [
    "DEFAULT_DATA_PATH",
    "INDEX_DIRECTIONS",
    "MANIFEST_FILENAME",
    "MANIFEST_SCHEMA_PATH",
]
