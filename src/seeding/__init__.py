"""Seed fixed course datasets into MongoDB.

Datasets live under ``src/datasets/data/<database>/`` (see ``src.datasets``):

- ``manifest.json`` names the target database and lists each collection
  with its document file and index declarations.
- ``<collection>.json`` holds a MongoDB Extended JSON array of documents,
  decoded with ``bson.json_util`` so ObjectIds and dates round-trip.

Seeding is drop-then-insert: running it twice leaves the same logical
dataset as running it once. Store errors (duplicate key, invalid
geometry) propagate to the caller.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from bson import json_util

from src.datasets import DEFAULT_DATA_PATH, INDEX_DIRECTIONS, MANIFEST_FILENAME
from src.validators.validate import validate_manifest

if TYPE_CHECKING:
    from pymongo import MongoClient
    from pymongo.collection import Collection
    from pymongo.database import Database

logger = logging.getLogger(__name__)

SYSTEM_COLLECTION_PREFIX = "system."


class DatasetError(ValueError):
    """Raised when a dataset manifest or document file is malformed."""


@dataclass(frozen=True)
class IndexSpec:
    """Declared index for a seeded collection."""

    keys: tuple[tuple[str, Any], ...]
    name: str | None = None
    unique: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IndexSpec:
        raw_keys = data.get("keys")
        if not raw_keys:
            raise DatasetError(f"Index declaration has no keys: {data}")

        keys = []
        for entry in raw_keys:
            if not isinstance(entry, (list, tuple)) or len(entry) != 2:
                raise DatasetError(f"Index key must be [field, direction]: {entry}")
            field_name, direction = entry
            if direction not in INDEX_DIRECTIONS:
                raise DatasetError(f"Unsupported index direction {direction!r} on {field_name}")
            keys.append((field_name, direction))

        return cls(
            keys=tuple(keys),
            name=data.get("name"),
            unique=bool(data.get("unique", False)),
        )

    def options(self) -> dict[str, Any]:
        """Keyword arguments for ``Collection.create_index``."""
        opts: dict[str, Any] = {}
        if self.name:
            opts["name"] = self.name
        if self.unique:
            opts["unique"] = True
        return opts


@dataclass
class CollectionSeed:
    """Documents and indexes for one collection."""

    name: str
    documents: list[dict[str, Any]] = field(default_factory=list)
    indexes: list[IndexSpec] = field(default_factory=list)


@dataclass
class Dataset:
    """A database worth of collection seeds."""

    database: str
    collections: list[CollectionSeed] = field(default_factory=list)

    @property
    def document_count(self) -> int:
        return sum(len(c.documents) for c in self.collections)


@dataclass
class SeedingStats:
    """Statistics from seeding operations."""

    database: str = ""
    collections_seeded: int = 0
    documents_inserted: int = 0
    indexes_created: int = 0
    per_collection: dict[str, int] = field(default_factory=dict)


def load_documents(file_path: Path) -> list[dict[str, Any]]:
    """Load an Extended JSON array of documents."""
    with open(file_path, encoding="utf-8") as f:
        documents = json_util.loads(f.read())

    if not isinstance(documents, list):
        raise DatasetError(f"{file_path.name} must contain a JSON array of documents")
    for doc in documents:
        if not isinstance(doc, dict):
            raise DatasetError(f"{file_path.name} contains a non-document entry: {doc!r}")
    return documents


def load_dataset(dataset_path: Path) -> Dataset:
    """Load a dataset directory described by its manifest.

    Raises:
        FileNotFoundError: If the manifest or a document file is missing.
        DatasetError: If the manifest or documents are malformed.
    """
    manifest_path = dataset_path / MANIFEST_FILENAME
    if not manifest_path.exists():
        raise FileNotFoundError(f"Dataset manifest not found: {manifest_path}")

    with open(manifest_path, encoding="utf-8") as f:
        try:
            manifest = json.load(f)
        except json.JSONDecodeError as e:
            raise DatasetError(f"Invalid manifest {manifest_path}: {e}") from e

    errors = validate_manifest(manifest)
    if errors:
        raise DatasetError(f"Invalid manifest {manifest_path}: {'; '.join(errors)}")

    dataset = Dataset(database=manifest["database"])
    for entry in manifest["collections"]:
        name = entry["name"]

        file_path = dataset_path / entry.get("file", f"{name}.json")
        if not file_path.exists():
            raise FileNotFoundError(f"Document file not found: {file_path}")

        dataset.collections.append(CollectionSeed(
            name=name,
            documents=load_documents(file_path),
            indexes=[IndexSpec.from_dict(i) for i in entry.get("indexes", [])],
        ))

    return dataset


def discover_datasets(data_path: Path = DEFAULT_DATA_PATH) -> list[Path]:
    """Return dataset directories (those holding a manifest), sorted by name."""
    if not data_path.exists():
        logger.warning(f"Data path does not exist: {data_path}")
        return []
    return sorted(
        p for p in data_path.iterdir()
        if p.is_dir() and (p / MANIFEST_FILENAME).exists()
    )


def create_indexes(collection: Collection, indexes: list[IndexSpec]) -> int:
    """Create the declared indexes on a collection."""
    for index in indexes:
        collection.create_index(list(index.keys), **index.options())
    return len(indexes)


def seed_collection(db: Database, seed: CollectionSeed) -> int:
    """Replace a collection's contents with the seed documents.

    Documents carrying ``_id`` keep it; the rest get a store-generated
    ObjectId. The seed itself is never mutated.

    Returns:
        Number of documents inserted.
    """
    collection = db[seed.name]
    collection.drop()

    inserted = 0
    if seed.documents:
        result = collection.insert_many(copy.deepcopy(seed.documents), ordered=True)
        inserted = len(result.inserted_ids)

    create_indexes(collection, seed.indexes)
    logger.debug(f"Seeded {db.name}.{seed.name}: {inserted} documents, {len(seed.indexes)} indexes")
    return inserted


def seed_dataset(client: MongoClient, dataset: Dataset) -> SeedingStats:
    """Seed every collection of a dataset into its database."""
    db = client[dataset.database]
    stats = SeedingStats(database=dataset.database)

    for seed in dataset.collections:
        inserted = seed_collection(db, seed)
        stats.collections_seeded += 1
        stats.documents_inserted += inserted
        stats.indexes_created += len(seed.indexes)
        stats.per_collection[seed.name] = inserted

    return stats


def reset_databases(client: MongoClient, database_names: list[str]) -> dict[str, int]:
    """Drop every non-system collection in the named databases.

    Returns:
        Dict mapping database name to number of collections dropped.
    """
    dropped: dict[str, int] = {}
    for name in database_names:
        db = client[name]
        count = 0
        for collection_name in db.list_collection_names():
            if collection_name.startswith(SYSTEM_COLLECTION_PREFIX):
                continue
            db.drop_collection(collection_name)
            logger.debug(f"Dropped {name}.{collection_name}")
            count += 1
        dropped[name] = count
    return dropped


__all__ = [
    "DEFAULT_DATA_PATH",
    "CollectionSeed",
    "Dataset",
    "DatasetError",
    "IndexSpec",
    "SeedingStats",
    "create_indexes",
    "discover_datasets",
    "load_dataset",
    "load_documents",
    "reset_databases",
    "seed_collection",
    "seed_dataset",
]
