"""Pytest configuration and fixtures for mongo-lab-validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError
from pymongo.results import InsertManyResult, UpdateResult

# ============================================================================
# Path Fixtures
# ============================================================================


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def data_dir(project_root: Path) -> Path:
    """Return the data directory holding the course datasets."""
    return project_root / "src" / "datasets" / "data"


@pytest.fixture
def schemas_dir(project_root: Path) -> Path:
    """Return the schemas directory."""
    return project_root / "src" / "datasets" / "schemas"


# ============================================================================
# In-memory store (for unit tests)
# ============================================================================


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    for field, condition in query.items():
        present = field in doc
        value = doc.get(field)
        if isinstance(condition, dict) and any(k.startswith("$") for k in condition):
            for op, arg in condition.items():
                if op == "$exists" and present != bool(arg):
                    return False
                if op == "$in" and value not in arg:
                    return False
                if op == "$nin" and value in arg:
                    return False
        elif value != condition:
            return False
    return True


class FakeCollection:
    """Just enough of pymongo's Collection for the seeder and repair code."""

    def __init__(self, database: FakeDatabase, name: str) -> None:
        self.database = database
        self.name = name
        self.documents: list[dict[str, Any]] = []
        self.indexes: list[tuple[list[Any], dict[str, Any]]] = []
        self.exists = False

    def drop(self) -> None:
        self.database.drop_collection(self.name)

    def insert_many(self, documents: list[dict[str, Any]], ordered: bool = True) -> InsertManyResult:
        inserted = []
        for doc in documents:
            doc.setdefault("_id", ObjectId())
            if any(d["_id"] == doc["_id"] for d in self.documents):
                raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name}")
            self.documents.append(doc)
            inserted.append(doc["_id"])
        self.exists = True
        return InsertManyResult(inserted, True)

    def create_index(self, keys: list[Any], **kwargs: Any) -> str:
        self.indexes.append((keys, kwargs))
        self.exists = True
        return kwargs.get("name") or "_".join(f"{k}_{v}" for k, v in keys)

    def find(self, query: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        return [d for d in self.documents if _matches(d, query or {})]

    def count_documents(self, query: dict[str, Any]) -> int:
        return len(self.find(query))

    def distinct(self, field: str) -> list[Any]:
        return list(dict.fromkeys(d[field] for d in self.documents if field in d))

    def update_one(self, query: dict[str, Any], update: dict[str, Any]) -> UpdateResult:
        for doc in self.documents:
            if _matches(doc, query):
                changed = any(doc.get(k) != v for k, v in update.get("$set", {}).items())
                doc.update(update.get("$set", {}))
                return UpdateResult({"n": 1, "nModified": int(changed)}, True)
        return UpdateResult({"n": 0, "nModified": 0}, True)


class FakeDatabase:
    def __init__(self, name: str) -> None:
        self.name = name
        self._collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self._collections:
            self._collections[name] = FakeCollection(self, name)
        return self._collections[name]

    def __getattr__(self, name: str) -> FakeCollection:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def list_collection_names(self) -> list[str]:
        return [name for name, c in self._collections.items() if c.exists]

    def drop_collection(self, name: str) -> None:
        collection = self._collections.get(name)
        if collection is not None:
            collection.documents = []
            collection.indexes = []
            collection.exists = False


class FakeClient:
    def __init__(self) -> None:
        self._databases: dict[str, FakeDatabase] = {}
        self.closed = False

    def __getitem__(self, name: str) -> FakeDatabase:
        if name not in self._databases:
            self._databases[name] = FakeDatabase(name)
        return self._databases[name]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client() -> FakeClient:
    """Return an empty in-memory MongoDB stand-in."""
    return FakeClient()


@pytest.fixture
def fake_db(fake_client: FakeClient) -> FakeDatabase:
    """Return an empty in-memory database."""
    return fake_client["insurance_company"]


# ============================================================================
# Markers
# ============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (deselect with '-m \"not integration\"')",
    )
    config.addinivalue_line(
        "markers",
        "requires_mongodb: marks tests requiring a MongoDB server",
    )
