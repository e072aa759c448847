"""MongoDB connection configuration.

A single ``MongoClient`` is opened per process and shared by the seeder
and the lab runner. Settings come from the environment (optionally a
``.env`` file loaded with python-dotenv).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from dotenv import load_dotenv

if TYPE_CHECKING:
    from pymongo import MongoClient

# Constants
DEFAULT_MONGODB_URI = "mongodb://localhost:27017"
DEFAULT_SERVER_SELECTION_TIMEOUT_MS = 5000
DEFAULT_INSURANCE_DB = "insurance_company"
DEFAULT_ECOMMERCE_DB = "ecommerce"


class StoreConfigError(ValueError):
    """Raised when the store configuration in the environment is invalid."""


@dataclass(frozen=True)
class StoreConfig:
    """Connection settings for the course database."""

    uri: str = DEFAULT_MONGODB_URI
    server_selection_timeout_ms: int = DEFAULT_SERVER_SELECTION_TIMEOUT_MS
    insurance_db: str = DEFAULT_INSURANCE_DB
    ecommerce_db: str = DEFAULT_ECOMMERCE_DB

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> StoreConfig:
        """Build config from environment variables.

        Reads MONGODB_URI, MONGODB_SERVER_SELECTION_TIMEOUT_MS,
        LAB_INSURANCE_DB and LAB_ECOMMERCE_DB.

        Raises:
            StoreConfigError: If the timeout is not a positive integer.
        """
        if load_env_file:
            load_dotenv()

        raw_timeout = os.getenv(
            "MONGODB_SERVER_SELECTION_TIMEOUT_MS",
            str(DEFAULT_SERVER_SELECTION_TIMEOUT_MS),
        )
        try:
            timeout = int(raw_timeout)
        except ValueError as e:
            raise StoreConfigError(
                f"MONGODB_SERVER_SELECTION_TIMEOUT_MS must be an integer, got {raw_timeout!r}"
            ) from e
        if timeout <= 0:
            raise StoreConfigError(
                f"MONGODB_SERVER_SELECTION_TIMEOUT_MS must be positive, got {timeout}"
            )

        return cls(
            uri=os.getenv("MONGODB_URI", DEFAULT_MONGODB_URI),
            server_selection_timeout_ms=timeout,
            insurance_db=os.getenv("LAB_INSURANCE_DB", DEFAULT_INSURANCE_DB),
            ecommerce_db=os.getenv("LAB_ECOMMERCE_DB", DEFAULT_ECOMMERCE_DB),
        )


def get_mongo_client(config: StoreConfig | None = None) -> MongoClient:
    """Create the shared MongoDB client."""
    from pymongo import MongoClient

    if config is None:
        config = StoreConfig.from_env()

    return MongoClient(
        config.uri,
        serverSelectionTimeoutMS=config.server_selection_timeout_ms,
    )


__all__ = [
    "DEFAULT_ECOMMERCE_DB",
    "DEFAULT_INSURANCE_DB",
    "DEFAULT_MONGODB_URI",
    "StoreConfig",
    "StoreConfigError",
    "get_mongo_client",
]
