"""Connection settings for the bookstore query runner.

Build a ``StoreConfig`` and pass it to ``OperationRunner``. Fields not given
explicitly fall back to environment variables, then to the defaults below.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_URI = "mongodb://localhost:27017"
DEFAULT_DATABASE = "plp_bookstore"
DEFAULT_COLLECTION = "books"


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class StoreConfig(BaseModel):
    """Where the runner connects and how strictly it treats write counts."""

    # Environment-backed defaults go through the same validation as explicit values.
    model_config = ConfigDict(validate_default=True)

    uri: str = Field(default_factory=lambda: os.getenv("MONGO_URL", DEFAULT_URI))
    database_name: str = Field(
        default_factory=lambda: os.getenv("MONGO_DB_NAME", DEFAULT_DATABASE),
        min_length=1,
    )
    collection_name: str = Field(
        default_factory=lambda: os.getenv("MONGO_COLLECTION", DEFAULT_COLLECTION),
        min_length=1,
    )
    strict_counts: bool = Field(
        default_factory=lambda: _env_flag("BOOKSTORE_STRICT_COUNTS")
    )
    server_selection_timeout_ms: int = Field(
        default_factory=lambda: os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "5000"),
        gt=0,
    )

    @classmethod
    def from_env(cls, **overrides: Any) -> "StoreConfig":
        """Load settings from the environment, ignoring ``None`` overrides."""

        return cls(**{key: value for key, value in overrides.items() if value is not None})

    @property
    def namespace(self) -> str:
        """``database.collection`` the runner works against."""

        return f"{self.database_name}.{self.collection_name}"
