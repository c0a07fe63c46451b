"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, typegraph.toml only contains
overrides. An empty (or absent) file yields a working SQLite setup.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_DATABASE_URL = "sqlite:///typegraph.db"
DEFAULT_DEFINITIONS = "typegraph.definitions"


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    url: str = DEFAULT_DATABASE_URL
    echo: bool = False


class SyncConfig(BaseModel):
    """[sync] section."""

    model_config = {"frozen": True}

    definitions: str = DEFAULT_DEFINITIONS
    prune: bool = False


class QueryConfig(BaseModel):
    """[query] section."""

    model_config = {"frozen": True}

    max_depth: int = Field(default=3, ge=0)
    page_size: int = Field(default=10, ge=1)


class GraphConfig(BaseModel):
    """Root config model composing all typegraph.toml sections."""

    model_config = {"frozen": True}

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
