"""
Pydantic models for the release channel service.

This module defines the data models used throughout the application:
- Release records and their composite lookup key
- The on-disk release document (the backing file contract)
- Query filters and reload/status responses
- Service configuration

All models use Pydantic for validation and serialization.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Release Models
# ---------------------------------------------------------------------------


class ReleaseKey(BaseModel):
    """
    Comparable composite key of a release: the (container, release channel) pair.

    At most one release is registered per key within a store generation.
    """

    model_config = ConfigDict(frozen=True)

    container: str
    release_channel: str

    def __str__(self) -> str:
        return f"{self.container}/{self.release_channel}"


class Release(BaseModel):
    """
    A single deployable image for one container in one release channel.

    Fields default to empty strings so that a record missing a field can be
    rejected by the store with an error naming that field. Serialized with the
    camelCase names used by the backing file and the HTTP API.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    container: str = Field(
        default="",
        description="Container (service) name, e.g. 'app'.",
    )
    release_channel: str = Field(
        default="",
        alias="releaseChannel",
        description="Deployment environment or cohort, e.g. 'dev' or 'prod'.",
    )
    image_path: str = Field(
        default="",
        alias="imagePath",
        description="Fully-qualified image reference, e.g. 'ghcr.io/org/app:1.2.3'.",
    )

    def to_key(self) -> ReleaseKey:
        return ReleaseKey(container=self.container, release_channel=self.release_channel)


class ReleaseQuery(BaseModel):
    """
    Partial-key filter. Empty fields mean "unconstrained".
    """

    model_config = ConfigDict(populate_by_name=True)

    container: str = ""
    release_channel: str = Field(default="", alias="releaseChannel")


class ReleaseDocument(BaseModel):
    """
    Shape of the backing file: ``{"releases": [...]}``.

    Only used for writing sample data and documentation; the loader validates
    each record separately so one bad record does not reject the document.
    """

    releases: List[Release] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Reload / Status Models
# ---------------------------------------------------------------------------


class ReloadState(str, Enum):
    IDLE = "idle"
    CHECKING = "checking"
    UNCHANGED = "unchanged"
    REBUILDING = "rebuilding"


class ReloadResult(BaseModel):
    """Outcome of a single check/rebuild cycle."""

    status: Literal["reloaded", "unchanged"]
    generation: int
    releases: int
    source_mtime: Optional[datetime] = None


class StoreStatus(BaseModel):
    """Operational view of the published generation and the reload watermark."""

    db_file: str
    generation: int
    releases: int
    source_mtime: Optional[datetime] = None
    loaded_at: Optional[datetime] = None
    state: ReloadState
    last_error: Optional[str] = None


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ServiceConfig(BaseModel):
    """
    Runtime configuration, resolved from the environment at startup.
    """

    db_file: Path = Field(
        default=Path("db/db.json"),
        description="Path to the backing JSON release document.",
    )
    reload_interval_seconds: float = Field(
        default=30.0,
        gt=0,
        description="How often (in seconds) the backing file is checked for changes.",
    )
    host: str = Field(
        default="0.0.0.0",
        description="Bind address for the HTTP server.",
    )
    port: int = Field(
        default=8089,
        ge=1,
        le=65535,
        description="Bind port for the HTTP server.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level name.",
    )
