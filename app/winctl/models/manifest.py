"""Manifest models for declarative app configuration.

This module defines the Pydantic models representing the manifest.toml
structure that describes which apps each host should have.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from winctl.models.app import AppScope, DesiredApp

# Type alias for scope values in manifest
AppScopeType = Literal["user", "machine", "none"]


class ManifestMeta(BaseModel):
    """Metadata section of the manifest.

    Attributes:
        version: Manifest schema version (e.g., "1.0").
        created: Timestamp when manifest was first created.
        updated: Timestamp when manifest was last modified.
    """

    model_config = ConfigDict(extra="forbid")

    version: Annotated[str, Field(description="Manifest schema version")] = "1.0"
    created: Annotated[
        datetime | None, Field(description="Timestamp when manifest was created")
    ] = None
    updated: Annotated[
        datetime | None, Field(description="Timestamp when manifest was last modified")
    ] = None


class Settings(BaseModel):
    """Tunables for a reconciliation run.

    Attributes:
        settle_delay: Seconds to wait after an uninstall before checking
            that the package is gone (scope changes only).
        timeout: Timeout in seconds for install, upgrade and uninstall calls.
    """

    model_config = ConfigDict(extra="forbid")

    settle_delay: Annotated[
        float, Field(ge=0.0, description="Wait after uninstall before re-checking")
    ] = 5.0
    timeout: Annotated[float, Field(gt=0.0, description="Timeout for mutating winget calls")] = (
        600.0
    )


class AppEntry(BaseModel):
    """Entry for a single app in a group.

    Attributes:
        name: Display name.
        id: Winget package identifier.
        scope: Desired install scope ("user", "machine" or "none").
        self_updating: True if the app keeps itself up to date.
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="Display name")]
    id: Annotated[str, Field(min_length=1, description="Winget package id")]
    scope: Annotated[AppScopeType, Field(description="Desired install scope")] = "none"
    self_updating: Annotated[bool, Field(description="App updates itself")] = False

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Reject ids with whitespace, which winget never produces."""
        v = v.strip()
        if not v or any(ch.isspace() for ch in v):
            msg = f"Invalid winget package id: {v!r}"
            raise ValueError(msg)
        return v


class AppGroup(BaseModel):
    """A set of apps that applies to hosts matching any of its patterns.

    Attributes:
        name: Optional group label.
        hosts: Host name glob patterns (e.g., "*", "PC-*").
        apps: Apps in this group.
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str | None, Field(description="Group label")] = None
    hosts: Annotated[list[str], Field(min_length=1, description="Host glob patterns")] = ["*"]
    apps: Annotated[list[AppEntry], Field(default_factory=list, description="Apps in group")]

    @model_validator(mode="after")
    def validate_no_duplicates(self) -> AppGroup:
        """Validate that no package id appears twice in one group."""
        seen: set[str] = set()
        duplicates: set[str] = set()
        for entry in self.apps:
            key = entry.id.casefold()
            if key in seen:
                duplicates.add(entry.id)
            seen.add(key)
        if duplicates:
            msg = f"Apps listed more than once in group: {sorted(duplicates)}"
            raise ValueError(msg)
        return self

    def to_desired_apps(self) -> list[DesiredApp]:
        """Convert the group's entries to DesiredApp instances."""
        patterns = frozenset(self.hosts)
        return [
            DesiredApp(
                name=entry.name,
                package_id=entry.id,
                scope=AppScope(entry.scope),
                self_updating=entry.self_updating,
                host_patterns=patterns,
            )
            for entry in self.apps
        ]


class Manifest(BaseModel):
    """Complete manifest representing desired app state.

    Attributes:
        meta: Metadata section with version and timestamps.
        settings: Run tunables.
        groups: App groups, each tagged with host patterns.
    """

    model_config = ConfigDict(extra="forbid")

    meta: Annotated[ManifestMeta, Field(default_factory=ManifestMeta, description="Metadata")]
    settings: Annotated[Settings, Field(default_factory=Settings, description="Run settings")]
    groups: Annotated[list[AppGroup], Field(default_factory=list, description="App groups")]

    @property
    def app_count(self) -> int:
        """Total number of app entries across all groups."""
        return sum(len(group.apps) for group in self.groups)
