"""App models for desired and installed state.

This module defines the core data structures for representing the
applications a host should have and what winget reports as installed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class AppScope(Enum):
    """Install scope requested for a desired app.

    Attributes:
        USER: Install for the current user only.
        MACHINE: Install for all users.
        NONE: Scope is not tracked; any installed scope satisfies the app.
    """

    USER = "user"
    MACHINE = "machine"
    NONE = "none"

    @property
    def is_concrete(self) -> bool:
        """Check if this scope is enforced (user or machine)."""
        return self is not AppScope.NONE


class InstalledScope(Enum):
    """Install scope observed for an installed package.

    Attributes:
        USER: Listed by ``winget list --scope user``.
        MACHINE: Listed by ``winget list --scope machine``.
        NONE: Exported but listed under neither scope.
        BOTH: Listed under the user and the machine scope.
        UNKNOWN: Found only by the targeted fallback query.
    """

    USER = "user"
    MACHINE = "machine"
    NONE = "none"
    BOTH = "both"
    UNKNOWN = "unknown"

    @property
    def is_concrete(self) -> bool:
        """Check if this scope is a single user or machine scope."""
        return self in (InstalledScope.USER, InstalledScope.MACHINE)

    def includes(self, scope: AppScope) -> bool:
        """Check if a package seen at this scope is registered at ``scope``."""
        if self is InstalledScope.BOTH:
            return scope.is_concrete
        return self.is_concrete and self.value == scope.value


@dataclass(frozen=True, slots=True)
class DesiredApp:
    """An application declared in the manifest.

    Attributes:
        name: Display name (e.g., 'Git').
        package_id: Winget package identifier (e.g., 'Git.Git').
        scope: Desired install scope.
        self_updating: True if the app updates itself and should not be
            upgraded through winget.
        host_patterns: Host glob patterns of the group that declared the app.
    """

    name: str
    package_id: str
    scope: AppScope = AppScope.NONE
    self_updating: bool = False
    host_patterns: frozenset[str] = field(default_factory=lambda: frozenset({"*"}))

    def __post_init__(self) -> None:
        """Validate app data after initialization."""
        if not self.package_id:
            msg = "Package id cannot be empty"
            raise ValueError(msg)
        if not self.name:
            msg = f"App name cannot be empty (package {self.package_id})"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class InstalledPackage:
    """What winget reports for one package id.

    A package that is not installed is still represented, with
    ``installed`` set to False, so lookups never need to raise.

    Attributes:
        package_id: Winget package identifier as requested.
        installed: Whether the package was found.
        version: Installed version string (if known).
        scope: Observed install scope.
    """

    package_id: str
    installed: bool
    version: str | None = None
    scope: InstalledScope = InstalledScope.NONE

    @classmethod
    def not_installed(cls, package_id: str) -> InstalledPackage:
        """Create the record for a package winget does not know about."""
        return cls(package_id=package_id, installed=False)

    @property
    def version_display(self) -> str:
        """Return the version or a placeholder."""
        return self.version or "unknown"
