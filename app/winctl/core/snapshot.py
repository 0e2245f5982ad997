"""Installed-state snapshot and resolver.

A run queries winget a fixed number of times up front (export, two
scope listings, upgrade listing) and answers every per-app question
from that snapshot. Only packages missing from the export cost an
extra, targeted query.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from winctl.models.app import InstalledPackage, InstalledScope
from winctl.winget.client import WingetError

if TYPE_CHECKING:
    from winctl.winget.client import WingetClient

logger = logging.getLogger(__name__)


def _key(package_id: str) -> str:
    return package_id.casefold()


@dataclass(frozen=True, slots=True)
class SystemSnapshot:
    """Read-only view of winget state taken once per run.

    All keys are case-folded package ids.

    Attributes:
        versions: Exported packages and their versions.
        user_ids: Ids listed under the user scope.
        machine_ids: Ids listed under the machine scope.
        upgrades: Available version per upgradable package.
        warnings: Non-fatal problems hit while capturing.
        package_ids: Exported ids as winget spells them.
    """

    versions: dict[str, str | None] = field(default_factory=dict)
    user_ids: frozenset[str] = field(default_factory=frozenset)
    machine_ids: frozenset[str] = field(default_factory=frozenset)
    upgrades: dict[str, str] = field(default_factory=dict)
    warnings: tuple[str, ...] = field(default_factory=tuple)
    package_ids: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def capture(cls, client: WingetClient) -> SystemSnapshot:
        """Query winget and build the snapshot.

        The export is required. Scope and upgrade listings are
        best-effort: a failure leaves that part empty and adds a warning.

        Args:
            client: Winget client to query.

        Returns:
            Snapshot of the current system.

        Raises:
            WingetError: If the export fails.
        """
        exported = client.export()
        logger.debug("winget export listed %d packages", len(exported))

        warnings: list[str] = []
        scope_ids: dict[InstalledScope, frozenset[str]] = {}
        for scope in (InstalledScope.USER, InstalledScope.MACHINE):
            try:
                ids = client.list_scope_ids(scope)
            except WingetError as e:
                logger.warning("Listing %s scope failed, treating it as empty: %s", scope.value, e)
                warnings.append(f"Could not list {scope.value}-scope packages: {e}")
                ids = set()
            scope_ids[scope] = frozenset(_key(i) for i in ids)

        try:
            upgrades = client.list_upgrades()
        except WingetError as e:
            logger.warning("Upgrade listing failed, assuming no upgrades: %s", e)
            warnings.append(f"Could not list available upgrades: {e}")
            upgrades = {}

        return cls(
            versions={_key(i): v for i, v in exported.items()},
            user_ids=scope_ids[InstalledScope.USER],
            machine_ids=scope_ids[InstalledScope.MACHINE],
            upgrades={_key(i): v for i, v in upgrades.items()},
            warnings=tuple(warnings),
            package_ids=tuple(sorted(exported, key=str.casefold)),
        )

    def scope_of(self, package_id: str) -> InstalledScope:
        """Classify the scope of an exported package."""
        key = _key(package_id)
        in_user = key in self.user_ids
        in_machine = key in self.machine_ids
        if in_user and in_machine:
            return InstalledScope.BOTH
        if in_machine:
            return InstalledScope.MACHINE
        if in_user:
            return InstalledScope.USER
        return InstalledScope.NONE

    def available_version(self, package_id: str) -> str | None:
        """Return the upgrade version for a package, or None if up to date."""
        return self.upgrades.get(_key(package_id))


class InstalledStateResolver:
    """Answers 'is this package installed, at which version and scope?'.

    Example:
        >>> snapshot = SystemSnapshot.capture(client)
        >>> resolver = InstalledStateResolver(client, snapshot)
        >>> resolver.resolve("Git.Git").scope
        <InstalledScope.MACHINE: 'machine'>
    """

    def __init__(self, client: WingetClient, snapshot: SystemSnapshot) -> None:
        self._client = client
        self._snapshot = snapshot

    def resolve(self, package_id: str) -> InstalledPackage:
        """Resolve the installed state of a package.

        Uses the snapshot first and falls back to a targeted query for
        packages the export does not contain.

        Args:
            package_id: Package id to resolve.

        Returns:
            InstalledPackage; ``installed`` is False when not found.

        Raises:
            WingetError: If the targeted fallback query fails.
        """
        key = _key(package_id)
        if key in self._snapshot.versions:
            return InstalledPackage(
                package_id=package_id,
                installed=True,
                version=self._snapshot.versions[key],
                scope=self._snapshot.scope_of(package_id),
            )

        logger.debug("%s not in export, running targeted query", package_id)
        return self.query(package_id)

    def query(self, package_id: str) -> InstalledPackage:
        """Look a package up directly, bypassing the snapshot.

        The scope cannot be determined this way and is reported as UNKNOWN.

        Raises:
            WingetError: If the query fails for a reason other than not found.
        """
        row = self._client.find_installed(package_id)
        if row is None:
            return InstalledPackage.not_installed(package_id)
        return InstalledPackage(
            package_id=package_id,
            installed=True,
            version=row.version or None,
            scope=InstalledScope.UNKNOWN,
        )

    def available_version(self, package_id: str) -> str | None:
        """Return the upgrade version for a package, or None if up to date."""
        return self._snapshot.available_version(package_id)
