"""Host filtering for app groups.

Selects the apps that apply to the current machine based on the
host name glob patterns attached to each manifest group.
"""

import fnmatch
import logging
import socket
from collections.abc import Iterable

from winctl.models.app import DesiredApp
from winctl.models.manifest import AppGroup

logger = logging.getLogger(__name__)


def current_host() -> str:
    """Return the identifier of the local machine."""
    return socket.gethostname()


def host_matches(host: str, patterns: Iterable[str]) -> bool:
    """Check if a host name matches any of the given glob patterns.

    Windows host names are case-insensitive, so matching is too.

    Args:
        host: Host name to test.
        patterns: Glob patterns such as "*" or "PC-*".

    Returns:
        True if at least one pattern matches.
    """
    name = host.casefold()
    return any(fnmatch.fnmatchcase(name, pattern.casefold()) for pattern in patterns)


def select_apps(groups: Iterable[AppGroup], host: str) -> list[DesiredApp]:
    """Flatten the apps of every group that applies to a host.

    All matching groups contribute. When a package id is declared by
    more than one matching group, the first declaration wins.

    Args:
        groups: Manifest app groups.
        host: Host name to select for.

    Returns:
        Apps to reconcile on this host, in declaration order. May be empty.
    """
    selected: list[DesiredApp] = []
    seen: set[str] = set()

    for group in groups:
        if not host_matches(host, group.hosts):
            logger.debug("Group %s does not apply to %s", group.name or group.hosts, host)
            continue

        for app in group.to_desired_apps():
            key = app.package_id.casefold()
            if key in seen:
                logger.debug("Skipping duplicate declaration of %s", app.package_id)
                continue
            seen.add(key)
            selected.append(app)

    return selected
