"""Pytest configuration and shared fixtures.

This module contains canned winget output used across all test modules.
"""

import json
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from winctl.models.manifest import AppEntry, AppGroup, Manifest, ManifestMeta, Settings
from winctl.utils.shell import CommandResult
from winctl.winget.client import WingetClient

# Column widths of the canned winget tables
_NAME_W = 26
_ID_W = 32
_VERSION_W = 16
_AVAILABLE_W = 16


def _list_line(name: str, package_id: str, version: str, source: str) -> str:
    return f"{name:<{_NAME_W}}{package_id:<{_ID_W}}{version:<{_VERSION_W}}{source}"


def _upgrade_line(name: str, package_id: str, version: str, available: str, source: str) -> str:
    return (
        f"{name:<{_NAME_W}}{package_id:<{_ID_W}}{version:<{_VERSION_W}}"
        f"{available:<{_AVAILABLE_W}}{source}"
    )


@pytest.fixture
def winget_user_list_output() -> str:
    """Sample ``winget list --scope user`` output, including spinner noise."""
    lines = [
        "\r   - \r   \\ \r   | \r",
        _list_line("Name", "Id", "Version", "Source"),
        "-" * 90,
        _list_line("Git", "Git.Git", "2.43.0", "winget"),
        _list_line("Spotify", "Spotify.Spotify", "1.2.26.1187", "winget"),
        _list_line("Windows Terminal", "9N0DX20HK701", "1.18.3181.0", "msstore"),
    ]
    return "\n".join(lines) + "\n"


@pytest.fixture
def winget_machine_list_output() -> str:
    """Sample ``winget list --scope machine`` output."""
    lines = [
        _list_line("Name", "Id", "Version", "Source"),
        "-" * 90,
        _list_line("Google Chrome", "Google.Chrome", "120.0.6099.130", "winget"),
        _list_line("7-Zip 23.01 (x64)", "7zip.7zip", "23.01", "winget"),
        "Microsoft Visual C++ 2015-2022 Redistributable (x64)  "
        "Microsoft.VCRedist.2015+.x64  14.38.33130.0  winget",
    ]
    return "\r\n".join(lines) + "\r\n"


@pytest.fixture
def winget_upgrade_output() -> str:
    """Sample ``winget upgrade`` output with ANSI noise and a trailer line."""
    lines = [
        "\x1b[2K\x1b[0G",
        _upgrade_line("Name", "Id", "Version", "Available", "Source"),
        "-" * 106,
        _upgrade_line("Git", "Git.Git", "2.43.0", "2.44.0", "winget"),
        _upgrade_line(
            "Google Chrome", "Google.Chrome", "120.0.6099.130", "121.0.6167.85", "winget"
        ),
        "2 upgrades available.",
    ]
    return "\n".join(lines) + "\n"


@pytest.fixture
def winget_export_json() -> str:
    """Sample ``winget export --include-versions`` document."""
    return json.dumps(
        {
            "$schema": "https://aka.ms/winget-packages.schema.2.0.json",
            "CreationDate": "2024-01-15T10:00:00.000-00:00",
            "Sources": [
                {
                    "Packages": [
                        {"PackageIdentifier": "Git.Git", "Version": "2.43.0"},
                        {"PackageIdentifier": "Google.Chrome", "Version": "120.0.6099.130"},
                        {"PackageIdentifier": "7zip.7zip", "Version": "23.01"},
                        {"PackageIdentifier": "Mozilla.Firefox"},
                    ],
                    "SourceDetails": {
                        "Argument": "https://cdn.winget.microsoft.com/cache",
                        "Identifier": "Microsoft.Winget.Source_8wekyb3d8bbwe",
                        "Name": "winget",
                        "Type": "Microsoft.PreIndexed.Package",
                    },
                }
            ],
            "WinGetVersion": "1.7.10661",
        }
    )


@pytest.fixture
def ok_result() -> CommandResult:
    """A successful winget call."""
    return CommandResult(stdout="Successfully installed", stderr="", returncode=0)


@pytest.fixture
def fake_client(ok_result: CommandResult) -> MagicMock:
    """A WingetClient double describing a small machine.

    Installed: Git.Git 2.43.0 (user), Google.Chrome (machine, upgradable),
    7zip.7zip 23.01 (machine). Every mutating call succeeds.
    """
    client = MagicMock(spec=WingetClient)
    client.is_available.return_value = True
    client.export.return_value = {
        "Git.Git": "2.43.0",
        "Google.Chrome": "120.0.6099.130",
        "7zip.7zip": "23.01",
    }
    client.list_scope_ids.side_effect = lambda scope: (
        {"Git.Git"} if scope.value == "user" else {"Google.Chrome", "7zip.7zip"}
    )
    client.list_upgrades.return_value = {"Google.Chrome": "121.0.6167.85"}
    client.find_installed.return_value = None
    client.install.return_value = ok_result
    client.upgrade.return_value = ok_result
    client.uninstall.return_value = ok_result
    return client


@pytest.fixture
def sample_manifest() -> Manifest:
    """A manifest with a shared group and a host-specific group."""
    now = datetime.now(UTC)
    return Manifest(
        meta=ManifestMeta(version="1.0", created=now, updated=now),
        settings=Settings(settle_delay=0.0, timeout=60.0),
        groups=[
            AppGroup(
                name="common",
                hosts=["*"],
                apps=[
                    AppEntry(name="Git", id="Git.Git", scope="machine"),
                    AppEntry(
                        name="Chrome", id="Google.Chrome", scope="machine", self_updating=True
                    ),
                ],
            ),
            AppGroup(
                name="home",
                hosts=["PC-HOME*"],
                apps=[AppEntry(name="7-Zip", id="7zip.7zip")],
            ),
        ],
    )
