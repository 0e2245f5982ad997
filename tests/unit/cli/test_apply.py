"""Unit tests for apply command.

Tests for the CLI apply command implementation.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner, Result
from winctl.cli.main import app
from winctl.core.manifest import save_manifest
from winctl.models.app import InstalledScope
from winctl.models.manifest import Manifest
from winctl.utils.shell import CommandResult

runner = CliRunner()


@pytest.fixture
def manifest_path(tmp_path: Path, sample_manifest: Manifest) -> Path:
    return save_manifest(sample_manifest, tmp_path / "manifest.toml")


def _invoke(client: MagicMock, *args: str) -> Result:
    with patch("winctl.cli.runner.WingetClient", return_value=client):
        return runner.invoke(app, ["apply", *args])


class TestApplyCommandHelp:
    """Tests for apply command help."""

    def test_apply_help(self) -> None:
        """Apply command shows help and options."""
        result = runner.invoke(app, ["apply", "--help"])

        assert result.exit_code == 0
        assert "Apply manifest to this machine" in result.stdout
        assert "--dry-run" in result.stdout
        assert "--host" in result.stdout


class TestApplySetupErrors:
    """Tests for fatal setup errors."""

    def test_no_manifest(self, tmp_path: Path, fake_client: MagicMock) -> None:
        """Apply exits 1 with a hint when the manifest is missing."""
        result = _invoke(fake_client, "--manifest", str(tmp_path / "missing.toml"))

        assert result.exit_code == 1
        assert "Manifest not found" in result.output
        assert "winctl init" in result.output

    def test_winget_missing(self, manifest_path: Path, fake_client: MagicMock) -> None:
        """Apply exits 1 when winget is not installed."""
        fake_client.is_available.return_value = False

        result = _invoke(fake_client, "--manifest", str(manifest_path), "--host", "PC-HOME")

        assert result.exit_code == 1
        assert "winget is not available" in result.output
        fake_client.export.assert_not_called()

    def test_export_failure(self, manifest_path: Path, fake_client: MagicMock) -> None:
        """Apply exits 1 when installed packages cannot be read."""
        from winctl.winget.client import WingetError

        fake_client.export.side_effect = WingetError("winget export failed")

        result = _invoke(fake_client, "--manifest", str(manifest_path), "--host", "PC-HOME")

        assert result.exit_code == 1
        assert "Could not read installed packages" in result.output


class TestApplyRun:
    """Tests for apply runs."""

    def test_dry_run_changes_found(self, manifest_path: Path, fake_client: MagicMock) -> None:
        """Dry-run reports changes with exit code 3 and calls no mutating winget command."""
        result = _invoke(
            fake_client, "--dry-run", "--manifest", str(manifest_path), "--host", "PC-HOME"
        )

        assert result.exit_code == 3
        assert "CHANGE" in result.stdout
        assert "user -> machine" in result.stdout
        assert "self-updating" in result.stdout
        assert "1 change(s) found" in result.stdout
        fake_client.uninstall.assert_not_called()
        fake_client.install.assert_not_called()

    def test_apply_changes(self, manifest_path: Path, fake_client: MagicMock) -> None:
        """Apply moves Git to machine scope and leaves Chrome alone."""
        result = _invoke(fake_client, "--manifest", str(manifest_path), "--host", "PC-HOME")

        assert result.exit_code == 3
        assert "Reinstalled with scope machine" in result.stdout
        assert "1 change(s) applied" in result.stdout
        fake_client.uninstall.assert_called_once_with("Git.Git", InstalledScope.USER)
        fake_client.upgrade.assert_not_called()

    def test_in_sync(self, manifest_path: Path, fake_client: MagicMock) -> None:
        """A host in the desired state exits 0."""
        fake_client.list_scope_ids.side_effect = lambda scope: (
            set() if scope.value == "user" else {"Git.Git", "Google.Chrome", "7zip.7zip"}
        )

        result = _invoke(fake_client, "--manifest", str(manifest_path), "--host", "PC-HOME")

        assert result.exit_code == 0
        assert "No changes" in result.stdout

    def test_host_selection(self, manifest_path: Path, fake_client: MagicMock) -> None:
        """Apps of groups not matching the host are not reconciled."""
        result = _invoke(
            fake_client, "--dry-run", "--manifest", str(manifest_path), "--host", "PC-OFFICE"
        )

        assert "7zip.7zip" not in result.stdout
        assert "Git.Git" in result.stdout

    def test_failure_exits_1_and_continues(
        self, manifest_path: Path, fake_client: MagicMock
    ) -> None:
        """A failed app is reported, the rest still run, and the exit code is 1."""
        fake_client.uninstall.return_value = CommandResult(
            stdout="", stderr="", returncode=0x8A150019
        )

        result = _invoke(fake_client, "--manifest", str(manifest_path), "--host", "PC-HOME")

        assert result.exit_code == 1
        assert "winget uninstall failed" in result.stdout
        assert "1 error(s)" in result.stdout
        assert "7-Zip" in result.stdout

    def test_no_apps_for_host(self, tmp_path: Path, fake_client: MagicMock) -> None:
        """A host with no matching groups has nothing to do."""
        manifest_path = save_manifest(Manifest(), tmp_path / "manifest.toml")

        result = _invoke(fake_client, "--manifest", str(manifest_path), "--host", "PC-HOME")

        assert result.exit_code == 0
        assert "Nothing to do" in result.stdout
        fake_client.export.assert_not_called()
