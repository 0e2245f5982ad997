"""Unit tests for path management."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from winctl.core.paths import (
    APP_NAME,
    ensure_config_dir,
    get_config_dir,
    get_manifest_path,
    get_user_theme_path,
)


class TestGetConfigDir:
    """Tests for get_config_dir function."""

    def test_uses_appdata_on_windows(self, tmp_path: Path) -> None:
        """get_config_dir uses %APPDATA% on Windows."""
        with (
            patch("winctl.core.paths.sys.platform", "win32"),
            patch.dict(os.environ, {"APPDATA": str(tmp_path)}),
        ):
            result = get_config_dir()

        assert result == tmp_path / APP_NAME

    def test_respects_xdg_config_home(self, tmp_path: Path) -> None:
        """get_config_dir respects XDG_CONFIG_HOME elsewhere."""
        with (
            patch("winctl.core.paths.sys.platform", "linux"),
            patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}),
        ):
            result = get_config_dir()

        assert result == tmp_path / APP_NAME

    def test_default_config_dir(self) -> None:
        """get_config_dir falls back to ~/.config."""
        with (
            patch("winctl.core.paths.sys.platform", "linux"),
            patch.dict(os.environ, {}, clear=True),
        ):
            result = get_config_dir()
            expected = Path.home() / ".config" / APP_NAME

        assert result == expected


class TestFilePaths:
    """Tests for manifest and theme paths."""

    def test_manifest_path(self, tmp_path: Path) -> None:
        """The manifest lives in the config directory."""
        with patch("winctl.core.paths.get_config_dir", return_value=tmp_path):
            assert get_manifest_path() == tmp_path / "manifest.toml"

    def test_user_theme_path(self, tmp_path: Path) -> None:
        """The user theme lives in the config directory."""
        with patch("winctl.core.paths.get_config_dir", return_value=tmp_path):
            assert get_user_theme_path() == tmp_path / "theme.toml"


class TestEnsureConfigDir:
    """Tests for ensure_config_dir function."""

    def test_creates_directory(self, tmp_path: Path) -> None:
        """ensure_config_dir creates missing directories."""
        target = tmp_path / "nested" / APP_NAME
        with patch("winctl.core.paths.get_config_dir", return_value=target):
            result = ensure_config_dir()

        assert result == target
        assert target.is_dir()

    def test_permission_error(self, tmp_path: Path) -> None:
        """ensure_config_dir wraps permission errors in RuntimeError."""
        target = tmp_path / APP_NAME
        with (
            patch("winctl.core.paths.get_config_dir", return_value=target),
            patch.object(Path, "mkdir", side_effect=PermissionError("denied")),
            pytest.raises(RuntimeError, match="Permission denied"),
        ):
            ensure_config_dir()
