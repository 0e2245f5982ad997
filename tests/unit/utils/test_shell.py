"""Unit tests for shell execution utilities."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest
from winctl.utils.shell import CommandResult, command_exists, run_command


class TestCommandResult:
    """Tests for CommandResult dataclass."""

    def test_success(self) -> None:
        """success is True only for exit code 0."""
        assert CommandResult(stdout="", stderr="", returncode=0).success
        assert not CommandResult(stdout="", stderr="", returncode=-1978335212).success

    def test_output_combines_streams(self) -> None:
        """output joins non-empty stdout and stderr."""
        result = CommandResult(stdout="done\n", stderr="  warn ", returncode=0)

        assert result.output == "done\nwarn"
        assert CommandResult(stdout="", stderr="x", returncode=1).output == "x"


class TestRunCommand:
    """Tests for run_command function."""

    @patch("winctl.utils.shell.subprocess.run")
    def test_captures_output(self, mock_run: MagicMock) -> None:
        """run_command captures and decodes output as UTF-8."""
        mock_run.return_value = MagicMock(stdout="out", stderr="err", returncode=3)

        result = run_command(["winget", "list"], timeout=10.0)

        assert result == CommandResult(stdout="out", stderr="err", returncode=3)
        kwargs = mock_run.call_args.kwargs
        assert kwargs["capture_output"] is True
        assert kwargs["encoding"] == "utf-8"
        assert kwargs["errors"] == "replace"
        assert kwargs["timeout"] == 10.0

    @patch("winctl.utils.shell.subprocess.run")
    def test_none_streams_become_empty(self, mock_run: MagicMock) -> None:
        """Missing streams are normalized to empty strings."""
        mock_run.return_value = MagicMock(stdout=None, stderr=None, returncode=0)

        result = run_command(["winget"])

        assert result.stdout == ""
        assert result.stderr == ""

    @patch("winctl.utils.shell.subprocess.run")
    def test_timeout_propagates(self, mock_run: MagicMock) -> None:
        """Timeouts are raised to the caller."""
        mock_run.side_effect = subprocess.TimeoutExpired(["winget"], 1)

        with pytest.raises(subprocess.TimeoutExpired):
            run_command(["winget"], timeout=1)

    def test_raises_file_not_found(self) -> None:
        """A missing executable raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            run_command(["winctl-test-nonexistent-binary"])


class TestCommandExists:
    """Tests for command_exists function."""

    def test_found(self) -> None:
        """command_exists is True when the executable is on PATH."""
        with patch("winctl.utils.shell.shutil.which", return_value="/usr/bin/winget"):
            assert command_exists("winget")

    def test_not_found(self) -> None:
        """command_exists is False when the executable is missing."""
        with patch("winctl.utils.shell.shutil.which", return_value=None):
            assert not command_exists("winget")
