"""Unit tests for manifest models.

Tests for validation of the Pydantic manifest models.
"""

import pytest
from pydantic import ValidationError
from winctl.models.app import AppScope
from winctl.models.manifest import AppEntry, AppGroup, Manifest, Settings


class TestAppEntry:
    """Tests for AppEntry model."""

    def test_defaults(self) -> None:
        """AppEntry defaults to untracked scope and winget updates."""
        entry = AppEntry(name="Git", id="Git.Git")

        assert entry.scope == "none"
        assert entry.self_updating is False

    def test_id_is_stripped(self) -> None:
        """Surrounding whitespace is removed from ids."""
        assert AppEntry(name="Git", id="  Git.Git ").id == "Git.Git"

    def test_id_with_space_rejected(self) -> None:
        """Ids containing whitespace are rejected."""
        with pytest.raises(ValidationError, match="Invalid winget package id"):
            AppEntry(name="Git", id="Git Git")

    def test_invalid_scope_rejected(self) -> None:
        """Only user, machine and none are accepted."""
        with pytest.raises(ValidationError):
            AppEntry(name="Git", id="Git.Git", scope="global")  # type: ignore[arg-type]

    def test_extra_fields_forbidden(self) -> None:
        """Unknown keys are rejected."""
        with pytest.raises(ValidationError):
            AppEntry(name="Git", id="Git.Git", version="1.0")  # type: ignore[call-arg]


class TestAppGroup:
    """Tests for AppGroup model."""

    def test_default_hosts(self) -> None:
        """Groups apply to every host by default."""
        assert AppGroup().hosts == ["*"]

    def test_empty_hosts_rejected(self) -> None:
        """A group must name at least one host pattern."""
        with pytest.raises(ValidationError):
            AppGroup(hosts=[])

    def test_duplicate_ids_rejected(self) -> None:
        """An id may appear only once per group, ignoring case."""
        with pytest.raises(ValidationError, match="more than once"):
            AppGroup(
                apps=[
                    AppEntry(name="Git", id="Git.Git"),
                    AppEntry(name="git", id="git.git"),
                ]
            )

    def test_to_desired_apps(self) -> None:
        """Entries convert to DesiredApps carrying the group's hosts."""
        group = AppGroup(
            hosts=["PC-*"],
            apps=[AppEntry(name="Chrome", id="Google.Chrome", scope="machine", self_updating=True)],
        )

        (app,) = group.to_desired_apps()

        assert app.package_id == "Google.Chrome"
        assert app.scope == AppScope.MACHINE
        assert app.self_updating is True
        assert app.host_patterns == frozenset({"PC-*"})


class TestSettingsAndManifest:
    """Tests for Settings and Manifest models."""

    def test_settings_defaults(self) -> None:
        """Settings default to a 5 second settle delay."""
        settings = Settings()

        assert settings.settle_delay == 5.0
        assert settings.timeout == 600.0

    def test_negative_delay_rejected(self) -> None:
        """The settle delay cannot be negative."""
        with pytest.raises(ValidationError):
            Settings(settle_delay=-1)

    def test_app_count(self, sample_manifest: Manifest) -> None:
        """app_count sums apps across groups."""
        assert sample_manifest.app_count == 3

    def test_empty_manifest(self) -> None:
        """A manifest without groups is valid."""
        manifest = Manifest()

        assert manifest.groups == []
        assert manifest.app_count == 0
