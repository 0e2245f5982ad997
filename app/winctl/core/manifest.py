"""Manifest file I/O.

The manifest is a TOML file validated by the pydantic models in
``winctl.models.manifest``. Writes go through a temporary file so an
interrupted save never leaves a truncated manifest behind.
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

import tomli_w
import typer
from pydantic import ValidationError

from winctl.core.paths import get_manifest_path
from winctl.models.manifest import AppEntry, Manifest
from winctl.utils.formatting import print_error, print_info


class ManifestError(Exception):
    """Base exception for manifest-related errors."""


class ManifestNotFoundError(ManifestError):
    """Raised when manifest file is not found."""


class ManifestParseError(ManifestError):
    """Raised when manifest file cannot be parsed."""


class ManifestValidationError(ManifestError):
    """Raised when manifest content is invalid."""


def _format_validation_error(error: ValidationError) -> str:
    """Summarize pydantic errors as 'groups.0.apps.1.scope: message' entries."""
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "manifest"
        problems.append(f"{location}: {item['msg']}")
    return "; ".join(problems)


def load_manifest(path: Path | None = None) -> Manifest:
    """Load and validate a manifest.

    Files saved by Notepad start with a UTF-8 byte order mark; it is
    accepted and ignored.

    Args:
        path: Manifest file. Defaults to the config directory's manifest.

    Returns:
        Validated Manifest object.

    Raises:
        ManifestNotFoundError: If the file doesn't exist.
        ManifestParseError: If the file is not valid TOML.
        ManifestValidationError: If the content doesn't match the schema.
        ManifestError: If the file cannot be read.
    """
    manifest_path = path or get_manifest_path()
    if not manifest_path.exists():
        msg = f"Manifest not found: {manifest_path}"
        raise ManifestNotFoundError(msg)

    try:
        text = manifest_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        msg = f"Failed to read manifest: {e}"
        raise ManifestError(msg) from e

    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML syntax: {e}"
        raise ManifestParseError(msg) from e

    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid manifest content: {_format_validation_error(e)}"
        raise ManifestValidationError(msg) from e


def save_manifest(manifest: Manifest, path: Path | None = None) -> Path:
    """Write a manifest as TOML, replacing any existing file.

    Args:
        manifest: The manifest to save.
        path: Target file. Defaults to the config directory's manifest.

    Returns:
        Path where the manifest was saved.

    Raises:
        ManifestError: If the file cannot be written.
    """
    manifest_path = path or get_manifest_path()
    data = _manifest_to_dict(manifest)

    tmp_path: Path | None = None
    try:
        manifest_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile("wb", dir=manifest_path.parent, suffix=".tmp", delete=False) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(tmp_path, manifest_path)
    except OSError as e:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        msg = f"Failed to write manifest: {e}"
        raise ManifestError(msg) from e

    return manifest_path


def manifest_exists(path: Path | None = None) -> bool:
    """Check if a manifest file exists (default location if no path given)."""
    return (path or get_manifest_path()).exists()


def require_manifest(manifest_path: Path | None = None) -> Manifest:
    """Load the manifest for a command, exiting with code 1 on failure.

    Raises:
        typer.Exit: If the manifest is missing or invalid.
    """
    path = manifest_path or get_manifest_path()
    try:
        return load_manifest(path)
    except ManifestNotFoundError as e:
        print_error(f"Manifest not found: {path}")
        print_info("Run 'winctl init' to create a starter manifest for this machine.")
        raise typer.Exit(code=1) from e
    except ManifestError as e:
        print_error(f"Failed to load manifest: {e}")
        raise typer.Exit(code=1) from e


def _manifest_to_dict(manifest: Manifest) -> dict[str, Any]:
    """Convert a Manifest to a dictionary suitable for TOML serialization.

    Args:
        manifest: The Manifest object to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    meta: dict[str, Any] = {"version": manifest.meta.version}
    if manifest.meta.created is not None:
        meta["created"] = manifest.meta.created
    if manifest.meta.updated is not None:
        meta["updated"] = manifest.meta.updated

    groups: list[dict[str, Any]] = []
    for group in manifest.groups:
        group_data: dict[str, Any] = {}
        if group.name:
            group_data["name"] = group.name
        group_data["hosts"] = list(group.hosts)
        group_data["apps"] = [_app_entry_to_dict(entry) for entry in group.apps]
        groups.append(group_data)

    return {
        "meta": meta,
        "settings": {
            "settle_delay": manifest.settings.settle_delay,
            "timeout": manifest.settings.timeout,
        },
        "groups": groups,
    }


def _app_entry_to_dict(entry: AppEntry) -> dict[str, Any]:
    """Convert an AppEntry to a dictionary, omitting defaults."""
    result: dict[str, Any] = {"name": entry.name, "id": entry.id}
    if entry.scope != "none":
        result["scope"] = entry.scope
    if entry.self_updating:
        result["self_updating"] = True
    return result
