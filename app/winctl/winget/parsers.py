"""Parsers for winget command output.

Winget has no structured output for ``list`` and ``upgrade``, so package
ids and versions are scraped from its fixed-width tables. All of the
scraping lives here; the rest of winctl only sees ids, versions and sets.

The table parser is best-effort: columns are located from the header
line above the dashed separator, and each row is sliced at those
positions. Rows whose sliced id does not look like a package id (for
example when wide characters in the name shift the columns) fall back to
splitting on runs of two or more spaces and picking the first id-like
token. Ids that contain unusual characters may still be missed.
"""

import json
import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Winget prints spinners and progress bars with ANSI sequences.
_ANSI_CSI_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")
_ANSI_OSC_RE = re.compile(r"\x1b\][^\x07]*(?:\x07|\x1b\\)")
_LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")
_SEPARATOR_RE = re.compile(r"^-{5,}$")
_HEADER_WORD_RE = re.compile(r"\S+")
_SPLIT_COLUMNS_RE = re.compile(r"\s{2,}")

_STORE_ID_RE = re.compile(r"^[0-9A-Z]{12}$")
_VERSION_RE = re.compile(r"^(?:[<>] )?v?\d+(?:\.\d+)*(?:[-+][\w.]+)?$")
_VERSION_SEARCH_RE = re.compile(r"\d+(?:\.\d+)+(?:[-+][\w.]+)?")


@dataclass(frozen=True, slots=True)
class TableRow:
    """One row of a winget ``list`` or ``upgrade`` table.

    Attributes:
        name: Display name (possibly truncated by winget).
        package_id: Package identifier.
        version: Installed version column.
        available: Available version column (empty when absent).
        source: Source column (empty when absent).
    """

    name: str
    package_id: str
    version: str = ""
    available: str = ""
    source: str = ""


def sanitize(text: str) -> list[str]:
    """Strip ANSI sequences and split output into lines.

    Carriage returns are treated as line breaks so spinner frames end up
    on their own (ignored) lines.
    """
    if not text:
        return []
    text = _ANSI_OSC_RE.sub("", text)
    text = _ANSI_CSI_RE.sub("", text)
    return [line.rstrip() for line in _LINE_SPLIT_RE.split(text)]


def looks_like_id(value: str) -> bool:
    """Check if a string could be a winget package id.

    Accepts dotted ids (Git.Git), ARP/MSIX ids (ARP\\Machine\\X64\\...)
    and 12 character Microsoft Store ids.
    """
    if len(value) < 2 or any(ch.isspace() for ch in value):
        return False
    if looks_like_version(value):
        return False
    return "." in value or "\\" in value or bool(_STORE_ID_RE.match(value))


def looks_like_version(value: str) -> bool:
    """Check if a string looks like a version column value."""
    return bool(_VERSION_RE.match(value))


def _column_starts(header: str) -> dict[str, int]:
    """Map lower-cased header words to their start offsets."""
    return {m.group(0).casefold(): m.start() for m in _HEADER_WORD_RE.finditer(header)}


def _slice(line: str, start: int, end: int | None) -> str:
    return line[start:end].strip() if start < len(line) else ""


def _fallback_row(line: str) -> TableRow | None:
    """Build a row by splitting on runs of spaces when slicing failed."""
    cols = _SPLIT_COLUMNS_RE.split(line.strip())
    for index, col in enumerate(cols[1:], start=1):
        if looks_like_id(col):
            rest = cols[index + 1 :]
            return TableRow(
                name=" ".join(cols[:index]),
                package_id=col,
                version=rest[0] if len(rest) > 0 else "",
                available=rest[1] if len(rest) > 2 else "",
                source=rest[-1] if len(rest) > 1 else "",
            )
    return None


def parse_table(text: str) -> list[TableRow]:
    """Parse the first fixed-width table in winget output.

    Args:
        text: Raw stdout of ``winget list`` or ``winget upgrade``.

    Returns:
        Parsed rows; empty if no table is found.
    """
    lines = sanitize(text)

    separator_index = next(
        (i for i, line in enumerate(lines) if _SEPARATOR_RE.match(line.strip())),
        None,
    )
    if separator_index is None:
        logger.debug("No table separator found in winget output")
        return []

    header = next(
        (lines[i] for i in range(separator_index - 1, -1, -1) if lines[i].strip()),
        "",
    )
    starts = _column_starts(header)
    ordered = sorted(starts.values())
    if len(ordered) < 3:
        logger.debug("Unrecognized winget table header: %r", header)
        return []

    id_start = starts.get("id", ordered[1])
    version_start = starts.get("version", ordered[2])
    # Localized headers keep the column order: Name Id Version [Available] Source
    available_start = starts.get("available", ordered[3] if len(ordered) > 4 else None)
    source_start = starts.get("source", ordered[-1] if len(ordered) > 3 else None)

    def next_start(start: int) -> int | None:
        later = [s for s in ordered if s > start]
        return later[0] if later else None

    rows: list[TableRow] = []
    for line in lines[separator_index + 1 :]:
        if not line.strip():
            break

        package_id = _slice(line, id_start, next_start(id_start))
        if not looks_like_id(package_id):
            fallback = _fallback_row(line)
            if fallback is None:
                logger.debug("Skipping unparsable winget row: %r", line[:100])
            else:
                rows.append(fallback)
            continue

        rows.append(
            TableRow(
                name=line[:id_start].strip(),
                package_id=package_id,
                version=_slice(line, version_start, next_start(version_start)),
                available=(
                    _slice(line, available_start, next_start(available_start))
                    if available_start is not None
                    else ""
                ),
                source=_slice(line, source_start, None) if source_start is not None else "",
            )
        )

    return rows


def parse_list_ids(text: str) -> set[str]:
    """Extract the package ids listed by ``winget list``.

    Args:
        text: Raw stdout of ``winget list --scope ...``.

    Returns:
        Set of package ids as printed by winget.
    """
    return {row.package_id for row in parse_table(text)}


def parse_upgrades(text: str) -> dict[str, str]:
    """Extract upgradable packages from ``winget upgrade`` output.

    Args:
        text: Raw stdout of ``winget upgrade``.

    Returns:
        Mapping of package id to available version.
    """
    return {row.package_id: row.available for row in parse_table(text) if row.available}


def parse_export(text: str) -> dict[str, str | None]:
    """Parse the JSON document written by ``winget export``.

    Args:
        text: Contents of the export file.

    Returns:
        Mapping of package id to exported version (None when the export
        has no version for the package).

    Raises:
        ValueError: If the document is not a winget export.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"winget export is not valid JSON: {e}"
        raise ValueError(msg) from e

    if not isinstance(data, dict) or not isinstance(data.get("Sources"), list):
        msg = "winget export has no 'Sources' list"
        raise ValueError(msg)

    packages: dict[str, str | None] = {}
    for source in data["Sources"]:
        if not isinstance(source, dict):
            continue
        for item in source.get("Packages", []):
            if not isinstance(item, dict):
                continue
            package_id = str(item.get("PackageIdentifier", "")).strip()
            if not package_id:
                continue
            version = item.get("Version")
            packages[package_id] = str(version) if version else None
    return packages


def find_package(text: str, package_id: str) -> TableRow | None:
    """Find a package in ``winget list --id <id> --exact`` output.

    Args:
        text: Raw stdout of the targeted list query.
        package_id: Package id that was queried.

    Returns:
        The matching row, or None if the id is not in the output. The
        version is best-effort: when the table cannot be parsed it is
        pattern-matched from the text following the id.
    """
    wanted = package_id.casefold()
    for row in parse_table(text):
        if row.package_id.casefold() == wanted:
            return row

    for line in sanitize(text):
        position = line.casefold().find(wanted)
        if position < 0:
            continue
        # Only accept whole-token matches
        end = position + len(wanted)
        if (position > 0 and not line[position - 1].isspace()) or (
            end < len(line) and not line[end].isspace()
        ):
            continue
        match = _VERSION_SEARCH_RE.search(line, end)
        return TableRow(
            name=line[:position].strip(),
            package_id=line[position:end],
            version=match.group(0) if match else "",
        )
    return None
