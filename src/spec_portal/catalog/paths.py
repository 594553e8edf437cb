"""Content-path grammar for spec files.

Versioned layout:  <language>/apispecs/<service>/<version>/<file>.yaml
Legacy layout:     <language>/apispecs/<file>.yaml
"""

import re
from pathlib import Path, PurePath

from .base import LegacyLocation, SpecLocation

SPECS_SEGMENT = "apispecs"
SPEC_SUFFIXES = (".yaml", ".yml")

VERSION_DIR_PATTERN = re.compile(r"^v\d+$")


def _segments(path: str | PurePath) -> list[str]:
    text = str(path).replace("\\", "/")
    return [part for part in text.split("/") if part and part != "."]


def _split_at_specs(path: str | PurePath) -> tuple[str, list[str]] | None:
    """Return (language, segments after apispecs), or None if there is no such anchor."""
    parts = _segments(path)
    if SPECS_SEGMENT not in parts:
        return None
    # Anchor on the last occurrence so a content root named "apispecs" cannot shift it.
    index = len(parts) - 1 - parts[::-1].index(SPECS_SEGMENT)
    if index == 0:
        return None
    return parts[index - 1], parts[index + 1:]


def is_spec_file(name: str) -> bool:
    return name.lower().endswith(SPEC_SUFFIXES)


def parse_spec_path(path: str | PurePath) -> SpecLocation | None:
    """Parse a versioned spec path into its (language, service, version, file) parts.

    Returns None for any path that is not exactly
    ``.../<language>/apispecs/<service>/<version>/<file>.yaml``.
    """
    split = _split_at_specs(path)
    if split is None:
        return None
    language, tail = split
    if len(tail) != 3 or not is_spec_file(tail[2]):
        return None
    service, version, file_name = tail
    return SpecLocation(language=language, service=service, version=version, file_name=file_name)


def parse_legacy_path(path: str | PurePath) -> LegacyLocation | None:
    split = _split_at_specs(path)
    if split is None:
        return None
    language, tail = split
    if len(tail) != 1 or not is_spec_file(tail[0]):
        return None
    file_name = tail[0]
    return LegacyLocation(language=language, spec_id=Path(file_name).stem, file_name=file_name)


def is_version_directory(name: str) -> bool:
    return bool(VERSION_DIR_PATTERN.match(name))


def version_number(name: str) -> int:
    """Numeric suffix of a ``v<N>`` directory name."""
    return int(name[1:])
