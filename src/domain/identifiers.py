"""
Identifier validation

Every externally influenced value that ends up in a command line, a file
path or a SQL statement is checked here first.
"""

import re
from pathlib import Path
from typing import Optional

SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")
DB_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,63}$")
PATH_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")

SUBDOMAIN_BASE_MAX_LENGTH = 20
DEFAULT_SUBDOMAIN = "demo"


class InvalidIdentifierError(ValueError):
    """Raised when a value fails its whitelist check."""

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"Invalid {kind}: {value!r}")


def sanitize_subdomain(*candidates: Optional[str]) -> str:
    """
    Turn the first usable candidate into a subdomain base.

    Lowercases, replaces anything outside [a-z0-9] with '-', collapses runs
    of '-', trims them from both ends and cuts to 20 characters. Falls back
    to "demo" when no candidate survives.
    """
    for candidate in candidates:
        if not candidate:
            continue
        slug = re.sub(r"[^a-z0-9]", "-", candidate.lower())
        slug = re.sub(r"-+", "-", slug).strip("-")
        slug = slug[:SUBDOMAIN_BASE_MAX_LENGTH].strip("-")
        if slug:
            return slug
    return DEFAULT_SUBDOMAIN


def database_name_for(subdomain: str) -> str:
    return validate_db_name(f"demo_{validate_subdomain(subdomain).replace('-', '_')}")


def validate_subdomain(value: str) -> str:
    if not isinstance(value, str) or not SUBDOMAIN_PATTERN.match(value):
        raise InvalidIdentifierError("subdomain", str(value))
    return value


def validate_db_name(value: str) -> str:
    if not isinstance(value, str) or not DB_NAME_PATTERN.match(value):
        raise InvalidIdentifierError("database name", str(value))
    return value


def validate_path_segment(value: str) -> str:
    if (
        not isinstance(value, str)
        or value in (".", "..")
        or not PATH_SEGMENT_PATTERN.match(value)
    ):
        raise InvalidIdentifierError("path segment", str(value))
    return value


def resolve_within(base_dir: Path, *segments: str) -> Path:
    """
    Join validated segments under base_dir and make sure the resolved path
    did not escape it (symlinks included).
    """
    base = Path(base_dir).resolve()
    candidate = base.joinpath(*(validate_path_segment(s) for s in segments)).resolve()
    if candidate != base and not candidate.is_relative_to(base):
        raise InvalidIdentifierError("path", str(candidate))
    return candidate
