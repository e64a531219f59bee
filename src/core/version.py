"""
Update Resolver - Version Normalizer
Turns the version strings found on upstream pages into comparable triples.
"""

import re
from typing import Iterable, NamedTuple, Optional
import logging

logger = logging.getLogger(__name__)

_NON_VERSION_CHARS = re.compile(r"[^0-9.]")
_VERSION_TOKEN = re.compile(r"\d+\.\d+(?:\.\d+)?")

# Tried in order, longest form first
_PARSE_PATTERNS = [
    re.compile(r"(\d+\.\d+\.\d+\.\d+)"),
    re.compile(r"(\d+\.\d+\.\d+)"),
    re.compile(r"(\d+\.\d+)"),
]


class SemanticVersion(NamedTuple):
    """Canonical (major, minor, patch) triple."""
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def _clean(raw: Optional[str]) -> str:
    if not raw:
        return ""
    return _NON_VERSION_CHARS.sub("", str(raw))


def normalize(raw: Optional[str]) -> SemanticVersion:
    """
    Normalize a version string to a 3-component semantic version.

    Handles formats like:
    - 12
    - v12.0
    - Version 12.0.1-beta
    - 124.0.6367.60

    Never fails: empty or garbage input yields 0.0.0.

    Args:
        raw: The version string to normalize

    Returns:
        SemanticVersion with exactly three non-negative components
    """
    parts = _clean(raw).split(".")
    numbers = []
    for part in parts[:3]:
        numbers.append(int(part) if part.isdigit() else 0)
    while len(numbers) < 3:
        numbers.append(0)
    return SemanticVersion(*numbers)


def format_version(version: SemanticVersion) -> str:
    """Render a normalized version as 'major.minor.patch'."""
    return str(version)


def is_valid(raw: Optional[str]) -> bool:
    """Check that a version string still has a digit once cleaned."""
    return any(ch.isdigit() for ch in _clean(raw))


def compare(a: Optional[str], b: Optional[str]) -> int:
    """
    Compare two version strings.

    Args:
        a: First version string
        b: Second version string

    Returns:
        1 if a > b, -1 if a < b, 0 if equal or either is invalid
    """
    if not is_valid(a) or not is_valid(b):
        return 0

    va = normalize(a)
    vb = normalize(b)
    if va > vb:
        return 1
    elif va < vb:
        return -1
    return 0


def is_newer(candidate: Optional[str], baseline: Optional[str]) -> bool:
    """
    Check if candidate is newer than baseline.

    Args:
        candidate: The potentially newer version
        baseline: The current/installed version

    Returns:
        True if candidate > baseline, False if either is invalid
    """
    return compare(candidate, baseline) > 0


def parse_version(text: Optional[str]) -> Optional[str]:
    """Pull the first version-looking token out of free text."""
    if not text:
        return None

    for pattern in _PARSE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def find_versions(text: Optional[str]) -> list[str]:
    """Return every distinct version token in text, in order of appearance."""
    if not text:
        return []

    seen = []
    for match in _VERSION_TOKEN.finditer(text):
        token = match.group(0)
        if token not in seen:
            seen.append(token)
    return seen


def max_version(candidates: Iterable[str]) -> Optional[str]:
    """Pick the highest valid version; the earliest one wins on ties."""
    best = None
    for candidate in candidates:
        if not is_valid(candidate):
            logger.debug(f"Ignoring invalid version candidate: {candidate!r}")
            continue
        if best is None or compare(candidate, best) > 0:
            best = candidate
    return best
