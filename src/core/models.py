"""
Update Resolver - Data Model
Application descriptors consumed by the resolver and the decisions it returns.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

DEFAULT_PUBLISHER = "Unknown"


@dataclass(frozen=True)
class ApplicationDescriptor:
    """Identity of a tracked local application. `path` is the unique key."""
    name: str
    publisher: str
    version: str
    path: str

    @classmethod
    def from_dict(cls, data: dict) -> "ApplicationDescriptor":
        """Build a descriptor from the scanner's JSON record."""
        return cls(
            name=data.get("name", ""),
            publisher=data.get("publisher") or DEFAULT_PUBLISHER,
            version=data.get("version", ""),
            path=data.get("path", ""),
        )


@dataclass(frozen=True)
class UpdateDecision:
    """Outcome of an update resolution. Immutable, so cached copies can be shared."""
    has_update: bool
    current_version: Optional[str] = None
    latest_version: Optional[str] = None
    note: Optional[str] = None               # Set only when resolution was incomplete
    download_url: Optional[str] = None       # Publisher download page, if known
    checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def display_version(self) -> str:
        """Get formatted version string for display."""
        if self.latest_version and self.has_update:
            return f"{self.current_version} → {self.latest_version}"
        return self.current_version or "unknown"

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        return {
            "hasUpdate": self.has_update,
            "currentVersion": self.current_version,
            "latestVersion": self.latest_version,
            "note": self.note,
            "downloadUrl": self.download_url,
            "checkedAt": self.checked_at.isoformat(),
        }
