"""
Update Resolver - Configuration
Loads resolver settings from the JSON config file, falling back to defaults.
"""

import json
import logging
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "update-resolver" / "config.json"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


@dataclass
class ResolverSettings:
    """Tunable policies of the update resolver."""
    cache_ttl_seconds: float = 3600.0        # Decisions stay fresh for an hour
    timeout_seconds: float = 15.0            # Deadline for a whole strategy fetch
    request_timeout_seconds: float = 5.0     # Socket timeout per HTTP request
    max_checks: int = 1                      # Resolutions allowed per session
    max_workers: int = 4
    strict: bool = False                     # Raise on contract violations
    user_agent: str = DEFAULT_USER_AGENT
    generic_enabled: bool = True
    search_url: str = "https://www.google.com/search?q={query}"
    search_result_selector: str = "div.g"
    browser_enabled: bool = True
    headless: bool = True
    disabled_strategies: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ResolverSettings":
        """Build settings from a config mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown resolver settings: {sorted(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def is_strategy_enabled(self, key: str) -> bool:
        disabled = {k.lower() for k in self.disabled_strategies}
        return key.lower() not in disabled


def load_settings(config_path: Optional[Path] = None) -> ResolverSettings:
    """
    Load settings from the 'resolver' section of a JSON config file.

    Args:
        config_path: Path to configuration file.

    Returns:
        ResolverSettings, defaults when the file is missing or unreadable.
    """
    if config_path and config_path.exists():
        try:
            with open(config_path) as f:
                data = json.load(f)
            return ResolverSettings.from_dict(data.get("resolver", {}))
        except (json.JSONDecodeError, IOError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load config: {e}")

    return ResolverSettings()


def save_settings(settings: ResolverSettings, config_path: Path) -> None:
    """Write settings back under the 'resolver' section, keeping other sections."""
    data = {}
    if config_path.exists():
        try:
            with open(config_path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Overwriting unreadable config {config_path}: {e}")

    data["resolver"] = asdict(settings)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, 'w') as f:
        json.dump(data, f, indent=2)
