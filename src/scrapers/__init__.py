"""
Update Resolver - Scrapers Package
"""

from scrapers.base import ScrapeStrategy, ScrapeResult
from scrapers.generic import GenericStrategy
from scrapers.google import GoogleStrategy
from scrapers.jetbrains import JetBrainsStrategy
from scrapers.microsoft import MicrosoftStrategy
from scrapers.mozilla import MozillaStrategy
from scrapers.registry import ScraperRegistry, build_registry
from scrapers.vscode import VSCodeStrategy

__all__ = [
    "ScrapeStrategy",
    "ScrapeResult",
    "GenericStrategy",
    "GoogleStrategy",
    "JetBrainsStrategy",
    "MicrosoftStrategy",
    "MozillaStrategy",
    "ScraperRegistry",
    "VSCodeStrategy",
    "build_registry",
]
