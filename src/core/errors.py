"""
Update Resolver - Error Taxonomy
Failures raised inside the engine. Scraping failures never leave the resolver;
only a contract violation by the caller can.
"""


class ResolverError(Exception):
    """Base class for update resolution errors."""


class ScrapeError(ResolverError):
    """A strategy could not produce a version. Always absorbed."""


class FetchError(ScrapeError):
    """Network or transport failure, including non-2xx responses."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class ParseError(ScrapeError):
    """The page did not contain an extractable version token."""


class InvalidVersionError(ScrapeError):
    """An extracted token did not survive normalization."""


class NoStrategyError(ResolverError):
    """Neither a publisher strategy nor the generic fallback is available."""


class ContractViolation(ValueError):
    """The caller passed an absent or version-less application descriptor."""
