"""
Exceptions raised outside the pure enrichment core.
The core itself is total; only broken pool data can make it fail.
"""


class PrismError(Exception):
    """Base class for briefing pipeline errors."""


class ParseError(PrismError):
    """Raised when LLM output cannot be parsed into raw article records."""


class RateLimitError(PrismError):
    """Raised when the LLM provider keeps answering HTTP 429 after retries."""

    def __init__(self, message, retry_after=None):
        super().__init__(message)
        self.retry_after = retry_after


class DiscoveryError(PrismError):
    """Raised when a web-search vector cannot be fetched."""


class PoolIntegrityError(PrismError):
    """Raised at import when the curated source pool cannot satisfy the floor."""
