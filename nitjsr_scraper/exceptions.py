class ScraperError(Exception):
    """Base class for crawl-side failures."""


class FetchError(ScraperError):
    """A page or file could not be downloaded (timeout, HTTP error, size limit)."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class DecodeError(ScraperError):
    """A downloaded PDF could not be turned into text."""
