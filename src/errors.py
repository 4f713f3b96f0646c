"""Error taxonomy shared by the document model, fetcher and finder."""

from __future__ import annotations

from typing import Optional


class PomFinderError(Exception):
    """Base class for every error raised by pomfinder."""


class InputFormatError(PomFinderError):
    """Raised when coordinate text cannot be parsed."""


class ConfigError(PomFinderError):
    """Raised when a configuration file or option value is invalid."""


class NetworkError(PomFinderError):
    """Raised when a URL could not be fetched within its retry budget."""

    def __init__(self, url: str, status: Optional[int] = None, reason: str = ""):
        self.url = url
        self.status = status
        self.reason = reason
        detail = f"status: {status}" if status is not None else reason
        super().__init__(f"failed to fetch with {detail}: {url}")


class DocumentFormatError(PomFinderError):
    """Raised when a POM or metadata document is not valid XML."""


class MetadataNotFound(PomFinderError):
    """Raised when no repository has usable version metadata."""


class PomNotFound(PomFinderError):
    """Raised when no repository has the descriptor document."""
