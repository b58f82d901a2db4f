"""
Exception classes for SongFinder.

This module defines the error taxonomy of the lyrics search pipeline. Every
error a caller can see is one of these classes, and each class carries two
pieces of machine-readable information next to its human-readable message:

- ``category``: a stable identifier the UI switches on
- ``http_status``: the status code the HTTP boundary responds with

Exception Hierarchy:
    SongFinderError (base)
        ConfigError - Configuration file or value issues
        InvalidRequestError - Missing/blank query or wrong method (400)
        ProviderUnavailableError - No usable provider configuration (503)
        LyricsNotFoundError - Well-formed search that produced nothing (404)
            NoHitsFoundError - Web search returned zero hits
            NoExtractableLyricsError - Hits found, nothing extractable
            NoLookupMatchError - Direct lookup found nothing
        UnexpectedFaultError - Anything else, surfaced generically (500)

Provider transport failures and timeouts are deliberately absent from this
list: they are recovered inside the search processor and never reach the
caller directly.
"""

from typing import Any, Dict, Optional


class SongFinderError(Exception):
    """
    Base exception for all SongFinder errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (query, provider,
                 upstream status code). Only ``details['detail']`` is ever
                 shown to callers; the rest is for logs.
    """

    category = "SONGFINDER_ERROR"
    http_status = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description shown to the user.
            details: Optional dictionary containing additional context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def detail(self) -> Optional[str]:
        """Caller-safe detail text, if any"""
        value = self.details.get("detail")
        return str(value) if value else None

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(SongFinderError):
    """
    Raised when the configuration file or its values are invalid.

    This is a CRITICAL error raised while loading settings, before the
    service starts answering requests.

    Example:
        raise ConfigError(
            "Invalid configuration",
            details={'problems': ['search.timeout must be between 1 and 60']}
        )
    """

    category = "CONFIG_ERROR"
    http_status = 500


class InvalidRequestError(SongFinderError):
    """
    Raised for a missing or blank query, a non-JSON body or a wrong method.

    Rejected before any provider is called and never retried.
    """

    category = "INVALID_REQUEST"
    http_status = 400


class ProviderUnavailableError(SongFinderError):
    """
    Raised when no provider has a usable credential or configuration.

    Surfaced immediately: calls that are guaranteed to fail are not attempted.
    The UI renders this as "feature temporarily disabled".
    """

    category = "PROVIDER_UNAVAILABLE"
    http_status = 503


class LyricsNotFoundError(SongFinderError):
    """
    Base for the well-formed "nothing found" outcomes.

    The UI renders every subclass as "try a different title"; the subclass
    only tells operators which stage came up empty.
    """

    category = "NOT_FOUND"
    http_status = 404


class NoHitsFoundError(LyricsNotFoundError):
    """Web search returned zero hits (clean miss or fault) and the lookup found nothing"""

    category = "NO_HITS_FOUND"


class NoExtractableLyricsError(LyricsNotFoundError):
    """Web search returned hits but none cleared the content threshold, and the lookup found nothing"""

    category = "NO_EXTRACTABLE_LYRICS"


class NoLookupMatchError(LyricsNotFoundError):
    """Web search was not configured and the direct lookup found nothing"""

    category = "NO_LOOKUP_MATCH"


class UnexpectedFaultError(SongFinderError):
    """
    Raised (or synthesized) for any other failure at the service boundary.

    The original exception is logged with its traceback; callers only ever see
    the generic message so no internal detail leaks.
    """

    category = "UNEXPECTED_FAULT"
    http_status = 500

    def __init__(
        self,
        message: str = "Lyrics search failed. Please try again later.",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
