"""
Genius integration for direct lyrics lookup

Fallback lyrics source. Where the web search returns many pages that still
need extraction, Genius answers a loosely keyed query with at most one song
whose lyrics are already isolated. The lookup is best effort: the whole query
string is the search key and there is no artist/title disambiguation.

Genius lyrics arrive decorated with a contributor header, section headers and
an "Embed" marker; these are removed before the text is returned.
"""

import logging
from typing import Any, Callable, Dict, Optional

import lyricsgenius
import requests

from ..config.settings import LookupConfig
from ..utils.deadline import Deadline, DeadlineExceeded
from ..utils.helpers import clean_lyrics_text
from ..utils.logger import get_logger, log_performance
from .models import LookupResult, ProviderFailure


class GeniusLookupProvider:
    """
    Genius API lookup provider

    A fresh lyricsgenius client is created per lookup. Its ``timeout`` is
    reset from the remaining deadline before each request, and ``retries=0``
    with ``sleep_time=0`` keeps every request to one attempt with no pause.
    """

    name = "genius"

    # Hits requested from the song search; the first usable one is taken
    SEARCH_PAGE_SIZE = 5

    def __init__(
        self,
        config: LookupConfig,
        client_factory: Optional[Callable[..., lyricsgenius.Genius]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize Genius lookup provider

        Args:
            config: Lookup settings (credential, timeout)
            client_factory: Callable building the Genius client, injectable for tests
            logger: Logger, defaults to the module logger
        """
        self.config = config
        self.client_factory = client_factory or lyricsgenius.Genius
        self.logger = logger or get_logger(__name__)

    @property
    def configured(self) -> bool:
        return bool(self.config.genius_api_key.strip())

    def _create_client(self, deadline: Deadline) -> lyricsgenius.Genius:
        return self.client_factory(
            self.config.genius_api_key,
            timeout=deadline.timeout(),
            sleep_time=0,
            retries=0,
            remove_section_headers=True,
            verbose=False
        )

    @staticmethod
    def _arm(client: lyricsgenius.Genius, deadline: Deadline) -> None:
        """Give up if the budget is spent, else cap the next request by what is left"""
        deadline.check()
        client.timeout = deadline.timeout()

    @staticmethod
    def _first_song(response: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Pick the first hit that is a song with complete lyrics

        ``search/song`` nests its hits under ``sections``; the plain search
        endpoint returns them at the top level.
        """
        sections = response.get('sections')
        hits = sections[0].get('hits', []) if sections else response.get('hits', [])
        for hit in hits:
            song = hit.get('result') or {}
            if hit.get('type', 'song') != 'song' or not song.get('url'):
                continue
            if song.get('lyrics_state', 'complete') != 'complete' or song.get('instrumental'):
                continue
            return song
        return None

    @log_performance
    def lookup(self, query: str, deadline: Deadline) -> LookupResult:
        """
        Look up lyrics for a free-text query

        The search request and the song page scrape are issued one after the
        other, each with its timeout taken from what is left of the deadline.

        Args:
            query: Raw query text
            deadline: Budget for the whole lookup

        Returns:
            LookupResult with the cleaned lyrics (or None when Genius has no
            match), or a failure reason
        """
        if not self.configured:
            return LookupResult.error(ProviderFailure.UNCONFIGURED, "GENIUS_API_KEY not set")

        self.logger.info(f"Looking up Genius for: {query}")

        song = None
        lyrics = None
        try:
            client = self._create_client(deadline)

            self._arm(client, deadline)
            song = self._first_song(client.search_songs(query, per_page=self.SEARCH_PAGE_SIZE))

            if song is not None:
                self._arm(client, deadline)
                lyrics = client.lyrics(song_url=song['url'], remove_section_headers=True)

            deadline.check()

        except DeadlineExceeded as e:
            return LookupResult.error(ProviderFailure.TIMEOUT, str(e))
        except requests.exceptions.Timeout as e:
            return LookupResult.error(ProviderFailure.TIMEOUT, str(e))
        except requests.exceptions.HTTPError as e:
            return LookupResult.error(self._classify_http_error(e), str(e))
        except requests.exceptions.RequestException as e:
            if deadline.expired:
                return LookupResult.error(ProviderFailure.TIMEOUT, str(e))
            return LookupResult.error(ProviderFailure.TRANSPORT, str(e))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            # Search payload or song page layout changes surface here
            self.logger.error(f"Genius response could not be parsed: {e}")
            return LookupResult.error(ProviderFailure.MALFORMED, str(e))

        if song is None:
            self.logger.info(f"No Genius match for: {query}")
            return LookupResult.success(None)

        if not isinstance(lyrics, str) or not lyrics.strip():
            return LookupResult.success(None)

        title = song.get('title')
        return LookupResult.success(
            clean_lyrics_text(lyrics),
            title=title if isinstance(title, str) and title.strip() else None
        )

    @staticmethod
    def _classify_http_error(error: requests.exceptions.HTTPError) -> ProviderFailure:
        """
        Map a Genius HTTP error to a failure reason

        lyricsgenius raises ``HTTPError(status_code, description)`` without a
        response object, so the status is read from the arguments too.
        """
        status = getattr(error.response, 'status_code', None)
        if status is None and error.args and isinstance(error.args[0], int):
            status = error.args[0]

        if status in (401, 403):
            return ProviderFailure.AUTH
        if status == 429:
            return ProviderFailure.QUOTA
        return ProviderFailure.TRANSPORT
