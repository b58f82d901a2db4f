"""
Lyrics search processing with ordered provider fallback

This module is the central coordinator of a lyrics search. It takes the query
typed into the content-management UI, consults the providers strictly in
order, turns what they return into clean, bounded candidates and maps an
empty result to the typed "not found" error the UI renders.

Processing Flow:
1. Validation: blank queries are rejected before any provider is called; if
   no provider is configured the search fails as unavailable immediately.
2. Web search: the query plus a domain qualifier goes to the web search
   provider under its own deadline. Timeouts and transport faults count as
   zero hits so the fallback still runs.
3. Extraction: each hit with a URL not seen before is reduced to its best
   lyrics block, normalized, and kept if it clears the content threshold.
4. Fallback: only when step 3 produced nothing, the direct lookup provider is
   asked with the raw query under a second deadline.
5. Outcome: candidates in provider order, or the error naming the stage that
   came up empty.

Providers are never raced. The worst-case duration of a search is the sum of
both provider deadlines plus extraction, which is bounded by the page size cap.

The processor holds no mutable state; one instance serves concurrent
requests.
"""

import logging
from typing import Callable, List, Optional, Sequence

from ..config.settings import Settings
from ..exceptions import (
    InvalidRequestError,
    NoExtractableLyricsError,
    NoHitsFoundError,
    NoLookupMatchError,
    ProviderUnavailableError,
    SongFinderError,
)
from ..utils.deadline import Deadline
from ..utils.helpers import validate_lyrics_content
from ..utils.logger import get_logger, OperationLogger
from .extractor import extract_lyrics_block
from .genius import GeniusLookupProvider
from .models import (
    LOOKUP_URL_SENTINEL,
    PageHit,
    SearchOutcome,
    SearchQuery,
    SongCandidate,
)
from .normalizer import clean_title, normalize_candidate, truncate_lyrics
from .query import interpret_query
from .websearch import WebSearchProvider


NOT_FOUND_HINT = "Try another song or double-check the title and artist."


class LyricsSearchProcessor:
    """
    Ordered-fallback lyrics search over a web search and a direct lookup

    Args:
        settings: Loaded settings; thresholds and timeouts are read from here
        web_search: Primary provider (page search with scraped content)
        lookup: Fallback provider (single lyrics blob)
        logger: Logger, defaults to the module logger
        deadline_factory: Builds the per-call deadline from a budget in
                          seconds, injectable for tests
    """

    def __init__(
        self,
        settings: Settings,
        web_search: WebSearchProvider,
        lookup: GeniusLookupProvider,
        logger: Optional[logging.Logger] = None,
        deadline_factory: Callable[[float], Deadline] = Deadline
    ):
        self.settings = settings
        self.web_search = web_search
        self.lookup = lookup
        self.logger = logger or get_logger(__name__)
        self.deadline_factory = deadline_factory

    def search(self, query) -> SearchOutcome:
        """
        Find lyrics candidates for a free-text query

        Args:
            query: Query text as received from the caller

        Returns:
            SearchOutcome with at least one candidate, or with a typed error
        """
        if not isinstance(query, str) or not query.strip():
            return SearchOutcome.failed(
                query if isinstance(query, str) else "",
                InvalidRequestError(
                    "Query parameter is required.",
                    details={'detail': "Send a non-empty 'query' string."}
                )
            )

        search_query = interpret_query(query)

        if not self.web_search.configured and not self.lookup.configured:
            self.logger.error("Lyrics search requested but no provider is configured")
            return SearchOutcome.failed(
                search_query.raw,
                ProviderUnavailableError(
                    "Lyrics search is temporarily unavailable.",
                    details={'detail': "No lyrics provider is configured."}
                )
            )

        operation = OperationLogger(self.logger, f"Lyrics search: {search_query.raw}")
        operation.start()
        if search_query.parsed:
            operation.progress(
                f"Parsed as title={search_query.parsed.title!r}, artist={search_query.parsed.artist!r}"
            )

        stages: List[str] = []
        hit_count = 0

        if self.web_search.configured:
            stages.append(self.web_search.name)
            hits = self._search_web(search_query, operation)
            hit_count = len(hits)
            candidates = self._collect_candidates(search_query, hits)
            if candidates:
                operation.complete(f"{len(candidates)} candidate(s) from {self.web_search.name}")
                return SearchOutcome.found(search_query.raw, candidates, stages)
            operation.progress(f"No usable candidates from {hit_count} web hit(s), falling back")
        else:
            operation.progress(f"{self.web_search.name} not configured, skipping web search")

        if self.lookup.configured:
            stages.append(self.lookup.name)
            candidate = self._lookup(search_query, operation)
            if candidate:
                operation.complete(f"1 candidate from {self.lookup.name}")
                return SearchOutcome.found(search_query.raw, [candidate], stages)

        error = self._not_found_error(search_query, web_consulted=self.web_search.name in stages,
                                      hit_count=hit_count)
        operation.complete(f"no lyrics found ({error.category})")
        return SearchOutcome.failed(search_query.raw, error, stages)

    def _search_web(self, search_query: SearchQuery, operation: OperationLogger) -> Sequence[PageHit]:
        """Run the web search; any failure counts as zero hits"""
        config = self.settings.search
        text = f"{search_query.raw} {config.domain_qualifier}".strip()
        deadline = self.deadline_factory(config.timeout)

        result = self.web_search.search_pages(text, config.result_limit, deadline)
        if not result.ok:
            operation.warning(
                f"{self.web_search.name} failed ({result.failure.value}): {result.detail}"
            )
            return ()

        return result.hits[:config.result_limit]

    def _collect_candidates(self, search_query: SearchQuery, hits: Sequence[PageHit]) -> List[SongCandidate]:
        """
        Extract, normalize and filter candidates from web hits

        Hits without a URL or with a URL already used are skipped; order of
        the remaining hits is preserved.
        """
        extraction = self.settings.extraction
        candidates: List[SongCandidate] = []
        seen_urls = set()

        for hit in hits:
            if not hit.url or hit.url in seen_urls:
                continue
            seen_urls.add(hit.url)

            block = extract_lyrics_block(
                hit.raw_text[:extraction.max_page_chars],
                min_block_lines=extraction.min_block_lines,
                min_line_length=extraction.min_line_length
            )
            if not block:
                self.logger.debug(f"No lyrics block in {hit.url}")
                continue

            candidate = normalize_candidate(hit, block, search_query.raw, extraction.max_lyrics_chars)
            if not validate_lyrics_content(candidate.lyrics, extraction.min_content_chars):
                self.logger.debug(f"Block from {hit.url} below content threshold ({len(candidate.lyrics)} chars)")
                continue

            candidates.append(candidate)

        return candidates

    def _lookup(self, search_query: SearchQuery, operation: OperationLogger) -> Optional[SongCandidate]:
        """Run the direct lookup; any failure counts as no match"""
        extraction = self.settings.extraction
        deadline = self.deadline_factory(self.settings.lookup.timeout)

        result = self.lookup.lookup(search_query.raw, deadline)
        if not result.ok:
            operation.warning(f"{self.lookup.name} failed ({result.failure.value}): {result.detail}")
            return None

        if not result.text:
            return None

        lyrics = truncate_lyrics(result.text, extraction.max_lyrics_chars)
        if not validate_lyrics_content(lyrics, extraction.min_content_chars):
            self.logger.debug(f"{self.lookup.name} lyrics below content threshold ({len(lyrics)} chars)")
            return None

        return SongCandidate(
            title=clean_title(result.title or search_query.display_title, fallback=search_query.raw),
            lyrics=lyrics,
            source=self.lookup.name,
            url=LOOKUP_URL_SENTINEL,
        )

    @staticmethod
    def _not_found_error(search_query: SearchQuery, web_consulted: bool, hit_count: int) -> SongFinderError:
        details = {'detail': f'No lyrics found for "{search_query.raw}". {NOT_FOUND_HINT}'}

        if not web_consulted:
            return NoLookupMatchError("No lyrics found.", details=details)
        if hit_count == 0:
            return NoHitsFoundError("No lyrics found.", details=details)
        return NoExtractableLyricsError("No lyrics could be extracted.", details=details)


def create_processor(settings: Settings, logger: Optional[logging.Logger] = None) -> LyricsSearchProcessor:
    """
    Build a processor wired to the real Firecrawl and Genius providers

    Args:
        settings: Loaded settings
        logger: Optional logger injected into the processor and providers
    """
    return LyricsSearchProcessor(
        settings=settings,
        web_search=WebSearchProvider(settings.search, settings.network, logger=logger),
        lookup=GeniusLookupProvider(settings.lookup, logger=logger),
        logger=logger,
    )
