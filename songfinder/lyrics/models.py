"""
Data models for the lyrics search pipeline

Every entity here lives for exactly one search request: the query as typed,
the raw pages returned by the web search provider, the candidates offered to
the user and the final outcome. Nothing is persisted.

Provider adapters never hand raw JSON to the rest of the pipeline. They return
tagged results (``ProviderResult`` for page searches, ``LookupResult`` for the
direct lookup) that are either ``ok`` with validated data or carry a
``ProviderFailure`` reason, so malformed upstream payloads stop at the adapter
boundary.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import SongFinderError


# Placeholder URL for candidates from the direct lookup, which has no page
LOOKUP_URL_SENTINEL = "lookup://genius"


class ProviderFailure(Enum):
    """
    Reasons a provider call produced no usable data

    - UNCONFIGURED: no credential; the call was never attempted
    - TIMEOUT: the deadline expired before a complete response
    - TRANSPORT: connection error or unexpected HTTP status
    - AUTH: credential rejected (401/403)
    - QUOTA: plan or rate limit exhausted (402/429)
    - MALFORMED: response could not be decoded into the expected shape
    """
    UNCONFIGURED = "unconfigured"
    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    AUTH = "auth"
    QUOTA = "quota"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ParsedQuery:
    """Title/artist split of a query such as "Amazing Grace - Chris Tomlin" """
    title: str
    artist: str


@dataclass(frozen=True)
class SearchQuery:
    """
    Query as received, with the optional title/artist split

    Attributes:
        raw: Whitespace-normalized query text, sent to providers unchanged
        parsed: Title/artist split when a separator pattern matched
    """
    raw: str
    parsed: Optional[ParsedQuery] = None

    @property
    def display_title(self) -> str:
        """Best human title for the query: parsed title if any, else raw"""
        return self.parsed.title if self.parsed else self.raw


@dataclass(frozen=True)
class PageHit:
    """
    One web search result with its scraped page content

    Attributes:
        url: Page URL (may be empty for malformed hits, which are skipped)
        page_title: Title reported by the provider, possibly empty
        raw_text: Scraped page body (markdown), unstructured
    """
    url: str
    page_title: str = ""
    raw_text: str = ""

    @classmethod
    def from_firecrawl_data(cls, data: Dict[str, Any]) -> 'PageHit':
        """
        Build a PageHit from one item of a Firecrawl search response

        Only string fields are accepted; anything else collapses to an empty
        string so downstream code never sees non-text values. When no page
        body was scraped the search description stands in for it.

        Args:
            data: One element of the response ``data`` list

        Returns:
            PageHit instance (url may be empty)
        """
        def text(*keys: str) -> str:
            for key in keys:
                value = data.get(key)
                if isinstance(value, str) and value.strip():
                    return value
            return ""

        metadata = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}
        url = text("url") or (metadata.get("sourceURL") if isinstance(metadata.get("sourceURL"), str) else "")
        page_title = text("title") or (metadata.get("title") if isinstance(metadata.get("title"), str) else "")
        snippet = text("description", "snippet")
        body = text("markdown", "content")

        return cls(
            url=url.strip(),
            page_title=page_title.strip(),
            raw_text=body or snippet,
        )


@dataclass(frozen=True)
class SongCandidate:
    """
    One proposed lyrics result for the user to pick

    Attributes:
        title: Clean display title, never empty
        lyrics: Extracted lyrics, within [min_content_chars, max_lyrics_chars]
        source: Short provider or host label
        url: Page URL, or LOOKUP_URL_SENTINEL for the direct lookup
    """
    title: str
    lyrics: str
    source: str
    url: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class ProviderResult:
    """Tagged outcome of a page search: ok with hits, or a failure reason"""
    ok: bool
    hits: Tuple[PageHit, ...] = ()
    failure: Optional[ProviderFailure] = None
    detail: str = ""

    @classmethod
    def success(cls, hits: List[PageHit]) -> 'ProviderResult':
        return cls(ok=True, hits=tuple(hits))

    @classmethod
    def error(cls, failure: ProviderFailure, detail: str = "") -> 'ProviderResult':
        return cls(ok=False, failure=failure, detail=detail)


@dataclass(frozen=True)
class LookupResult:
    """Tagged outcome of a direct lookup: ok with an optional blob, or a failure reason"""
    ok: bool
    text: Optional[str] = None
    title: Optional[str] = None
    failure: Optional[ProviderFailure] = None
    detail: str = ""

    @classmethod
    def success(cls, text: Optional[str], title: Optional[str] = None) -> 'LookupResult':
        return cls(ok=True, text=text, title=title)

    @classmethod
    def error(cls, failure: ProviderFailure, detail: str = "") -> 'LookupResult':
        return cls(ok=False, failure=failure, detail=detail)


@dataclass
class SearchOutcome:
    """
    Final result of one search: candidates or a typed error, never both

    Attributes:
        query: Query text as searched
        candidates: Ordered, URL-unique candidates (non-empty on success)
        error: Typed error when nothing usable was found
        stages: Provider stages consulted, in order, for diagnostics
    """
    query: str
    candidates: List[SongCandidate] = field(default_factory=list)
    error: Optional[SongFinderError] = None
    stages: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.error is None and bool(self.candidates)

    @classmethod
    def found(cls, query: str, candidates: List[SongCandidate], stages: List[str]) -> 'SearchOutcome':
        if not candidates:
            raise ValueError("A successful outcome needs at least one candidate")
        return cls(query=query, candidates=list(candidates), stages=list(stages))

    @classmethod
    def failed(cls, query: str, error: SongFinderError, stages: Optional[List[str]] = None) -> 'SearchOutcome':
        return cls(query=query, error=error, stages=list(stages or []))
