# songfinder/lyrics/__init__.py
"""
Lyrics search package
Query parsing, provider adapters, extraction and the fallback processor
"""

from .models import (
    LOOKUP_URL_SENTINEL,
    ProviderFailure,
    ParsedQuery,
    SearchQuery,
    PageHit,
    SongCandidate,
    ProviderResult,
    LookupResult,
    SearchOutcome,
)
from .query import interpret_query, parse_query
from .extractor import extract_lyrics_block
from .normalizer import clean_title, normalize_candidate
from .websearch import WebSearchProvider
from .genius import GeniusLookupProvider
from .processor import LyricsSearchProcessor, create_processor
from .formatter import error_payload, outcome_payload, render_markdown

__all__ = [
    'LOOKUP_URL_SENTINEL',
    'ProviderFailure',
    'ParsedQuery',
    'SearchQuery',
    'PageHit',
    'SongCandidate',
    'ProviderResult',
    'LookupResult',
    'SearchOutcome',
    'interpret_query',
    'parse_query',
    'extract_lyrics_block',
    'clean_title',
    'normalize_candidate',
    'WebSearchProvider',
    'GeniusLookupProvider',
    'LyricsSearchProcessor',
    'create_processor',
    'error_payload',
    'outcome_payload',
    'render_markdown',
]
