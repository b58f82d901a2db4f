"""Test configuration and fixtures"""

import json
import pytest
import tempfile
from pathlib import Path
from unittest.mock import Mock

from songfinder.config.settings import LookupConfig, SearchConfig, Settings
from songfinder.lyrics.genius import GeniusLookupProvider
from songfinder.lyrics.models import LookupResult, PageHit, ProviderResult
from songfinder.lyrics.websearch import WebSearchProvider


AMAZING_GRACE_LINES = [
    "Amazing grace how sweet the sound",
    "That saved a wretch like me",
    "I once was lost but now am found",
    "Was blind but now I see",
    "'Twas grace that taught my heart to fear",
    "And grace my fears relieved",
    "How precious did that grace appear",
    "The hour I first believed",
]

AMAZING_GRACE = "\n".join(AMAZING_GRACE_LINES)


def lyrics_page(lines=None, title="Amazing Grace Lyrics"):
    """Scraped markdown page with navigation, a lyrics block and a footer"""
    body = "\n".join(lines if lines is not None else AMAZING_GRACE_LINES)
    return (
        f"# {title}\n"
        "\n"
        "[Home](https://hymns.example.org) | [Hymns](https://hymns.example.org/hymns)\n"
        "\n"
        f"{body}\n"
        "\n"
        "Words: John Newton\n"
        "Copyright: Public Domain\n"
        "Share this hymn with a friend\n"
    )


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def settings():
    """Settings with both providers configured"""
    return Settings(
        search=SearchConfig(api_key="fc-test"),
        lookup=LookupConfig(genius_api_key="genius-test"),
    )


@pytest.fixture
def lyrics_hit():
    """Web hit whose page holds the Amazing Grace lyrics"""
    return PageHit(
        url="https://hymns.example.org/amazing-grace",
        page_title="Amazing Grace - Lyrics | HymnSite",
        raw_text=lyrics_page(),
    )


@pytest.fixture
def web_provider():
    """Configured web search provider returning no hits"""
    provider = Mock(spec=WebSearchProvider)
    provider.name = "firecrawl"
    provider.configured = True
    provider.search_pages.return_value = ProviderResult.success([])
    return provider


@pytest.fixture
def lookup_provider():
    """Configured lookup provider finding nothing"""
    provider = Mock(spec=GeniusLookupProvider)
    provider.name = "genius"
    provider.configured = True
    provider.lookup.return_value = LookupResult.success(None)
    return provider


@pytest.fixture
def firecrawl_response():
    """Build a streamed HTTP response mock from a status and JSON body"""
    def build(status_code=200, body=None, raw=None):
        response = Mock()
        response.status_code = status_code
        content = raw if raw is not None else json.dumps(body or {}).encode('utf-8')
        response.iter_content.return_value = [content]
        return response
    return build
