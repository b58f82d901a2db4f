# tests/test_providers.py
"""Test the Firecrawl and Genius provider adapters"""

import pytest
import requests
from unittest.mock import Mock

from songfinder.config.settings import LookupConfig, SearchConfig
from songfinder.lyrics.genius import GeniusLookupProvider
from songfinder.lyrics.models import ProviderFailure
from songfinder.lyrics.websearch import WebSearchProvider
from songfinder.utils.deadline import Deadline, DeadlineExceeded

from conftest import AMAZING_GRACE, lyrics_page


@pytest.fixture
def session():
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def web_search(session):
    return WebSearchProvider(SearchConfig(api_key="fc-test"), session=session)


class TestWebSearchProvider:
    """Test Firecrawl search adapter"""

    def test_unconfigured_makes_no_call(self, session):
        provider = WebSearchProvider(SearchConfig(api_key=""), session=session)

        result = provider.search_pages("Amazing Grace christian lyrics", 5, Deadline(5))

        assert not result.ok
        assert result.failure == ProviderFailure.UNCONFIGURED
        session.post.assert_not_called()

    def test_request_shape(self, web_search, session, firecrawl_response):
        session.post.return_value = firecrawl_response(body={'success': True, 'data': []})

        web_search.search_pages("Amazing Grace christian lyrics", 5, Deadline(5))

        args, kwargs = session.post.call_args
        assert args[0] == "https://api.firecrawl.dev/v1/search"
        assert kwargs['json']['query'] == "Amazing Grace christian lyrics"
        assert kwargs['json']['limit'] == 5
        assert kwargs['json']['scrapeOptions']['formats'] == ['markdown']
        assert kwargs['headers']['Authorization'] == "Bearer fc-test"
        assert kwargs['stream'] is True
        assert 0 < kwargs['timeout'] <= 5

    def test_hits_parsed_in_order(self, web_search, session, firecrawl_response):
        session.post.return_value = firecrawl_response(body={
            'success': True,
            'data': [
                {
                    'url': 'https://hymns.example.org/amazing-grace',
                    'title': 'Amazing Grace - Lyrics | HymnSite',
                    'description': 'Lyrics of the hymn',
                    'markdown': lyrics_page(),
                },
                {
                    'metadata': {
                        'sourceURL': 'https://songs.example.com/grace',
                        'title': 'Grace Lyrics',
                    },
                    'description': 'Only a snippet',
                },
                'not an object',
            ],
        })

        result = web_search.search_pages("Amazing Grace christian lyrics", 5, Deadline(5))

        assert result.ok
        assert [hit.url for hit in result.hits] == [
            'https://hymns.example.org/amazing-grace',
            'https://songs.example.com/grace',
        ]
        assert result.hits[0].raw_text == lyrics_page()
        assert result.hits[1].page_title == 'Grace Lyrics'
        assert result.hits[1].raw_text == 'Only a snippet'
        assert not hasattr(result.hits[1], 'snippet')

    def test_limit_applied(self, web_search, session, firecrawl_response):
        items = [{'url': f'https://example.com/{i}'} for i in range(8)]
        session.post.return_value = firecrawl_response(body={'success': True, 'data': items})

        result = web_search.search_pages("q", 3, Deadline(5))

        assert len(result.hits) == 3

    def test_legacy_results_key(self, web_search, session, firecrawl_response):
        session.post.return_value = firecrawl_response(body={'results': [{'url': 'https://example.com/a'}]})

        result = web_search.search_pages("q", 5, Deadline(5))

        assert result.ok
        assert result.hits[0].url == 'https://example.com/a'

    def test_empty_result_is_ok(self, web_search, session, firecrawl_response):
        session.post.return_value = firecrawl_response(body={'success': True, 'data': []})

        result = web_search.search_pages("q", 5, Deadline(5))

        assert result.ok
        assert result.hits == ()

    @pytest.mark.parametrize("status, failure", [
        (401, ProviderFailure.AUTH),
        (403, ProviderFailure.AUTH),
        (402, ProviderFailure.QUOTA),
        (429, ProviderFailure.QUOTA),
        (500, ProviderFailure.TRANSPORT),
    ])
    def test_http_status_classification(self, web_search, session, firecrawl_response, status, failure):
        response = firecrawl_response(status_code=status)
        session.post.return_value = response

        result = web_search.search_pages("q", 5, Deadline(5))

        assert result.failure == failure
        response.close.assert_called_once()

    def test_timeout(self, web_search, session):
        session.post.side_effect = requests.exceptions.Timeout("read timed out")

        result = web_search.search_pages("q", 5, Deadline(5))

        assert result.failure == ProviderFailure.TIMEOUT

    def test_connection_error(self, web_search, session):
        session.post.side_effect = requests.exceptions.ConnectionError("refused")

        result = web_search.search_pages("q", 5, Deadline(5))

        assert result.failure == ProviderFailure.TRANSPORT

    def test_deadline_expires_mid_body(self, web_search, session, firecrawl_response):
        session.post.return_value = firecrawl_response(body={'success': True, 'data': []})
        deadline = Mock(spec=Deadline)
        deadline.timeout.return_value = 1.0
        deadline.check.side_effect = DeadlineExceeded("Deadline of 1.0s exceeded")

        result = web_search.search_pages("q", 5, deadline)

        assert result.failure == ProviderFailure.TIMEOUT

    def test_malformed_json(self, web_search, session, firecrawl_response):
        session.post.return_value = firecrawl_response(raw=b'<html>oops</html>')

        result = web_search.search_pages("q", 5, Deadline(5))

        assert result.failure == ProviderFailure.MALFORMED

    def test_data_not_a_list(self, web_search, session, firecrawl_response):
        session.post.return_value = firecrawl_response(body={'success': True, 'data': {'url': 'x'}})

        result = web_search.search_pages("q", 5, Deadline(5))

        assert result.failure == ProviderFailure.MALFORMED

    def test_unsuccessful_response(self, web_search, session, firecrawl_response):
        session.post.return_value = firecrawl_response(body={'success': False, 'error': 'Bad query'})

        result = web_search.search_pages("q", 5, Deadline(5))

        assert result.failure == ProviderFailure.TRANSPORT
        assert 'Bad query' in result.detail

    def test_response_too_large(self, session, firecrawl_response):
        provider = WebSearchProvider(SearchConfig(api_key="fc-test", max_response_bytes=10), session=session)
        session.post.return_value = firecrawl_response(body={'success': True, 'data': []})

        result = provider.search_pages("q", 5, Deadline(5))

        assert result.failure == ProviderFailure.MALFORMED


def song_search(*songs):
    """Genius ``search/song`` payload holding the given song results"""
    return {'sections': [{'type': 'song', 'hits': [{'type': 'song', 'result': song} for song in songs]}]}


GRACE_SONG = {
    'title': 'Amazing Grace',
    'url': 'https://genius.com/John-newton-amazing-grace-lyrics',
    'lyrics_state': 'complete',
}


@pytest.fixture
def genius_client():
    client = Mock()
    client.search_songs.return_value = song_search()
    return client


@pytest.fixture
def genius(genius_client):
    factory = Mock(return_value=genius_client)
    return GeniusLookupProvider(LookupConfig(genius_api_key="genius-test"), client_factory=factory)


class TestGeniusLookupProvider:
    """Test Genius lookup adapter"""

    def test_unconfigured(self):
        factory = Mock()
        provider = GeniusLookupProvider(LookupConfig(genius_api_key=""), client_factory=factory)

        result = provider.lookup("Amazing Grace", Deadline(5))

        assert result.failure == ProviderFailure.UNCONFIGURED
        factory.assert_not_called()

    def test_client_configuration(self, genius, genius_client):
        genius.lookup("Amazing Grace", Deadline(5))

        args, kwargs = genius.client_factory.call_args
        assert args[0] == "genius-test"
        assert kwargs['retries'] == 0
        assert kwargs['sleep_time'] == 0
        assert 0 < kwargs['timeout'] <= 5
        genius_client.search_songs.assert_called_once_with("Amazing Grace", per_page=5)
        genius_client.lyrics.assert_not_called()

    def test_lyrics_are_cleaned(self, genius, genius_client):
        genius_client.search_songs.return_value = song_search(GRACE_SONG)
        genius_client.lyrics.return_value = "12 ContributorsAmazing Grace Lyrics[Verse 1]\n" + AMAZING_GRACE + "5Embed"

        result = genius.lookup("Amazing Grace", Deadline(5))

        assert result.ok
        assert result.text == AMAZING_GRACE
        assert result.title == "Amazing Grace"
        genius_client.lyrics.assert_called_once_with(song_url=GRACE_SONG['url'], remove_section_headers=True)

    def test_non_lyrics_hits_skipped(self, genius, genius_client):
        instrumental = dict(GRACE_SONG, title='Amazing Grace (Instrumental)', instrumental=True,
                            url='https://genius.com/amazing-grace-instrumental')
        unfinished = dict(GRACE_SONG, lyrics_state='unreleased', url='https://genius.com/amazing-grace-demo')
        genius_client.search_songs.return_value = song_search(instrumental, unfinished, GRACE_SONG)
        genius_client.lyrics.return_value = AMAZING_GRACE

        genius.lookup("Amazing Grace", Deadline(5))

        genius_client.lyrics.assert_called_once_with(song_url=GRACE_SONG['url'], remove_section_headers=True)

    def test_no_match(self, genius, genius_client):
        result = genius.lookup("Unknown Song", Deadline(5))

        assert result.ok
        assert result.text is None

    def test_empty_lyrics(self, genius, genius_client):
        genius_client.search_songs.return_value = song_search(GRACE_SONG)
        genius_client.lyrics.return_value = "   "

        result = genius.lookup("Amazing Grace", Deadline(5))

        assert result.ok
        assert result.text is None

    @pytest.mark.parametrize("status, failure", [
        (401, ProviderFailure.AUTH),
        (403, ProviderFailure.AUTH),
        (429, ProviderFailure.QUOTA),
        (500, ProviderFailure.TRANSPORT),
    ])
    def test_http_errors(self, genius, genius_client, status, failure):
        genius_client.search_songs.side_effect = requests.exceptions.HTTPError(status, "error")

        result = genius.lookup("Amazing Grace", Deadline(5))

        assert result.failure == failure

    def test_timeout(self, genius, genius_client):
        genius_client.search_songs.side_effect = requests.exceptions.Timeout()

        result = genius.lookup("Amazing Grace", Deadline(5))

        assert result.failure == ProviderFailure.TIMEOUT

    def test_unparseable_page(self, genius, genius_client):
        genius_client.search_songs.return_value = song_search(GRACE_SONG)
        genius_client.lyrics.side_effect = AttributeError("'NoneType' object has no attribute 'get_text'")

        result = genius.lookup("Amazing Grace", Deadline(5))

        assert result.failure == ProviderFailure.MALFORMED


class TestDeadlineBoundsProviderCalls:
    """Test that the deadline caps each provider call as a whole"""

    def test_each_web_read_bounded_by_remaining_budget(self, web_search, session):
        now = [0.0]
        deadline = Deadline(5, clock=lambda: now[0])
        sock = Mock()
        timeouts = []
        sock.settimeout.side_effect = timeouts.append

        def slow_body(chunk_size):
            # The server sends a chunk every two seconds
            for _ in range(10):
                now[0] += 2.0
                yield b' '

        response = Mock()
        response.status_code = 200
        response.raw.connection.sock = sock
        response.iter_content.side_effect = slow_body
        session.post.return_value = response

        result = web_search.search_pages("q", 5, deadline)

        assert result.failure == ProviderFailure.TIMEOUT
        assert now[0] <= 6.0
        assert timeouts == [5.0, 3.0, 1.0]
        response.close.assert_called_once()

    def test_stalled_web_read_reports_timeout(self, web_search, session):
        now = [0.0]
        deadline = Deadline(5, clock=lambda: now[0])

        def stalled_body(chunk_size):
            yield b'{"success": '
            # The socket read times out once the remaining budget is spent
            now[0] += 5.0
            raise requests.exceptions.ConnectionError("Read timed out.")

        response = Mock()
        response.status_code = 200
        response.iter_content.side_effect = stalled_body
        session.post.return_value = response

        result = web_search.search_pages("q", 5, deadline)

        assert result.failure == ProviderFailure.TIMEOUT

    def test_lookup_timeout_reset_before_each_request(self, genius, genius_client):
        now = [0.0]
        deadline = Deadline(20, clock=lambda: now[0])
        seen = []

        def search_songs(query, per_page=None):
            seen.append(genius_client.timeout)
            now[0] += 12.0
            return song_search(GRACE_SONG)

        def lyrics(song_url, remove_section_headers=False):
            seen.append(genius_client.timeout)
            now[0] += 3.0
            return AMAZING_GRACE

        genius_client.search_songs.side_effect = search_songs
        genius_client.lyrics.side_effect = lyrics

        result = genius.lookup("Amazing Grace", deadline)

        assert result.ok
        assert seen == [20.0, 8.0]

    def test_lookup_stops_when_search_spends_budget(self, genius, genius_client):
        now = [0.0]
        deadline = Deadline(20, clock=lambda: now[0])

        def search_songs(query, per_page=None):
            now[0] += 20.0
            return song_search(GRACE_SONG)

        genius_client.search_songs.side_effect = search_songs

        result = genius.lookup("Amazing Grace", deadline)

        assert result.failure == ProviderFailure.TIMEOUT
        genius_client.lyrics.assert_not_called()
