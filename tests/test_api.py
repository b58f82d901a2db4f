# tests/test_api.py
"""Test the HTTP service"""

import pytest
from unittest.mock import Mock, patch

from songfinder.api.app import create_app
from songfinder.exceptions import NoHitsFoundError
from songfinder.lyrics.models import ProviderResult, SearchOutcome
from songfinder.lyrics.processor import LyricsSearchProcessor

from conftest import AMAZING_GRACE


@pytest.fixture
def processor(settings, web_provider, lookup_provider):
    return LyricsSearchProcessor(settings, web_provider, lookup_provider)


@pytest.fixture
def client(settings, processor):
    app = create_app(settings, processor)
    app.config['TESTING'] = True
    return app.test_client()


class TestSongSearchEndpoint:
    """Test POST /api/song-search"""

    def test_success(self, client, web_provider, lyrics_hit):
        web_provider.search_pages.return_value = ProviderResult.success([lyrics_hit])

        response = client.post('/api/song-search', json={'query': 'Amazing Grace'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['query'] == 'Amazing Grace'
        assert data['results'][0]['title'] == 'Amazing Grace'
        assert data['results'][0]['lyrics'] == AMAZING_GRACE
        assert response.headers['Access-Control-Allow-Origin'] == '*'

    def test_root_path_is_mounted(self, client, web_provider, lyrics_hit):
        web_provider.search_pages.return_value = ProviderResult.success([lyrics_hit])

        response = client.post('/', json={'query': 'Amazing Grace'})

        assert response.status_code == 200

    def test_not_found(self, client):
        response = client.post('/api/song-search', json={'query': 'Unknown Song'})

        assert response.status_code == 404
        data = response.get_json()
        assert data['category'] == 'NO_HITS_FOUND'
        assert 'error' in data and 'details' in data

    def test_missing_query(self, client, web_provider, lookup_provider):
        response = client.post('/api/song-search', json={})

        assert response.status_code == 400
        assert response.get_json()['category'] == 'INVALID_REQUEST'
        web_provider.search_pages.assert_not_called()
        lookup_provider.lookup.assert_not_called()

    def test_non_json_body(self, client):
        response = client.post('/api/song-search', data='query=Amazing', content_type='text/plain')

        assert response.status_code == 400

    def test_wrong_method(self, client):
        response = client.get('/api/song-search')

        assert response.status_code == 400
        assert response.get_json()['category'] == 'INVALID_REQUEST'
        assert response.headers['Access-Control-Allow-Methods'] == 'POST, OPTIONS'

    def test_preflight(self, client):
        response = client.options('/api/song-search')

        assert response.status_code == 200
        assert response.data == b''
        assert response.headers['Access-Control-Allow-Origin'] == '*'
        assert 'content-type' in response.headers['Access-Control-Allow-Headers']

    def test_no_provider_configured(self, client, web_provider, lookup_provider):
        web_provider.configured = False
        lookup_provider.configured = False

        response = client.post('/api/song-search', json={'query': 'Amazing Grace'})

        assert response.status_code == 503
        assert response.get_json()['category'] == 'PROVIDER_UNAVAILABLE'

    def test_unexpected_fault_is_generic(self, settings):
        processor = Mock()
        processor.search.side_effect = RuntimeError("secret internal detail")
        client = create_app(settings, processor).test_client()

        response = client.post('/api/song-search', json={'query': 'Amazing Grace'})

        assert response.status_code == 500
        data = response.get_json()
        assert data['category'] == 'UNEXPECTED_FAULT'
        assert 'secret' not in response.get_data(as_text=True)

    def test_formatting_fault_is_generic(self, client, web_provider, lyrics_hit):
        web_provider.search_pages.return_value = ProviderResult.success([lyrics_hit])

        with patch('songfinder.api.app.outcome_payload', side_effect=KeyError("secret internal detail")):
            response = client.post('/api/song-search', json={'query': 'Amazing Grace'})

        assert response.status_code == 500
        assert response.get_json()['category'] == 'UNEXPECTED_FAULT'
        assert 'secret' not in response.get_data(as_text=True)
        assert response.headers['Access-Control-Allow-Origin'] == '*'

    def test_unknown_path_stays_404(self, client):
        response = client.get('/api/unknown')

        assert response.status_code == 404

    def test_markdown_response(self, client, web_provider, lyrics_hit):
        web_provider.search_pages.return_value = ProviderResult.success([lyrics_hit])

        response = client.post(
            '/api/song-search',
            json={'query': 'Amazing Grace'},
            headers={'Accept': 'text/markdown'}
        )

        assert response.status_code == 200
        assert response.mimetype == 'text/markdown'
        assert response.get_data(as_text=True).startswith('# Lyrics search: Amazing Grace')

    def test_markdown_not_found_keeps_status(self, settings):
        processor = Mock()
        processor.search.return_value = SearchOutcome.failed('Unknown', NoHitsFoundError("No lyrics found."))
        client = create_app(settings, processor).test_client()

        response = client.post('/', json={'query': 'Unknown'}, headers={'Accept': 'text/markdown'})

        assert response.status_code == 404
        assert '**Sorry, no lyrics found.**' in response.get_data(as_text=True)


class TestHealthEndpoint:
    """Test GET /health"""

    def test_reports_providers(self, client, lookup_provider):
        lookup_provider.configured = False

        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json()['providers'] == {'firecrawl': True, 'genius': False}
