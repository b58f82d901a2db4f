"""
HTTP service for the lyrics search

Exposes the search processor to the song editor of the content-management
UI. The editor POSTs ``{"query": "..."}`` from the browser, so every response
carries permissive CORS headers and pre-flight requests are answered directly.

Endpoints:
    POST /api/song-search (also /)  Search lyrics for a query
    GET  /health                     Provider configuration status
"""

import logging
from typing import Optional

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException

from .. import __version__
from ..config.settings import Settings, get_settings
from ..exceptions import InvalidRequestError, SongFinderError, UnexpectedFaultError
from ..lyrics.formatter import (
    error_payload,
    outcome_payload,
    render_error_markdown,
    render_markdown,
)
from ..lyrics.processor import LyricsSearchProcessor, create_processor
from ..utils.logger import get_logger


CORS_ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"
CORS_ALLOW_METHODS = "POST, OPTIONS"

# Every method is routed to the view so wrong methods get the 400 payload
SEARCH_METHODS = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']


def _wants_markdown() -> bool:
    best = request.accept_mimetypes.best_match(['application/json', 'text/markdown'])
    return best == 'text/markdown'


def _error_response(error: SongFinderError, query: Optional[str] = None) -> Response:
    if _wants_markdown():
        return Response(
            render_error_markdown(error, query),
            status=error.http_status,
            mimetype='text/markdown'
        )
    payload, status = error_payload(error)
    return jsonify(payload), status


def create_app(
    settings: Optional[Settings] = None,
    processor: Optional[LyricsSearchProcessor] = None,
    logger: Optional[logging.Logger] = None
) -> Flask:
    """
    Create the Flask application

    Args:
        settings: Loaded settings, defaults to the process-wide settings
        processor: Search processor, defaults to one wired to the real providers
        logger: Logger, defaults to the module logger

    Returns:
        Configured Flask app
    """
    settings = settings or get_settings()
    processor = processor or create_processor(settings)
    log = logger or get_logger(__name__)

    app = Flask(__name__)
    app.json.sort_keys = False
    app.config['SONGFINDER_SETTINGS'] = settings

    @app.after_request
    def _set_cors_headers(response):
        response.headers['Access-Control-Allow-Origin'] = settings.server.cors_origin
        response.headers['Access-Control-Allow-Headers'] = CORS_ALLOW_HEADERS
        response.headers['Access-Control-Allow-Methods'] = CORS_ALLOW_METHODS
        return response

    @app.errorhandler(Exception)
    def _handle_unexpected(error):
        # Routing errors such as 404 keep their own response
        if isinstance(error, HTTPException):
            return error
        log.exception(f"Unhandled error serving {request.path}")
        return _error_response(UnexpectedFaultError())

    @app.route('/', methods=SEARCH_METHODS)
    @app.route('/api/song-search', methods=SEARCH_METHODS)
    def song_search():
        if request.method == 'OPTIONS':
            return Response(status=200)

        if request.method != 'POST':
            return _error_response(InvalidRequestError(
                "Method not allowed",
                details={'detail': "Use POST with a JSON body."}
            ))

        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            return _error_response(InvalidRequestError(
                "Request body must be a JSON object.",
                details={'detail': 'Send {"query": "<song title>"}.'}
            ))

        query = body.get('query')
        try:
            outcome = processor.search(query)
        except Exception:
            log.exception(f"Lyrics search failed for query: {query!r}")
            return _error_response(UnexpectedFaultError())

        if not outcome.success:
            log.info(f"Search for {outcome.query!r} ended with {outcome.error.category}")

        if _wants_markdown():
            status = outcome.error.http_status if outcome.error else 200
            return Response(render_markdown(outcome), status=status, mimetype='text/markdown')

        payload, status = outcome_payload(outcome)
        return jsonify(payload), status

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({
            'status': 'ok',
            'version': __version__,
            'providers': {
                processor.web_search.name: processor.web_search.configured,
                processor.lookup.name: processor.lookup.configured,
            },
        })

    return app
