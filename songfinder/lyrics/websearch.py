"""
Firecrawl web search integration for lyrics page discovery
Primary lyrics source: searches the open web and returns scraped page content
"""

import json
import logging
from typing import List, Optional

import requests

from ..config.settings import NetworkConfig, SearchConfig
from ..utils.deadline import Deadline, DeadlineExceeded
from ..utils.logger import get_logger, log_performance
from .models import PageHit, ProviderFailure, ProviderResult


class ResponseTooLarge(Exception):
    """Raised when a response body exceeds the configured byte cap"""


class WebSearchProvider:
    """
    Firecrawl search API provider

    One POST to the search endpoint returns up to ``limit`` results, each
    with the page scraped to markdown. Exactly one attempt is made per call;
    every failure is reported as a tagged ProviderResult instead of raising.
    """

    name = "firecrawl"

    # Chunk size for streaming the response body against the deadline
    CHUNK_SIZE = 8 * 1024

    def __init__(
        self,
        config: SearchConfig,
        network: Optional[NetworkConfig] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize Firecrawl search provider

        Args:
            config: Web search settings (credential, endpoint, byte cap)
            network: HTTP client settings
            session: HTTP session, injectable for tests
            logger: Logger, defaults to the module logger
        """
        self.config = config
        self.logger = logger or get_logger(__name__)

        # HTTP session
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': (network or NetworkConfig()).user_agent
        })

    @property
    def configured(self) -> bool:
        return bool(self.config.api_key.strip())

    @log_performance
    def search_pages(self, query: str, limit: int, deadline: Deadline) -> ProviderResult:
        """
        Search the web and return scraped pages

        Args:
            query: Full search text (query plus domain qualifier)
            limit: Maximum number of hits
            deadline: Budget for the whole call, connection to last byte

        Returns:
            ProviderResult with up to ``limit`` hits in provider order, or a
            failure reason
        """
        if not self.configured:
            return ProviderResult.error(ProviderFailure.UNCONFIGURED, "FIRECRAWL_API_KEY not set")

        payload = {
            'query': query,
            'limit': limit,
            'scrapeOptions': {
                'formats': ['markdown'],
                'onlyMainContent': True,
            },
        }
        headers = {
            'Authorization': f'Bearer {self.config.api_key}',
            'Content-Type': 'application/json',
        }

        self.logger.info(f"Searching Firecrawl for: {query}")

        response = None
        try:
            response = self.session.post(
                self.config.endpoint,
                json=payload,
                headers=headers,
                timeout=deadline.timeout(),
                stream=True
            )

            failure = self._classify_status(response.status_code)
            if failure:
                return ProviderResult.error(failure, f"HTTP {response.status_code}")

            body = self._read_body(response, deadline)

        except requests.exceptions.Timeout as e:
            return ProviderResult.error(ProviderFailure.TIMEOUT, str(e))
        except DeadlineExceeded as e:
            return ProviderResult.error(ProviderFailure.TIMEOUT, str(e))
        except ResponseTooLarge as e:
            return ProviderResult.error(ProviderFailure.MALFORMED, str(e))
        except requests.exceptions.RequestException as e:
            if deadline.expired:
                return ProviderResult.error(ProviderFailure.TIMEOUT, str(e))
            return ProviderResult.error(ProviderFailure.TRANSPORT, str(e))
        finally:
            if response is not None:
                response.close()

        return self._parse_body(body, limit)

    @staticmethod
    def _classify_status(status_code: int) -> Optional[ProviderFailure]:
        """Map a non-2xx HTTP status to a failure reason"""
        if 200 <= status_code < 300:
            return None
        if status_code in (401, 403):
            return ProviderFailure.AUTH
        if status_code in (402, 429):
            return ProviderFailure.QUOTA
        return ProviderFailure.TRANSPORT

    def _read_body(self, response: requests.Response, deadline: Deadline) -> bytes:
        """
        Read the response body in chunks, enforcing the deadline and byte cap

        The socket timeout is narrowed to the remaining budget before every
        chunk, so a server that stalls mid-body cannot hold the read past
        the deadline.

        Raises:
            DeadlineExceeded: If the deadline expires mid-body
            ResponseTooLarge: If the body exceeds ``max_response_bytes``
        """
        chunks: List[bytes] = []
        total = 0
        stream = iter(response.iter_content(chunk_size=self.CHUNK_SIZE))
        while True:
            deadline.check()
            self._bound_socket(response, deadline)
            chunk = next(stream, None)
            if chunk is None:
                break
            if not chunk:
                continue
            total += len(chunk)
            if total > self.config.max_response_bytes:
                raise ResponseTooLarge(
                    f"Response exceeded {self.config.max_response_bytes} bytes"
                )
            chunks.append(chunk)
        return b''.join(chunks)

    @staticmethod
    def _bound_socket(response: requests.Response, deadline: Deadline) -> None:
        """Set the read timeout of the live connection to the remaining budget"""
        connection = getattr(response.raw, 'connection', None)
        sock = getattr(connection, 'sock', None)
        if sock is not None:
            sock.settimeout(deadline.timeout())

    def _parse_body(self, body: bytes, limit: int) -> ProviderResult:
        """
        Validate a Firecrawl response body and convert it to page hits

        A well-formed response is ``{"success": true, "data": [...]}``; older
        deployments answer with ``results`` instead of ``data``.
        """
        try:
            data = json.loads(body.decode('utf-8'))
        except (UnicodeDecodeError, ValueError) as e:
            return ProviderResult.error(ProviderFailure.MALFORMED, f"Undecodable response: {e}")

        if not isinstance(data, dict):
            return ProviderResult.error(ProviderFailure.MALFORMED, "Response is not an object")

        if data.get('success') is False:
            error = data.get('error') or 'unknown error'
            return ProviderResult.error(ProviderFailure.TRANSPORT, f"Firecrawl error: {error}")

        items = data.get('data', data.get('results'))
        if items is None:
            items = []
        if not isinstance(items, list):
            return ProviderResult.error(ProviderFailure.MALFORMED, "Response data is not a list")

        hits = [PageHit.from_firecrawl_data(item) for item in items[:limit] if isinstance(item, dict)]
        self.logger.debug(f"Firecrawl returned {len(hits)} hits")
        return ProviderResult.success(hits)
