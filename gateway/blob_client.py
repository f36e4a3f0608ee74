"""Storage client abstraction for putting, getting and searching tagged blobs."""

import abc
import asyncio
import base64
import logging
import time
from typing import Dict, List, Optional

import httpx
from pydantic import ValidationError

from common.exceptions import (
    BlobNotFoundError,
    TransferException,
    TransientNetworkError,
)
from common.schemas import GraphQLResponse
from common.types import SearchResult, Tag
from gateway import config

logger = logging.getLogger(__name__)


SEARCH_QUERY = """
query($tags: [TagFilter!], $first: Int, $after: String) {
  transactions(tags: $tags, first: $first, after: $after, order: ASC) {
    edges {
      cursor
      node {
        id
        tags {
          name
          value
        }
      }
    }
    pageInfo {
      hasNextPage
    }
  }
}
"""


class BlobStore(abc.ABC):
    """
    Write-once, id-addressed blob store with an eventually consistent tag index.
    """

    @abc.abstractmethod
    async def put(self, data: bytes, tags: List[Tag]) -> str:
        """Store ``data`` under ``tags`` and return the new blob id."""

    @abc.abstractmethod
    async def get(self, blob_id: str) -> bytes:
        """Return the bytes stored under ``blob_id``."""

    @abc.abstractmethod
    async def search(self, tags: List[Tag]) -> List[SearchResult]:
        """Return every blob carrying all of ``tags``, oldest first."""


class GatewayBlobStore(BlobStore):
    """
    HTTP client for the upload relay, data gateway and GraphQL tag index.

    Transient failures (5xx, connection errors, timeouts) are retried with
    exponential backoff here, so callers only ever see the final outcome.
    The underlying connection pool is created lazily and can be rebuilt with
    ``refresh_if_stale``; the owner decides when to call it.
    """

    def __init__(
        self,
        gateway_url: str = config.GATEWAY_URL,
        upload_url: str = config.UPLOAD_URL,
        graphql_url: str = config.GRAPHQL_URL,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
        max_retries: int = config.MAX_RETRIES,
        retry_backoff_multiplier: float = config.RETRY_BACKOFF_MULTIPLIER,
        retry_base_delay: float = 1.0,
        reinit_interval: float = config.CLIENT_REINIT_INTERVAL_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize client with lazy connection.

        Args:
            gateway_url: Base URL serving ``/tx/<id>/data``
            upload_url: Relay endpoint that signs and stores uploads
            graphql_url: Tag index endpoint
            timeout: Per-request timeout in seconds
            max_retries: Retry attempts after the first try
            retry_backoff_multiplier: Growth factor between retry delays
            retry_base_delay: Delay before the first retry, in seconds
            reinit_interval: Age in seconds after which the client counts as stale
            transport: Optional httpx transport (used by tests)
        """
        self.gateway_url = gateway_url.rstrip('/')
        self.upload_url = upload_url
        self.graphql_url = graphql_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_backoff_multiplier = retry_backoff_multiplier
        self.retry_base_delay = retry_base_delay
        self.reinit_interval = reinit_interval
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._created_at = 0.0

    def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure the HTTP client is established."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
            self._created_at = time.monotonic()
            logger.info(f"Established gateway client [gateway={self.gateway_url}]")
        return self._client

    def is_stale(self) -> bool:
        """True when the current client is older than the reinit interval."""
        if self._client is None:
            return False
        return (time.monotonic() - self._created_at) >= self.reinit_interval

    async def refresh_if_stale(self) -> bool:
        """
        Rebuild the HTTP client if it has outlived the reinit interval.

        Returns:
            True if the client was rebuilt
        """
        if not self.is_stale():
            return False
        logger.info("Gateway client is stale, reinitializing")
        await self.close()
        self._ensure_client()
        return True

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> 'GatewayBlobStore':
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _request_with_retry(self, method: str, url: str, **kwargs) -> httpx.Response:
        """
        Make HTTP request with retry logic on 5xx errors and network failures.

        Args:
            method: HTTP method
            url: Absolute URL
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object (2xx or 4xx)

        Raises:
            TransientNetworkError: If retries are exhausted
        """
        client = self._ensure_client()
        last_error: Optional[str] = None

        for attempt in range(self.max_retries + 1):
            delay = self.retry_base_delay * (self.retry_backoff_multiplier ** attempt)
            try:
                response = await client.request(method, url, **kwargs)
            except (httpx.ConnectError, httpx.TimeoutException, httpx.ReadError) as e:
                last_error = f"{type(e).__name__}: {e}"
                if attempt < self.max_retries:
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{self.max_retries + 1}): "
                        f"{method} {url} error={type(e).__name__}, retrying in {delay}s"
                    )
                    await asyncio.sleep(delay)
                    continue
                break

            if response.status_code >= 500:
                last_error = f"status={response.status_code}"
                if attempt < self.max_retries:
                    logger.warning(
                        f"Server error (attempt {attempt + 1}/{self.max_retries + 1}): "
                        f"{method} {url} status={response.status_code}, retrying in {delay}s"
                    )
                    await asyncio.sleep(delay)
                    continue
                break

            return response

        logger.error(f"Request failed (max retries exceeded): {method} {url} {last_error}")
        raise TransientNetworkError(f"{method} {url} failed after {self.max_retries + 1} attempts: {last_error}")

    async def put(self, data: bytes, tags: List[Tag]) -> str:
        """
        Store a blob through the upload relay.

        Args:
            data: Raw bytes to store
            tags: Tags to attach

        Returns:
            Blob id assigned by the backend

        Raises:
            TransientNetworkError: If the relay stays unreachable
            TransferException: If the relay rejects the upload
        """
        payload = {
            'data': base64.b64encode(data).decode('ascii'),
            'tags': [tag.to_dict() for tag in tags],
            'type': 'base64',
        }
        logger.debug(f"Uploading blob [size={len(data)} bytes, tags={len(tags)}]")
        response = await self._request_with_retry('POST', self.upload_url, json=payload)

        if response.status_code not in (200, 201):
            raise TransferException(f"Upload rejected: status={response.status_code} {self._error_detail(response)}")

        try:
            blob_id = response.json()['id']
        except (ValueError, KeyError, TypeError):
            raise TransferException(f"Upload relay returned no blob id: {response.text[:200]}")

        logger.info(f"Stored blob {blob_id} [size={len(data)} bytes]")
        return blob_id

    async def get(self, blob_id: str) -> bytes:
        """
        Fetch blob data from the gateway.

        Raises:
            BlobNotFoundError: If the gateway does not know the id
            TransientNetworkError: If the gateway stays unreachable
        """
        url = f"{self.gateway_url}/tx/{blob_id}/data"
        response = await self._request_with_retry('GET', url)

        if response.status_code in (400, 404):
            raise BlobNotFoundError(f"Blob not found: {blob_id}")
        if response.status_code != 200:
            raise TransferException(f"Failed to fetch blob {blob_id}: status={response.status_code}")

        return response.content

    async def search(self, tags: List[Tag]) -> List[SearchResult]:
        """
        Query the tag index, following pagination cursors.

        Args:
            tags: Every result must carry all of these tags

        Returns:
            Matching blobs in ascending order

        Raises:
            TransientNetworkError: If the index stays unreachable
            TransferException: If the index returns errors or malformed data
        """
        filters = [{'name': tag.name, 'values': [tag.value]} for tag in tags]
        results: List[SearchResult] = []
        after: Optional[str] = None

        while True:
            variables: Dict[str, object] = {'tags': filters, 'first': config.SEARCH_PAGE_SIZE}
            if after:
                variables['after'] = after

            response = await self._request_with_retry(
                'POST',
                self.graphql_url,
                json={'query': SEARCH_QUERY, 'variables': variables},
            )
            if response.status_code != 200:
                raise TransferException(f"Tag search failed: status={response.status_code} {self._error_detail(response)}")

            try:
                parsed = GraphQLResponse.model_validate(response.json())
            except (ValueError, ValidationError) as e:
                raise TransferException(f"Malformed tag search response: {e}")

            if parsed.errors:
                raise TransferException(f"Tag search returned errors: {parsed.errors}")

            transactions = parsed.data.transactions if parsed.data else None
            if transactions is None:
                break

            for edge in transactions.edges:
                results.append(SearchResult(
                    id=edge.node.id,
                    tags=[Tag(name=t.name, value=t.value) for t in edge.node.tags],
                ))

            if not transactions.page_info.has_next_page or not transactions.edges:
                break
            after = transactions.edges[-1].cursor
            if not after:
                break

        logger.debug(f"Tag search matched {len(results)} blob(s)")
        return results

    def _error_detail(self, response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(body, dict):
            return str(body.get('error') or body.get('detail') or body)
        return str(body)
