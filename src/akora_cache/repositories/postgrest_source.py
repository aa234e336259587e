"""PostgREST-based remote data source.

Talks to the application's table API over HTTP. Every read is a GET on
``{base_url}/{table}`` with the query rendered as PostgREST parameters.

Key features:
- Lazily created, pooled httpx.AsyncClient
- Single-object reads via the ``vnd.pgrst.object+json`` media type
- All transport and payload problems surface as RemoteFetchError
"""

import logging
from typing import Any

import httpx

from akora_cache.config import settings
from akora_cache.entities import TableQuery
from akora_cache.exceptions import RemoteFetchError

logger = logging.getLogger(__name__)

SINGLE_OBJECT_MEDIA_TYPE = "application/vnd.pgrst.object+json"


class PostgrestRemoteSource:
    """PostgREST implementation of the RemoteDataSource protocol.

    Example:
        ```python
        remote = PostgrestRemoteSource.create(
            base_url="https://project.example.co/rest/v1",
            api_key="anon-key",
        )
        rows = await remote.fetch(TableQuery(table="profiles", filters=(Filter("id", "eq", "42"),)))
        ```
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the remote source.

        Args:
            base_url: REST endpoint root. Defaults to settings.remote_url.
            api_key: API key sent as ``apikey`` and bearer token. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.remote_timeout.
            transport: Optional httpx transport (used by tests).
        """
        self._base_url = (base_url or settings.remote_url).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.remote_api_key
        self._timeout = timeout or settings.remote_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(cls, base_url: str | None = None, api_key: str | None = None) -> "PostgrestRemoteSource":
        """Factory method to create PostgrestRemoteSource with defaults."""
        return cls(base_url=base_url, api_key=api_key)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self._api_key:
                headers["apikey"] = self._api_key
                headers["Authorization"] = f"Bearer {self._api_key}"
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=headers,
                timeout=self._timeout,
                transport=self._transport,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    async def fetch(self, query: TableQuery) -> list[dict[str, Any]] | dict[str, Any] | None:
        """Run a read query against one table.

        Raises:
            RemoteFetchError: On transport errors, non-2xx responses or bad payloads
        """
        headers = {"Accept": SINGLE_OBJECT_MEDIA_TYPE} if query.single else None

        try:
            response = await self.client.get(f"/{query.table}", params=query.to_params(), headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Remote query on %s returned %s", query.table, e.response.status_code)
            raise RemoteFetchError(query.table, e.response.text or str(e), e.response.status_code) from e
        except httpx.HTTPError as e:
            logger.warning("Remote query on %s failed: %s", query.table, e)
            raise RemoteFetchError(query.table, str(e)) from e
        except ValueError as e:
            raise RemoteFetchError(query.table, f"invalid JSON payload: {e}") from e

        if query.single:
            if data is not None and not isinstance(data, dict):
                raise RemoteFetchError(query.table, f"expected an object, got {type(data).__name__}")
            return data

        if not isinstance(data, list):
            raise RemoteFetchError(query.table, f"expected a list, got {type(data).__name__}")
        return data

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
