"""
Shared HTTP plumbing for external data providers.
"""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class ProviderError(RuntimeError):
    """An external provider was unreachable or returned unusable data"""


class HttpProvider:
    """Base class owning (or borrowing) one httpx.AsyncClient"""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0):
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=5),
            )
        return self._client

    async def _get_json(self, url: str,
                        params: Optional[Dict[str, Any]] = None,
                        headers: Optional[Dict[str, str]] = None) -> Any:
        """GET a JSON document, converting transport and decode errors to ProviderError"""
        try:
            response = await self.client.get(url, params=params, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise ProviderError(f"GET {url} failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"{url} returned non-JSON") from e

    async def _post_json(self, url: str,
                         payload: Dict[str, Any],
                         headers: Optional[Dict[str, str]] = None) -> Any:
        """POST a JSON body and decode the JSON response"""
        try:
            response = await self.client.post(url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise ProviderError(f"POST {url} failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"{url} returned non-JSON") from e

    async def aclose(self):
        """Close the underlying client if this provider created it"""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
