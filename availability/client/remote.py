"""
Remote side of the favorites store.

:class:`FavoritesRemote` is what :class:`~availability.client.favorites.FavoritesStore`
needs from a server; :class:`HttpFavoritesRemote` implements it against
the REST API with ``httpx``.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional
from urllib.parse import quote

import httpx

from .config import ClientConfig

logger = logging.getLogger(__name__)

NETWORK_ERROR = "NETWORK_ERROR"
NOT_FOUND = "NOT_FOUND"
FAVORITES_PAGE_SIZE = 100


class RemoteError(Exception):
    """A request failed; ``message`` is the server's message when it sent one."""

    def __init__(self, code: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
        self.status_code = status_code


class FavoriteConflict(RemoteError):
    """The ward is already a favorite."""

    def __init__(self, message: str = "This ward is already in your favorites"):
        super().__init__("CONFLICT", message, status_code=409)


class FavoritesRemote(ABC):
    """Server operations on the signed-in user's favorites."""

    @abstractmethod
    async def add_favorite(self, ward_name: str) -> None:
        """Add ``ward_name``; raise :class:`FavoriteConflict` when already present."""

    @abstractmethod
    async def remove_favorite(self, ward_name: str) -> bool:
        """Remove ``ward_name``; return False when it was not a favorite."""

    @abstractmethod
    async def list_favorite_ward_names(self) -> list[str]:
        """All favorite ward names of the user."""


def _error_from_response(response: httpx.Response) -> RemoteError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    code = body.get("code") or f"HTTP_{response.status_code}"
    message = body.get("message") or response.reason_phrase or "Request failed"
    return RemoteError(code, message, status_code=response.status_code)


class HttpFavoritesRemote(FavoritesRemote):
    """REST implementation on top of :class:`httpx.AsyncClient`.

    Pass ``client`` to share a connection pool or to inject a transport in
    tests; otherwise one is created from ``config`` and closed by
    :meth:`aclose`.
    """

    def __init__(self, config: Optional[ClientConfig] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or ClientConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.config.base_url,
            headers=self.config.headers,
            timeout=self.config.timeout,
        )

    async def __aenter__(self) -> "HttpFavoritesRemote":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise RemoteError(NETWORK_ERROR, "Could not reach the server") from exc

    async def add_favorite(self, ward_name: str) -> None:
        response = await self._request("POST", "/api/users/me/favorites", json={"ward_name": ward_name})
        if response.status_code == 409:
            raise FavoriteConflict(_error_from_response(response).message)
        if not response.is_success:
            raise _error_from_response(response)

    async def remove_favorite(self, ward_name: str) -> bool:
        url = f"/api/users/me/favorites/by-ward/{quote(ward_name, safe='')}"
        response = await self._request("DELETE", url)
        if response.is_success:
            return True
        error = _error_from_response(response)
        # A 404 without the API's NOT_FOUND body means the route did not match
        if response.status_code == 404 and error.code == NOT_FOUND:
            return False
        raise error

    async def list_favorite_ward_names(self) -> list[str]:
        names: list[str] = []
        offset = 0
        while True:
            page = await self._get_json(
                "/api/users/me/favorites", params={"limit": FAVORITES_PAGE_SIZE, "offset": offset}
            )
            data = page.get("data", [])
            names.extend(item["wardName"] for item in data)
            offset += len(data)
            if not data or offset >= page.get("meta", {}).get("total", 0):
                return names

    async def list_wards(
        self,
        search: Optional[str] = None,
        favorites_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> dict[str, Any]:
        """One page of ward aggregates with freshness metadata."""
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if search:
            params["search"] = search
        if favorites_only:
            params["favorites_only"] = "true"
        return await self._get_json("/api/wards", params=params)

    async def _get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        response = await self._request("GET", url, params=params)
        if not response.is_success:
            raise _error_from_response(response)
        return response.json()
