"""
HTTP client for the FuelWale API.

Attaches the bearer token of the current session to every request and
turns error responses into `ApiError` carrying the server's message.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from fuelwale.console.config import ConsoleSettings, console_settings
from fuelwale.console.errors import ApiError

logger = logging.getLogger("fuelwale.console")


def _error_message(response: httpx.Response, fallback: str) -> tuple:
    try:
        body = response.json()
    except ValueError:
        return fallback, None
    if not isinstance(body, dict):
        return fallback, None
    message = body.get("message") or body.get("error") or body.get("detail")
    if not isinstance(message, str) or not message:
        message = fallback
    return message, body.get("error_code")


class ApiClient:
    """Async API client bound to one base URL."""

    def __init__(self, settings: Optional[ConsoleSettings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or console_settings
        self.session = None
        self._client = httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=self.settings.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.session is not None:
            headers["Authorization"] = f"Bearer {self.session.token}"
        if extra:
            headers.update(extra)
        return headers

    async def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        fallback: str = "Request failed",
        expected: str = "json",
    ) -> Any:
        """
        Send one request.

        Raises ApiError with the server message (or `fallback` when the
        server gave none) for any non-2xx response or transport failure.
        """
        try:
            response = await self._client.request(
                method, path, json=json, params=params, headers=self._headers(headers)
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(fallback) from exc

        if response.status_code >= 400:
            message, error_code = _error_message(response, fallback)
            logger.info("%s %s -> %s %s", method, path, response.status_code, message)
            raise ApiError(message, response.status_code, error_code)

        if expected == "bytes":
            return response.content
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None, fallback: str = "Request failed") -> Any:
        return await self.request("GET", path, params=params, fallback=fallback)

    async def post(self, path: str, json: Any = None, headers: Optional[Dict[str, str]] = None,
                   fallback: str = "Request failed") -> Any:
        return await self.request("POST", path, json=json, headers=headers, fallback=fallback)

    async def put(self, path: str, json: Any = None, fallback: str = "Request failed") -> Any:
        return await self.request("PUT", path, json=json, fallback=fallback)

    async def delete(self, path: str, fallback: str = "Delete failed") -> Any:
        return await self.request("DELETE", path, fallback=fallback)

    async def get_bytes(self, path: str, fallback: str = "Download failed") -> bytes:
        return await self.request("GET", path, fallback=fallback, expected="bytes")
