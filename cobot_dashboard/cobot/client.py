"""Cobot REST API client.

Thin authenticated wrapper around httpx.  Every call carries the static
bearer token and asks for JSON; any non-2xx response or transport failure
is raised as :class:`~cobot_dashboard.exceptions.ProviderError`.

Endpoints used:
    GET /api/memberships/{id}                — Member profile
    GET /api/memberships/{id}/custom_fields  — Custom field values
    GET /api/memberships/{id}/invoices       — Invoices
    GET /api/memberships/{id}/bookings       — Bookings in a from/to window
    PUT /api/memberships/{id}/custom_fields  — Custom field write-back
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from cobot_dashboard.exceptions import ProviderError

logger = logging.getLogger("cobot_dashboard.cobot.client")


class CobotClient:
    """Async client for a single Cobot space."""

    def __init__(
        self,
        base_url: str,
        access_token: str,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url:     Space API root, e.g. ``https://myspace.cobot.me``.
            access_token: Static bearer token.
            http_client:  Optional shared httpx client (one per app, or a mock in tests).
        """
        self._base_url = base_url.rstrip("/")
        self._access_token = access_token
        self._http_client = http_client

    async def fetch(self, endpoint: str, params: dict[str, str] | None = None) -> Any:
        """GET ``endpoint`` and return the decoded JSON body.

        Raises:
            ProviderError: On non-2xx responses (with ``status_code``) or on
                network failures (``status_code`` is ``None``).
        """
        url = f"{self._base_url}{endpoint}"
        headers = self._build_headers()
        try:
            if self._http_client:
                response = await self._http_client.get(url, params=params, headers=headers)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(url, params=params, headers=headers)
        except httpx.HTTPError as exc:
            raise ProviderError(f"Cobot API nicht erreichbar: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise ProviderError(
                f"Cobot API Error: {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        return self._decode(response)

    async def put(self, endpoint: str, payload: Any) -> Any:
        """PUT ``payload`` as JSON to ``endpoint`` and return the decoded body.

        Unlike :meth:`fetch`, the error message carries the response body so
        that write rejections are visible to the caller.
        """
        url = f"{self._base_url}{endpoint}"
        headers = self._build_headers()
        headers["Content-Type"] = "application/json"
        try:
            if self._http_client:
                response = await self._http_client.put(url, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.put(url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise ProviderError(f"Cobot API nicht erreichbar: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise ProviderError(
                f"Cobot API Error: {response.status_code} - {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        return self._decode(response)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _build_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "Accept": "application/json",
        }

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("Cobot returned a non-JSON body (HTTP %s)", response.status_code)
            raise ProviderError(
                "Cobot API lieferte kein gültiges JSON",
                status_code=response.status_code,
            ) from exc
