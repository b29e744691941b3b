"""Outbound relays: URL prefixes that fetch a target URL on our behalf."""

from __future__ import annotations

from collections.abc import Sequence
from threading import Lock
from typing import Any
from urllib.parse import quote

import httpx

from marketfeed.core.exceptions import ConfigurationError, SourceBadResponse


def relay_url(relay: str, target: str) -> str:
    """Append the URL-encoded ``target`` to the ``relay`` prefix."""
    return f"{relay}{quote(target, safe='')}"


class RelayRotator:
    """Round-robin over relay prefixes, advanced on every attempt."""

    def __init__(self, relays: Sequence[str]):
        if not relays:
            raise ConfigurationError("at least one relay is required", field="sources.relays")
        self._relays = list(relays)
        self._position = 0
        self._lock = Lock()

    @property
    def relays(self) -> list[str]:
        return list(self._relays)

    def next(self) -> str:
        with self._lock:
            relay = self._relays[self._position % len(self._relays)]
            self._position += 1
            return relay

    def __len__(self) -> int:
        return len(self._relays)


class RelayHttp:
    """JSON GETs routed through a single relay for the duration of one attempt."""

    def __init__(self, client: httpx.AsyncClient, relay: str):
        self.client = client
        self.relay = relay

    async def get_json(self, url: str, provider_name: str) -> Any:
        """GET ``url`` through the relay and decode the JSON body.

        Raises:
            SourceBadResponse: transport failure, non-2xx status or a body
                that is not JSON
        """
        try:
            response = await self.client.get(relay_url(self.relay, url), headers={"Accept": "application/json"})
        except httpx.HTTPError as exc:
            raise SourceBadResponse(f"transport error: {exc}", provider_name) from exc

        if not response.is_success:
            raise SourceBadResponse(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                provider_name,
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise SourceBadResponse("invalid JSON response", provider_name, status_code=response.status_code) from exc
