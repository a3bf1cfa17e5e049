"""HTTP client for the solo pool statistics endpoint."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from core.records import MetricRecord

LOGGER = logging.getLogger(__name__)


class PoolClientError(RuntimeError):
    """Any failed fetch: network error, non-2xx status or a malformed body."""


class SoloPoolClient:
    """Fetch one :class:`MetricRecord` per call for a given address.

    The client performs no retries; the next scheduler tick is the retry.
    """

    name = "solo_pool"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport

    async def fetch(self, address: str) -> MetricRecord:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(self._base_url, params={"address": address})
        except httpx.RequestError as exc:
            LOGGER.warning("Request to %s failed: %s", self._base_url, exc)
            raise PoolClientError(str(exc) or exc.__class__.__name__) from exc

        if not resp.is_success:
            LOGGER.warning("Pool endpoint returned status %s", resp.status_code)
            raise PoolClientError(f"HTTP error! status: {resp.status_code}")

        try:
            payload = resp.json()
        except ValueError as exc:
            raise PoolClientError(f"invalid JSON payload: {exc}") from exc
        if not isinstance(payload, dict):
            raise PoolClientError("unexpected payload shape")
        LOGGER.debug("Fetched stats for %s", address)
        return MetricRecord.from_payload(payload)


__all__ = ["PoolClientError", "SoloPoolClient"]
