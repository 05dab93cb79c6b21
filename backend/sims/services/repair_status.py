"""Outbound lookup of an asset's repair ticket status in the partner repairs system."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import quote

import httpx

from sims.core.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RepairStatus:
    available: bool
    data: Any = None


UNAVAILABLE = RepairStatus(available=False)


class RepairStatusBridge:
    """Fetch repair status with a hard timeout and a consecutive-failure breaker.

    After ``failure_threshold`` failures in a row the bridge answers
    "unavailable" without calling out for ``cooldown_seconds``; the first call
    after the cooldown is let through and either closes or re-opens the breaker.
    """

    def __init__(
        self,
        base_url: str | None,
        timeout: float = 5.0,
        failure_threshold: int = 3,
        cooldown_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._base_url = base_url.rstrip("/") if base_url else None
        self._timeout = timeout
        self._failure_threshold = max(1, failure_threshold)
        self._cooldown = cooldown_seconds
        self._transport = transport
        self._clock = clock
        self._failures = 0
        self._open_until: float | None = None

    @property
    def configured(self) -> bool:
        return self._base_url is not None

    @property
    def circuit_open(self) -> bool:
        return self._open_until is not None and self._clock() < self._open_until

    async def fetch(self, serial: str) -> RepairStatus:
        """Never raises; every failure mode is reported as unavailable."""
        if not self._base_url:
            logger.debug("Repairs system URL not configured")
            return UNAVAILABLE
        if self.circuit_open:
            logger.debug("Repair status circuit open, skipping lookup for %s", serial)
            return UNAVAILABLE
        try:
            data = await self._request(serial)
        except UpstreamUnavailableError as exc:
            self._record_failure(serial, exc)
            return UNAVAILABLE
        self._failures = 0
        self._open_until = None
        return RepairStatus(available=True, data=data)

    async def _request(self, serial: str) -> Any:
        url = f"{self._base_url}/api/external/repair-status/{quote(serial, safe='')}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport, follow_redirects=True
            ) as client:
                response = await client.get(url, headers={"Accept": "application/json"})
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(f"{exc.__class__.__name__}: {exc}") from exc
        if not response.is_success:
            raise UpstreamUnavailableError(f"Repairs system response {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError("Repairs system returned a non-JSON body") from exc
        if not isinstance(payload, (dict, list)):
            raise UpstreamUnavailableError("Repairs system returned an unexpected body")
        return payload

    def _record_failure(self, serial: str, exc: UpstreamUnavailableError) -> None:
        self._failures += 1
        logger.warning("Repair status lookup for %s failed (%s)", serial, exc.message)
        if self._failures >= self._failure_threshold:
            self._open_until = self._clock() + self._cooldown
            logger.warning(
                "Repair status circuit opened for %ss after %d consecutive failures",
                self._cooldown,
                self._failures,
            )
