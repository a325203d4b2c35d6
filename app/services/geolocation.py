"""Resolve the coordinate a school listing is ranked from."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import httpx

from app.config.settings import GeolocationConfig, settings
from app.telemetry import record_geolocation_lookup, record_geolocation_retry

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]

SOURCE_CLIENT = "client"
SOURCE_GEOLOCATION = "geolocation"


@dataclass(frozen=True)
class EffectiveCoordinate:
    """Coordinate used to rank schools for a single request."""

    latitude: float
    longitude: float
    source: str = SOURCE_CLIENT


class LocationFetchError(RuntimeError):
    """Raised when the IP geolocation provider cannot supply a coordinate."""


class LocationResolver:
    """Pick the client's coordinate or fall back to an IP geolocation lookup.

    The provider is called only when the client did not send a complete pair.
    Rate-limited responses (HTTP 429) are retried with exponential backoff;
    every other failure is raised immediately as ``LocationFetchError``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: GeolocationConfig | None = None,
        *,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._client = client
        self._config = config or settings.geolocation
        self._sleep = sleep

    async def resolve(
        self,
        client_latitude: Optional[float] = None,
        client_longitude: Optional[float] = None,
    ) -> EffectiveCoordinate:
        """Return the effective coordinate for a ranking request."""

        if self._is_provided(client_latitude) and self._is_provided(client_longitude):
            return EffectiveCoordinate(
                latitude=client_latitude,
                longitude=client_longitude,
                source=SOURCE_CLIENT,
            )

        if client_latitude is not None or client_longitude is not None:
            logger.debug(
                "Incomplete client coordinate (%s, %s); using geolocation instead.",
                client_latitude,
                client_longitude,
            )
        return await self.lookup()

    async def lookup(self) -> EffectiveCoordinate:
        """Ask the geolocation provider for the caller's coordinate."""

        deadline = self._config.deadline_seconds
        try:
            if deadline is None:
                coordinate = await self._fetch_with_retries()
            else:
                coordinate = await asyncio.wait_for(
                    self._fetch_with_retries(),
                    timeout=deadline,
                )
        except asyncio.TimeoutError as exc:
            record_geolocation_lookup("failure")
            raise self._failure(
                f"Geolocation lookup exceeded the {deadline}s deadline"
            ) from exc
        except LocationFetchError:
            record_geolocation_lookup("failure")
            raise

        record_geolocation_lookup("success")
        return coordinate

    def _is_provided(self, value: Optional[float]) -> bool:
        if value is None:
            return False
        if self._config.treat_zero_as_missing and not value:
            return False
        return True

    async def _fetch_with_retries(self) -> EffectiveCoordinate:
        url = self._config.url
        delay = self._config.initial_backoff_seconds
        retries_left = self._config.max_retries

        while True:
            try:
                response = await self._client.get(
                    url,
                    timeout=self._config.timeout_seconds,
                )
            except httpx.HTTPError as exc:
                raise self._failure(f"Error fetching location: {exc}") from exc

            if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
                if retries_left > 0:
                    logger.warning(
                        "Rate limit exceeded. Retrying in %d ms...",
                        int(delay * 1000),
                    )
                    record_geolocation_retry()
                    await self._sleep(delay)
                    retries_left -= 1
                    delay *= self._config.backoff_multiplier
                    continue
                raise self._failure(
                    "Error fetching location: rate limit retries exhausted "
                    f"after {self._config.max_retries} attempts"
                )

            if not response.is_success:
                raise self._failure(
                    f"Error fetching location: HTTP error! status: {response.status_code}"
                )

            return self._parse(response)

    def _parse(self, response: httpx.Response) -> EffectiveCoordinate:
        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise self._failure(
                "Error fetching location: provider returned invalid JSON"
            ) from exc

        if not isinstance(payload, dict):
            raise self._failure("Error fetching location: unexpected payload shape")

        # ipapi reports some failures in-band with a 200 status.
        if payload.get("error"):
            reason = payload.get("reason") or payload.get("message") or "unknown"
            raise self._failure(f"Error fetching location: provider error: {reason}")

        try:
            latitude = float(payload["latitude"])
            longitude = float(payload["longitude"])
        except (KeyError, TypeError, ValueError) as exc:
            raise self._failure(
                "Error fetching location: payload is missing latitude/longitude"
            ) from exc

        return EffectiveCoordinate(
            latitude=latitude,
            longitude=longitude,
            source=SOURCE_GEOLOCATION,
        )

    @staticmethod
    def _failure(message: str) -> LocationFetchError:
        logger.error(message)
        return LocationFetchError(message)


__all__ = [
    "EffectiveCoordinate",
    "LocationFetchError",
    "LocationResolver",
    "SOURCE_CLIENT",
    "SOURCE_GEOLOCATION",
]
