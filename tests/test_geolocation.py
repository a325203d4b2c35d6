"""Tests for the location resolver and its retry policy."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from app.config.settings import GeolocationConfig
from app.services.geolocation import (
    SOURCE_CLIENT,
    SOURCE_GEOLOCATION,
    LocationFetchError,
    LocationResolver,
)

from conftest import ScriptedProvider, located, rate_limited


def _resolve(provider, sleep, config=None, **coordinates):
    async def _run():
        async with provider.client() as client:
            resolver = LocationResolver(client, config or GeolocationConfig(), sleep=sleep)
            return await resolver.resolve(**coordinates)

    return asyncio.run(_run())


@pytest.mark.parametrize(
    ("latitude", "longitude"),
    [(40.0, -75.0), (-33.86, 151.2), (89.9, 179.9), (0.0, 0.0), (0.0, 12.5)],
)
def test_client_coordinates_are_returned_without_lookup(latitude, longitude, sleep_recorder):
    provider = ScriptedProvider(located(1.0, 1.0))

    coordinate = _resolve(
        provider,
        sleep_recorder,
        client_latitude=latitude,
        client_longitude=longitude,
    )

    assert (coordinate.latitude, coordinate.longitude) == (latitude, longitude)
    assert coordinate.source == SOURCE_CLIENT
    assert provider.calls == 0


def test_zero_pair_falls_back_when_legacy_truthiness_enabled(sleep_recorder):
    """With the legacy flag a (0, 0) pair counts as missing."""

    provider = ScriptedProvider(located(52.52, 13.40))
    config = GeolocationConfig(treat_zero_as_missing=True)

    coordinate = _resolve(
        provider,
        sleep_recorder,
        config,
        client_latitude=0,
        client_longitude=0,
    )

    assert provider.calls == 1
    assert coordinate.source == SOURCE_GEOLOCATION
    assert (coordinate.latitude, coordinate.longitude) == (52.52, 13.40)


def test_missing_coordinates_use_provider(sleep_recorder):
    provider = ScriptedProvider(located(48.85, 2.35))

    coordinate = _resolve(provider, sleep_recorder)

    assert provider.calls == 1
    assert coordinate.source == SOURCE_GEOLOCATION
    assert (coordinate.latitude, coordinate.longitude) == (48.85, 2.35)
    assert sleep_recorder.delays == []


def test_incomplete_pair_uses_provider_for_both_values(sleep_recorder):
    provider = ScriptedProvider(located(48.85, 2.35))

    coordinate = _resolve(provider, sleep_recorder, client_latitude=10.0)

    assert provider.calls == 1
    assert (coordinate.latitude, coordinate.longitude) == (48.85, 2.35)


def test_rate_limit_is_retried_with_exponential_backoff(sleep_recorder):
    provider = ScriptedProvider(
        rate_limited(),
        rate_limited(),
        rate_limited(),
        located(35.68, 139.69),
    )

    coordinate = _resolve(provider, sleep_recorder)

    assert (coordinate.latitude, coordinate.longitude) == (35.68, 139.69)
    assert provider.calls == 4
    assert sleep_recorder.delays == [1.0, 2.0, 4.0]


def test_sustained_rate_limit_fails_after_three_retries(sleep_recorder):
    provider = ScriptedProvider(rate_limited())

    with pytest.raises(LocationFetchError, match="retries exhausted"):
        _resolve(provider, sleep_recorder)

    assert provider.calls == 4
    assert sleep_recorder.delays == [1.0, 2.0, 4.0]


def test_other_error_status_fails_immediately(sleep_recorder):
    provider = ScriptedProvider(httpx.Response(503), located(1.0, 1.0))

    with pytest.raises(LocationFetchError, match="status: 503"):
        _resolve(provider, sleep_recorder)

    assert provider.calls == 1
    assert sleep_recorder.delays == []


@pytest.mark.parametrize(
    "failure",
    [
        httpx.ConnectError("connection refused"),
        httpx.ReadTimeout("timed out"),
    ],
)
def test_network_failure_is_not_retried(failure, sleep_recorder):
    provider = ScriptedProvider(failure, located(1.0, 1.0))

    with pytest.raises(LocationFetchError, match=str(failure)):
        _resolve(provider, sleep_recorder)

    assert provider.calls == 1
    assert sleep_recorder.delays == []


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"error": True, "reason": "Reserved IP Address"}),
        httpx.Response(200, json={"ip": "203.0.113.7", "city": "Nowhere"}),
        httpx.Response(200, json=[1, 2]),
    ],
)
def test_unusable_payload_raises(response, sleep_recorder):
    provider = ScriptedProvider(response)

    with pytest.raises(LocationFetchError):
        _resolve(provider, sleep_recorder)


def test_deadline_bounds_the_retry_sequence():
    """A rate-limited provider cannot hold the lookup past the deadline."""

    provider = ScriptedProvider(rate_limited())
    config = GeolocationConfig(deadline_seconds=0.05)

    with pytest.raises(LocationFetchError, match="deadline"):
        _resolve(provider, asyncio.sleep, config)

    assert provider.calls == 1
