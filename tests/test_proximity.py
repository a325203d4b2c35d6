"""Distance ranking against the SQLite-backed store."""

from __future__ import annotations

import asyncio
import math

import pytest
from sqlalchemy.exc import OperationalError

from app.database import StoreError, session_scope
from app.services.geolocation import EffectiveCoordinate
from app.services.proximity import ProximityQuery


def _rank(latitude: float, longitude: float):
    async def _run():
        async with session_scope() as session:
            origin = EffectiveCoordinate(latitude=latitude, longitude=longitude)
            return await ProximityQuery(session).rank_by_distance(origin)

    return asyncio.run(_run())


def test_nearest_school_comes_first(seed):
    seed(("Origin School", 0.0, 0.0), ("Nearby School", 1.0, 1.0))

    ranked = _rank(0.0, 0.0)

    assert [school.name for school in ranked] == ["Origin School", "Nearby School"]
    assert ranked[0].distance_km == 0.0
    assert ranked[1].distance_km == pytest.approx(157.25, abs=0.1)


def test_results_are_in_non_decreasing_distance(seed):
    seed(
        ("Sydney", -33.87, 151.21),
        ("London", 51.51, -0.13),
        ("Paris", 48.86, 2.35),
        ("New York", 40.71, -74.01),
        ("Cape Town", -33.92, 18.42),
        ("Antipode", -51.51, 179.87),
    )

    ranked = _rank(51.0, 0.0)
    distances = [school.distance_km for school in ranked]

    assert len(ranked) == 6
    assert distances == sorted(distances)
    assert ranked[0].name == "London"
    assert ranked[-1].name == "Antipode"


@pytest.mark.parametrize(
    ("latitude", "longitude"),
    [(40.0, -75.0), (37.7749, -122.4194), (-89.999, 179.999), (12.3456789, 98.7654321)],
)
def test_distance_to_own_location_is_zero(seed, latitude, longitude):
    seed(("Here", latitude, longitude))

    ranked = _rank(latitude, longitude)

    assert not math.isnan(ranked[0].distance_km)
    assert ranked[0].distance_km == pytest.approx(0.0, abs=1e-3)


def test_empty_store_returns_no_results():
    assert _rank(10.0, 10.0) == []


def test_store_failure_raises_store_error():
    class BrokenSession:
        async def execute(self, statement):
            raise OperationalError("SELECT", {}, Exception("database is down"))

    async def _run():
        origin = EffectiveCoordinate(latitude=0.0, longitude=0.0)
        return await ProximityQuery(BrokenSession()).rank_by_distance(origin)

    with pytest.raises(StoreError):
        asyncio.run(_run())
