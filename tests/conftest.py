"""Shared fixtures: a throwaway SQLite store and a scripted geolocation provider."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from uuid import uuid4

_TMP_DIR = Path(tempfile.mkdtemp(prefix="school-locator-tests-"))
_DB_PATH = _TMP_DIR / "schools.db"

# Must be set before anything under ``app`` reads its settings.
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["LOG_FILE"] = str(_TMP_DIR / "app.log")

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from app.models import Base, School  # noqa: E402


class SleepRecorder:
    """Stand-in for ``asyncio.sleep`` that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class ScriptedProvider:
    """Geolocation endpoint replaying a fixed list of responses."""

    def __init__(self, *responses: httpx.Response | Exception) -> None:
        self._responses = list(responses)
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        index = min(self.calls, len(self._responses)) - 1
        outcome = self._responses[index]
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(
            outcome.status_code,
            headers=outcome.headers,
            content=outcome.content,
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def located(latitude: float, longitude: float) -> httpx.Response:
    return httpx.Response(
        200,
        json={"ip": "203.0.113.7", "latitude": latitude, "longitude": longitude},
    )


def rate_limited() -> httpx.Response:
    return httpx.Response(429, json={"error": True, "reason": "RateLimited"})


@pytest.fixture(autouse=True)
def store():
    """Recreate the school table before every test."""

    engine = create_engine(f"sqlite:///{_DB_PATH}")
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seed(store):
    """Insert schools given as (name, latitude, longitude) and return their ids."""

    def _seed(*rows: tuple[str, float, float]) -> list[str]:
        with Session(store, expire_on_commit=False) as session:
            schools = [
                School(
                    id=str(uuid4()),
                    name=name,
                    address=f"{index} Test Street",
                    latitude=latitude,
                    longitude=longitude,
                )
                for index, (name, latitude, longitude) in enumerate(rows, start=1)
            ]
            session.add_all(schools)
            session.commit()
            return [school.id for school in schools]

    return _seed


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()
