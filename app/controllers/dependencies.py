"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from typing import Annotated, AsyncIterator

import httpx
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.database import get_session
from app.services import LocationResolver, ProximityQuery, SchoolCatalog

SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_location_resolver() -> AsyncIterator[LocationResolver]:
    """Yield a resolver backed by a request-scoped HTTP client."""

    async with httpx.AsyncClient(
        headers={"User-Agent": f"{settings.app_name}/{settings.app_version}"},
        timeout=settings.geolocation.timeout_seconds,
    ) as client:
        yield LocationResolver(client, settings.geolocation)


def get_school_catalog(session: SessionDep) -> SchoolCatalog:
    return SchoolCatalog(session)


def get_proximity_query(session: SessionDep) -> ProximityQuery:
    return ProximityQuery(session)


ResolverDep = Annotated[LocationResolver, Depends(get_location_resolver)]
CatalogDep = Annotated[SchoolCatalog, Depends(get_school_catalog)]
ProximityDep = Annotated[ProximityQuery, Depends(get_proximity_query)]


__all__ = [
    "CatalogDep",
    "ProximityDep",
    "ResolverDep",
    "SessionDep",
    "get_location_resolver",
    "get_proximity_query",
    "get_school_catalog",
]
