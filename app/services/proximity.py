"""Rank schools by great-circle distance from an origin coordinate."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import Float, func, literal, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from app.database import StoreError
from app.models.school import School as SchoolModel
from app.services.geolocation import EffectiveCoordinate

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class RankedSchool:
    """A stored school annotated with its distance from the origin."""

    id: str
    name: str
    address: str
    latitude: float
    longitude: float
    distance_km: float


def distance_expression(origin: EffectiveCoordinate) -> ColumnElement[float]:
    """Build the spherical law of cosines distance to each school row.

    The cosine term is clamped into [-1, 1] so rounding never pushes ``acos``
    outside its domain when a school sits exactly on the origin.
    """

    origin_lat = func.radians(literal(origin.latitude, Float), type_=Float)
    origin_lon = func.radians(literal(origin.longitude, Float), type_=Float)
    school_lat = func.radians(SchoolModel.latitude, type_=Float)
    school_lon = func.radians(SchoolModel.longitude, type_=Float)

    cos_term = (
        func.cos(origin_lat, type_=Float)
        * func.cos(school_lat, type_=Float)
        * func.cos(school_lon - origin_lon, type_=Float)
    )
    sin_term = func.sin(origin_lat, type_=Float) * func.sin(school_lat, type_=Float)
    cosine = cos_term + sin_term
    clamped = func.greatest(
        literal(-1.0, Float),
        func.least(literal(1.0, Float), cosine, type_=Float),
        type_=Float,
    )
    distance = literal(EARTH_RADIUS_KM, Float) * func.acos(clamped, type_=Float)
    return distance.label("distance")


class ProximityQuery:
    """Single-statement distance ranking over the school table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def rank_by_distance(self, origin: EffectiveCoordinate) -> list[RankedSchool]:
        distance = distance_expression(origin)
        statement = select(SchoolModel, distance).order_by(distance.asc())

        try:
            result = await self._session.execute(statement)
        except SQLAlchemyError as exc:
            logger.error("Error calculating distances: %s", exc)
            raise StoreError("Could not rank schools by distance") from exc

        ranked = [
            RankedSchool(
                id=school.id,
                name=school.name,
                address=school.address,
                latitude=school.latitude,
                longitude=school.longitude,
                distance_km=float(distance_km),
            )
            for school, distance_km in result.all()
        ]
        logger.debug(
            "Ranked %d schools from (%s, %s) [%s]",
            len(ranked),
            origin.latitude,
            origin.longitude,
            origin.source,
        )
        return ranked


__all__ = [
    "EARTH_RADIUS_KM",
    "ProximityQuery",
    "RankedSchool",
    "distance_expression",
]
