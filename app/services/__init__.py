"""Service layer for the school catalog and distance ranking."""

from .catalog import SchoolCatalog, ValidationError
from .geolocation import EffectiveCoordinate, LocationFetchError, LocationResolver
from .proximity import ProximityQuery, RankedSchool

__all__ = [
    "EffectiveCoordinate",
    "LocationFetchError",
    "LocationResolver",
    "ProximityQuery",
    "RankedSchool",
    "SchoolCatalog",
    "ValidationError",
]
