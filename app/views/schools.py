"""Pydantic schemas for School resources."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: Any) -> Any:
    # bool is an int subclass and would otherwise coerce to 1.0/0.0
    if isinstance(value, bool):
        raise ValueError("Coordinate must be a number")
    if isinstance(value, str) and not value.strip():
        return None
    return value


class SchoolCreateRequest(BaseModel):
    """Payload for creating a new School."""

    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=255)
    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _reject_blank_coordinate(cls, value: Any) -> Any:
        return _blank_to_none(value)


class CoordinateRequest(BaseModel):
    """Optional origin supplied when ranking schools by distance."""

    latitude: Optional[float] = Field(None, allow_inf_nan=False)
    longitude: Optional[float] = Field(None, allow_inf_nan=False)

    model_config = ConfigDict(extra="ignore")

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: Any) -> Any:
        return _blank_to_none(value)


class SchoolResponse(BaseModel):
    """Serialized representation of a School."""

    id: str
    name: str = Field(..., max_length=255)
    address: str = Field(..., max_length=255)
    latitude: float
    longitude: float

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class RankedSchoolResponse(SchoolResponse):
    """A School together with its distance from the ranking origin."""

    distance_km: float


class OriginResponse(BaseModel):
    """Coordinate the ranking was computed from."""

    latitude: float
    longitude: float
    source: str

    model_config = ConfigDict(from_attributes=True)


class RankedSchoolsResponse(BaseModel):
    origin: OriginResponse
    results: list[RankedSchoolResponse]


class SchoolCreatedResponse(BaseModel):
    message: str
    id: str


class FieldError(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    errors: list[FieldError]


__all__ = [
    "CoordinateRequest",
    "FieldError",
    "OriginResponse",
    "RankedSchoolResponse",
    "RankedSchoolsResponse",
    "SchoolCreateRequest",
    "SchoolCreatedResponse",
    "SchoolResponse",
    "ValidationErrorResponse",
]
