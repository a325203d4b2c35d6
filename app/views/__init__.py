"""Pydantic schemas used as views in the MVC architecture."""

from .common import ErrorResponse
from .schools import (
    CoordinateRequest,
    FieldError,
    OriginResponse,
    RankedSchoolResponse,
    RankedSchoolsResponse,
    SchoolCreateRequest,
    SchoolCreatedResponse,
    SchoolResponse,
    ValidationErrorResponse,
)

__all__ = [
    "CoordinateRequest",
    "ErrorResponse",
    "FieldError",
    "OriginResponse",
    "RankedSchoolResponse",
    "RankedSchoolsResponse",
    "SchoolCreateRequest",
    "SchoolCreatedResponse",
    "SchoolResponse",
    "ValidationErrorResponse",
]
