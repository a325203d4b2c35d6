"""Create and read schools in the persistent store."""

from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import StoreError
from app.models.school import School as SchoolModel
from app.views import SchoolCreateRequest

logger = logging.getLogger(__name__)

FIELD_MESSAGES = {
    "name": "Name is required",
    "address": "Address is required",
    "latitude": "Invalid latitude",
    "longitude": "Invalid longitude",
}


class ValidationError(ValueError):
    """Raised when client input for a school is malformed."""

    def __init__(self, errors: list[dict[str, str]]) -> None:
        self.errors = errors
        fields = ", ".join(error["field"] for error in errors)
        super().__init__(f"Invalid input for: {fields}")

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        """Collapse pydantic errors into one message per field."""

        errors: list[dict[str, str]] = []
        seen: set[str] = set()
        for item in exc.errors():
            loc = item.get("loc") or ("body",)
            field = str(loc[0])
            if field in seen:
                continue
            seen.add(field)
            if item.get("type") == "string_too_long":
                message = item.get("msg", "Value is too long")
            else:
                message = FIELD_MESSAGES.get(field, item.get("msg", "Invalid value"))
            errors.append({"field": field, "message": message})
        return cls(errors)


class SchoolCatalog:
    """Validate, persist and read schools through an injected session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        name: Any,
        address: Any,
        latitude: Any,
        longitude: Any,
    ) -> str:
        """Validate the four fields, insert a row and return its new id."""

        try:
            payload = SchoolCreateRequest(
                name=name,
                address=address,
                latitude=latitude,
                longitude=longitude,
            )
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc

        school = SchoolModel(
            id=str(uuid4()),
            name=payload.name,
            address=payload.address,
            latitude=payload.latitude,
            longitude=payload.longitude,
        )
        self._session.add(school)
        try:
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.error("Error adding school: %s", exc)
            raise StoreError("Could not add school") from exc

        logger.info("Added school %s (%s)", school.id, school.name)
        return school.id

    async def list_all(self) -> list[SchoolModel]:
        try:
            result = await self._session.execute(
                select(SchoolModel).order_by(SchoolModel.name)
            )
        except SQLAlchemyError as exc:
            logger.error("Error fetching schools: %s", exc)
            raise StoreError("Could not list schools") from exc
        return list(result.scalars().all())

    async def get(self, school_id: str) -> Optional[SchoolModel]:
        try:
            result = await self._session.execute(
                select(SchoolModel).where(SchoolModel.id == school_id)
            )
        except SQLAlchemyError as exc:
            logger.error("Error fetching school %s: %s", school_id, exc)
            raise StoreError("Could not fetch school") from exc
        return result.scalar_one_or_none()


__all__ = ["FIELD_MESSAGES", "SchoolCatalog", "ValidationError"]
