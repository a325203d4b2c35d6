"""SQLAlchemy model representing schools and their coordinates."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, Float, String

from app.models.base import Base


class School(Base):
    __tablename__ = "school"
    __table_args__ = (
        CheckConstraint(
            "latitude >= -90 AND latitude <= 90",
            name="ck_school_latitude_range",
        ),
        CheckConstraint(
            "longitude >= -180 AND longitude <= 180",
            name="ck_school_longitude_range",
        ),
    )

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    address = Column(String(255), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    def __repr__(self) -> str:
        return f"<School id={self.id!r} name={self.name!r}>"


__all__ = ["School"]
