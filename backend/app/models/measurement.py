"""Measurement ORM model: one immutable row per ingested reading."""

from datetime import datetime, timezone

from sqlalchemy import Integer, Float, DateTime, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class MeasurementModel(Base):
    __tablename__ = "measurements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # No foreign key: an unknown sensor is reported as 404 by the directory
    # lookup, not as a constraint violation
    sensor_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    variable_id: Mapped[str] = mapped_column(Text, nullable=False)
    value: Mapped[float] = mapped_column(Float, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True
    )

    __table_args__ = (
        Index("idx_measurement_sensor_variable_ts", "sensor_id", "variable_id", "timestamp"),
    )
