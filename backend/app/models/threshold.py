"""Threshold ORM model: per-variable severity tiers."""

from sqlalchemy import Float, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class ThresholdModel(Base):
    __tablename__ = "thresholds"

    variable_id: Mapped[str] = mapped_column(
        Text, ForeignKey("variables.id"), primary_key=True
    )
    # Each tier is optional; low < medium < high < critical is expected, not enforced
    low: Mapped[float | None] = mapped_column(Float, nullable=True)
    medium: Mapped[float | None] = mapped_column(Float, nullable=True)
    high: Mapped[float | None] = mapped_column(Float, nullable=True)
    critical: Mapped[float | None] = mapped_column(Float, nullable=True)
