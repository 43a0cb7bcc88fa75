"""Alert ORM model: the ledger of threshold breaches."""

from datetime import datetime, timezone

from sqlalchemy import Integer, Boolean, DateTime, Text, Index, Enum
from sqlalchemy.orm import Mapped, mapped_column

from ..services.severity import Severity
from .database import Base


class AlertModel(Base):
    __tablename__ = "alerts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    station_id: Mapped[int] = mapped_column(Integer, nullable=False)
    variable_id: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    # Stored as the lowercase tier name ("low" .. "critical")
    severity: Mapped[Severity] = mapped_column(
        Enum(
            Severity,
            native_enum=False,
            length=16,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
    )
    is_resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True
    )
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        # Serves the dedup lookup: unresolved alerts for a pair, newest first
        Index(
            "idx_alert_station_variable_open",
            "station_id", "variable_id", "is_resolved", "created_at",
        ),
    )
