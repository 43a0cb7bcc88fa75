"""Alert deduplication over a sliding window.

Sensors report far more often than operators can act, so a sustained
breach must not open one alert per reading. While an unresolved alert for
the same (station, variable) pair is younger than the window, new breaches
are suppressed. The open alert is never modified, even when the new breach
is more severe.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.alert import AlertModel

DEFAULT_WINDOW = timedelta(hours=1)


class AlertDeduplicator:
    def __init__(self, db: Session, window: timedelta = DEFAULT_WINDOW):
        self._db = db
        self.window = window

    def find_active(
        self, station_id: int, variable_id: str, now: datetime,
    ) -> Optional[AlertModel]:
        """Return the newest unresolved alert for the pair created within the window."""
        cutoff = now - self.window
        return self._db.execute(
            select(AlertModel)
            .where(AlertModel.station_id == station_id)
            .where(AlertModel.variable_id == variable_id)
            .where(AlertModel.is_resolved.is_(False))
            .where(AlertModel.created_at > cutoff)
            .order_by(AlertModel.created_at.desc(), AlertModel.id.desc())
            .limit(1)
        ).scalar_one_or_none()
