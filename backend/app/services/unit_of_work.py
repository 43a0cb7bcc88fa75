"""Transaction boundary for one ingestion request.

A UnitOfWork owns a single session and exposes the engine components bound
to it, so everything done through them commits or rolls back together.
"""

import zlib
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import text
from sqlalchemy.orm import Session, sessionmaker

from ..models.measurement import MeasurementModel
from .alert_writer import AlertWriter
from .dedup import DEFAULT_WINDOW, AlertDeduplicator
from .directory import SensorDirectory
from .thresholds import ThresholdResolver


class UnitOfWork:
    """Context manager: commit explicitly, anything else rolls back on exit."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        dedup_window: timedelta = DEFAULT_WINDOW,
    ):
        self._session_factory = session_factory
        self._dedup_window = dedup_window
        self._committed = False
        self.session: Optional[Session] = None

    def __enter__(self) -> "UnitOfWork":
        self.session = self._session_factory()
        self.session.begin()
        self._committed = False
        self.sensors = SensorDirectory(self.session)
        self.thresholds = ThresholdResolver(self.session)
        self.dedup = AlertDeduplicator(self.session, self._dedup_window)
        self.alerts = AlertWriter(self.session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if not self._committed:
                self.rollback()
        finally:
            self.session.close()

    def add_measurement(
        self, sensor_id: int, variable_id: str, value: float, timestamp: datetime,
    ) -> MeasurementModel:
        measurement = MeasurementModel(
            sensor_id=sensor_id, variable_id=variable_id, value=value, timestamp=timestamp,
        )
        self.session.add(measurement)
        self.session.flush()
        return measurement

    def lock_pair(self, station_id: int, variable_id: str) -> None:
        """Take a transaction-scoped advisory lock on PostgreSQL.

        Covers writers in other processes; the in-process KeyedLock covers
        threads. Other dialects rely on the KeyedLock alone.
        """
        if self.session.get_bind().dialect.name != "postgresql":
            return
        key = zlib.crc32(f"alert:{station_id}:{variable_id}".encode())
        self.session.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": key})

    def commit(self) -> None:
        self.session.commit()
        self._committed = True

    def rollback(self) -> None:
        self.session.rollback()
