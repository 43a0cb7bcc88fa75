"""Measurement ingestion coordinator.

Each reading is handled in one transaction:

    insert measurement -> resolve station -> resolve thresholds
      -> classify -> dedup -> maybe create alert -> commit

An unknown sensor or any database error rolls the whole unit back, so a
measurement is never stored without its alert evaluation having run.
"""

import logging
import math
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from ..models.measurement import MeasurementModel
from .errors import InvalidInput, SensorNotFound, StorageFailure
from .locks import KeyedLock
from .severity import Breach, classify, format_message
from .unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_reading(sensor_id: Any, variable_id: Any, value: Any) -> tuple[int, str, float]:
    """Check presence and types of a reading; raise InvalidInput otherwise."""
    missing = [
        name for name, v in (("sensor_id", sensor_id), ("variable_id", variable_id), ("value", value))
        if v is None
    ]
    if missing:
        raise InvalidInput(f"Missing required field(s): {', '.join(missing)}")

    if isinstance(sensor_id, bool) or not isinstance(sensor_id, int):
        raise InvalidInput("sensor_id must be an integer")
    if not isinstance(variable_id, str) or not variable_id.strip():
        raise InvalidInput("variable_id must be a non-empty string")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput("value must be a number")
    if not math.isfinite(value):
        raise InvalidInput("value must be finite")
    return sensor_id, variable_id.strip(), float(value)


class IngestionCoordinator:
    """Runs the ingestion pipeline against injected storage and locks."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        locks: KeyedLock,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._uow_factory = uow_factory
        self._locks = locks
        self._clock = clock

    def ingest(self, sensor_id: Any, variable_id: Any, value: Any) -> MeasurementModel:
        """Persist a reading and raise an alert if it breaches a tier.

        Raises InvalidInput before touching storage, SensorNotFound for an
        unregistered sensor and StorageFailure for database errors. In the
        last two cases nothing is persisted.
        """
        sensor_id, variable_id, value = validate_reading(sensor_id, variable_id, value)
        now = self._clock()

        try:
            with self._uow_factory() as uow:
                measurement = uow.add_measurement(sensor_id, variable_id, value, now)
                station_id = uow.sensors.lookup_station(sensor_id)

                tiers = uow.thresholds.get_thresholds(variable_id)
                breach = classify(value, tiers) if tiers is not None else None
                if breach is None:
                    uow.commit()
                    return measurement

                # Lock spans dedup check, insert and commit
                with self._locks.hold((station_id, variable_id)):
                    uow.lock_pair(station_id, variable_id)
                    self._emit_alert(uow, station_id, variable_id, breach, now)
                    uow.commit()
                return measurement
        except SensorNotFound as exc:
            logger.info("Measurement rejected, rolled back: %s", exc)
            raise
        except SQLAlchemyError as exc:
            logger.error(
                "Ingestion failed for sensor %s / %s, rolled back: %s",
                sensor_id, variable_id, exc, exc_info=True,
            )
            raise StorageFailure("Measurement could not be stored") from exc

    def _emit_alert(
        self, uow: UnitOfWork, station_id: int, variable_id: str, breach: Breach, now: datetime,
    ) -> None:
        existing = uow.dedup.find_active(station_id, variable_id, now)
        if existing is not None:
            logger.info(
                "Alert suppressed: station=%d %s [%s] value %s; alert #%d [%s] still open",
                station_id, variable_id, breach.severity.value, breach.value,
                existing.id, existing.severity.value,
            )
            return
        uow.alerts.create(
            station_id=station_id,
            variable_id=variable_id,
            message=format_message(variable_id, breach),
            severity=breach.severity,
            now=now,
        )
