"""Sensor directory lookup: which station owns a sensor."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.directory import SensorModel
from .errors import SensorNotFound


class SensorDirectory:
    """Read-only view over the sensors table."""

    def __init__(self, db: Session):
        self._db = db

    def lookup_station(self, sensor_id: int) -> int:
        """Return the station id that owns sensor_id.

        Raises SensorNotFound when the sensor is not registered.
        """
        station_id = self._db.execute(
            select(SensorModel.station_id).where(SensorModel.id == sensor_id)
        ).scalar_one_or_none()
        if station_id is None:
            raise SensorNotFound(sensor_id)
        return station_id
