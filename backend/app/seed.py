"""Load the reference directory: variables, thresholds, stations and sensors.

Run with ``python -m app.seed`` from the backend directory. Existing rows are
left alone, so seeding twice is harmless.
"""

import logging

from sqlalchemy import Engine
from sqlalchemy.orm import Session

from .models.database import engine, init_database, make_session_factory
from .models.directory import SensorModel, StationModel, VariableModel
from .models.threshold import ThresholdModel

logger = logging.getLogger(__name__)

VARIABLES = [
    {"id": "PM25", "name": "Fine particulate matter PM2.5", "unit": "µg/m³"},
    {"id": "PM10", "name": "Particulate matter PM10", "unit": "µg/m³"},
    {"id": "NO2", "name": "Nitrogen dioxide", "unit": "ppb"},
    {"id": "O3", "name": "Ozone", "unit": "ppb"},
]

# (variable_id, low, medium, high, critical)
THRESHOLDS = [
    ("PM25", 12, 35, 55, 150),
    ("PM10", 54, 154, 254, 354),
    ("NO2", 50, 100, 200, 400),
]

STATIONS = [
    {"id": 1, "name": "Estación Universidad del Valle"},
    {"id": 2, "name": "Estación Compartir"},
]

SENSORS = [
    {"id": 1, "station_id": 1, "model": "SEN-A1", "brand": "Honeywell", "status": "active"},
    {"id": 2, "station_id": 1, "model": "SEN-B2", "brand": "Siemens", "status": "active"},
    {"id": 3, "station_id": 2, "model": "SEN-C3", "brand": "Honeywell", "status": "active"},
]


def seed_reference_data(db: Session) -> int:
    """Insert missing reference rows. Returns count seeded."""
    count = 0
    for v in VARIABLES:
        if db.get(VariableModel, v["id"]) is None:
            db.add(VariableModel(**v))
            count += 1
    # Parents are flushed before the rows that reference them
    db.flush()
    for variable_id, low, medium, high, critical in THRESHOLDS:
        if db.get(ThresholdModel, variable_id) is None:
            db.add(ThresholdModel(
                variable_id=variable_id, low=low, medium=medium, high=high, critical=critical,
            ))
            count += 1
    for s in STATIONS:
        if db.get(StationModel, s["id"]) is None:
            db.add(StationModel(**s))
            count += 1
    db.flush()
    for s in SENSORS:
        if db.get(SensorModel, s["id"]) is None:
            db.add(SensorModel(**s))
            count += 1
    db.commit()
    logger.info("Seeded %d reference rows", count)
    return count


def main(bind: Engine = engine) -> int:
    init_database(bind)
    db = make_session_factory(bind)()
    try:
        return seed_reference_data(db)
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:     %(name)s - %(message)s")
    main()
