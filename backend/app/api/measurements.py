"""Measurement ingestion and history endpoints.

POST /api/measurements runs the ingestion pipeline; the GET routes are
plain reads that bypass it.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..config import settings
from ..models.database import get_db
from ..models.directory import SensorModel, VariableModel
from ..models.measurement import MeasurementModel
from ..services.errors import InvalidInput, SensorNotFound, StorageFailure
from ..services.ingestion import IngestionCoordinator
from .dependencies import get_coordinator
from .formatting import iso, measurement_to_dict

router = APIRouter(prefix="/measurements", tags=["measurements"])


def _as_utc(dt: datetime) -> datetime:
    # Naive query times are taken as UTC already
    return dt.astimezone(timezone.utc) if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


class MeasurementCreate(BaseModel):
    sensor_id: int
    variable_id: str = Field(min_length=1)
    value: float = Field(allow_inf_nan=False)


@router.post("", status_code=201)
def create_measurement(
    body: MeasurementCreate,
    coordinator: IngestionCoordinator = Depends(get_coordinator),
):
    """Store a reading and evaluate it against its variable's thresholds."""
    try:
        measurement = coordinator.ingest(body.sensor_id, body.variable_id, body.value)
    except InvalidInput as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except SensorNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except StorageFailure as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return measurement_to_dict(measurement)


@router.get("/station/{station_id}")
def get_station_measurements(
    station_id: int,
    start: Optional[datetime] = Query(
        default=None, alias="startDate", description="Start time ISO format"
    ),
    end: Optional[datetime] = Query(
        default=None, alias="endDate", description="End time ISO format"
    ),
    variable_id: Optional[str] = Query(default=None, description="Variable code, e.g. PM25"),
    db: Session = Depends(get_db),
):
    """Measurements from every sensor of a station, newest first."""
    query = (
        db.query(MeasurementModel, SensorModel.station_id, VariableModel.name, VariableModel.unit)
        .join(SensorModel, MeasurementModel.sensor_id == SensorModel.id)
        .outerjoin(VariableModel, MeasurementModel.variable_id == VariableModel.id)
        .filter(SensorModel.station_id == station_id)
    )
    if start is not None:
        query = query.filter(MeasurementModel.timestamp >= _as_utc(start))
    if end is not None:
        query = query.filter(MeasurementModel.timestamp <= _as_utc(end))
    if variable_id:
        query = query.filter(MeasurementModel.variable_id == variable_id)

    rows = query.order_by(MeasurementModel.timestamp.desc(), MeasurementModel.id.desc()).all()
    return [
        {
            **measurement_to_dict(m),
            "station_id": sid,
            "variable_name": name,
            "unit": unit,
        }
        for m, sid, name, unit in rows
    ]


@router.get("/sensor/{sensor_id}")
def get_sensor_measurements(sensor_id: int, db: Session = Depends(get_db)):
    """All measurements recorded by one sensor, newest first."""
    rows = (
        db.query(MeasurementModel)
        .filter(MeasurementModel.sensor_id == sensor_id)
        .order_by(MeasurementModel.timestamp.desc(), MeasurementModel.id.desc())
        .all()
    )
    return [measurement_to_dict(m) for m in rows]


@router.get("/history")
def get_measurement_history(
    station_id: int = Query(description="Station id"),
    variable_id: str = Query(min_length=1, description="Variable code, e.g. PM25"),
    days: int = Query(default=settings.history_default_days, ge=1, le=365),
    db: Session = Depends(get_db),
):
    """Time series of one variable at one station for charting, oldest first.

    Each point carries the variable unit so a chart can label its axis from
    the first element.
    """
    start_dt = datetime.now(timezone.utc) - timedelta(days=days)

    results = (
        db.query(MeasurementModel.timestamp, MeasurementModel.value)
        .join(SensorModel, MeasurementModel.sensor_id == SensorModel.id)
        .filter(SensorModel.station_id == station_id)
        .filter(MeasurementModel.variable_id == variable_id)
        .filter(MeasurementModel.timestamp >= start_dt)
        .order_by(MeasurementModel.timestamp)
        .all()
    )
    variable = db.get(VariableModel, variable_id)
    unit = variable.unit if variable else ""

    return [{"timestamp": iso(ts), "value": value, "unit": unit} for ts, value in results]
