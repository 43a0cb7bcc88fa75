"""Row -> JSON dict helpers shared by the routers."""

from datetime import datetime, timezone
from typing import Optional

from ..models.alert import AlertModel
from ..models.measurement import MeasurementModel
from ..models.threshold import ThresholdModel


def iso(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 in UTC with a "Z" marker.

    Freshly written rows carry aware datetimes while SQLite hands back naive
    UTC ones; both render the same way.
    """
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.isoformat() + "Z"


def measurement_to_dict(m: MeasurementModel) -> dict:
    return {
        "id": m.id,
        "sensor_id": m.sensor_id,
        "variable_id": m.variable_id,
        "value": m.value,
        "timestamp": iso(m.timestamp),
    }


def alert_to_dict(a: AlertModel) -> dict:
    return {
        "id": a.id,
        "station_id": a.station_id,
        "variable_id": a.variable_id,
        "message": a.message,
        "severity": a.severity.value,
        "is_resolved": a.is_resolved,
        "created_at": iso(a.created_at),
        "resolved_at": iso(a.resolved_at),
    }


def threshold_to_dict(t: ThresholdModel) -> dict:
    return {
        "variable_id": t.variable_id,
        "low": t.low,
        "medium": t.medium,
        "high": t.high,
        "critical": t.critical,
    }
