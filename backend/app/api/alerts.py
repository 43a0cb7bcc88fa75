"""GET /api/alerts and PUT /api/alerts/{id}/resolve."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..models.database import get_db
from ..services.alert_writer import AlertWriter
from ..services.errors import AlertNotFound
from .formatting import alert_to_dict

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("")
def list_alerts(db: Session = Depends(get_db)):
    """Return every alert, newest first."""
    return [alert_to_dict(a) for a in AlertWriter(db).list_alerts()]


@router.put("/{alert_id}/resolve")
def resolve_alert(alert_id: int, db: Session = Depends(get_db)):
    """Mark an alert resolved. Resolving twice returns the alert unchanged."""
    try:
        alert = AlertWriter(db).resolve(alert_id)
    except AlertNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    db.commit()
    return alert_to_dict(alert)
