"""Alert writer: create, resolve and list ledger rows."""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.alert import AlertModel
from .errors import AlertNotFound
from .severity import Severity

logger = logging.getLogger(__name__)


class AlertWriter:
    """All mutations of the alert ledger go through this class.

    The writer only flushes; committing is the caller's decision so that an
    alert insert can share a transaction with its measurement.
    """

    def __init__(self, db: Session):
        self._db = db

    def create(
        self,
        station_id: int,
        variable_id: str,
        message: str,
        severity: Severity,
        now: Optional[datetime] = None,
    ) -> AlertModel:
        alert = AlertModel(
            station_id=station_id,
            variable_id=variable_id,
            message=message,
            severity=severity,
            is_resolved=False,
            created_at=now or datetime.now(timezone.utc),
        )
        self._db.add(alert)
        self._db.flush()
        logger.warning(
            "Alert CREATED: #%d station=%d %s [%s] %s",
            alert.id, station_id, variable_id, severity.value, message,
        )
        return alert

    def resolve(self, alert_id: int, now: Optional[datetime] = None) -> AlertModel:
        """Mark an alert resolved.

        Resolving an already-resolved alert is a no-op that returns it with
        its original resolved_at.
        """
        alert = self._db.get(AlertModel, alert_id)
        if alert is None:
            raise AlertNotFound(alert_id)
        if alert.is_resolved:
            logger.debug("Alert #%d already resolved at %s", alert_id, alert.resolved_at)
            return alert
        alert.is_resolved = True
        alert.resolved_at = now or datetime.now(timezone.utc)
        self._db.flush()
        logger.info("Alert RESOLVED: #%d station=%d %s", alert.id, alert.station_id, alert.variable_id)
        return alert

    def list_alerts(self) -> list[AlertModel]:
        """All alerts, newest first."""
        return list(
            self._db.execute(
                select(AlertModel).order_by(AlertModel.created_at.desc(), AlertModel.id.desc())
            ).scalars()
        )
