"""Threshold resolver: per-variable severity tiers."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.threshold import ThresholdModel
from .severity import Tiers

logger = logging.getLogger(__name__)


def tiers_from_model(row: ThresholdModel) -> Tiers:
    return Tiers(low=row.low, medium=row.medium, high=row.high, critical=row.critical)


class ThresholdResolver:
    def __init__(self, db: Session):
        self._db = db

    def get_thresholds(self, variable_id: str) -> Optional[Tiers]:
        """Return the configured tiers for variable_id.

        None means the variable has no configuration, which is not an error:
        the reading is stored but never classified.
        """
        row = self._db.get(ThresholdModel, variable_id)
        if row is None:
            return None
        tiers = tiers_from_model(row)
        if tiers.is_empty:
            return None
        if not tiers.is_ascending:
            logger.warning("Thresholds for %s are not strictly increasing: %s", variable_id, tiers)
        return tiers
