"""GET/POST /api/thresholds - Per-variable severity tiers."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.orm import Session

from ..models.database import get_db
from ..models.directory import VariableModel
from ..models.threshold import ThresholdModel
from ..services.thresholds import tiers_from_model
from .formatting import threshold_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/thresholds", tags=["thresholds"])


class ThresholdCreate(BaseModel):
    variable_id: str = Field(min_length=1)
    low: Optional[float] = None
    medium: Optional[float] = None
    high: Optional[float] = None
    critical: Optional[float] = None

    @model_validator(mode="after")
    def _at_least_one_tier(self) -> "ThresholdCreate":
        if all(v is None for v in (self.low, self.medium, self.high, self.critical)):
            raise ValueError("at least one of low, medium, high, critical is required")
        return self


@router.get("")
def list_thresholds(db: Session = Depends(get_db)):
    """Return all threshold configurations."""
    rows = db.query(ThresholdModel).order_by(ThresholdModel.variable_id).all()
    return [threshold_to_dict(t) for t in rows]


@router.post("", status_code=201)
def create_threshold(body: ThresholdCreate, db: Session = Depends(get_db)):
    """Configure the tiers of a variable that has none yet."""
    if db.get(VariableModel, body.variable_id) is None:
        raise HTTPException(status_code=404, detail=f"Variable {body.variable_id} not found")
    if db.get(ThresholdModel, body.variable_id) is not None:
        raise HTTPException(
            status_code=409, detail=f"Thresholds for {body.variable_id} already exist",
        )

    row = ThresholdModel(**body.model_dump())
    if not tiers_from_model(row).is_ascending:
        logger.warning("Thresholds for %s are not strictly increasing", body.variable_id)
    db.add(row)
    db.commit()
    logger.info("Thresholds configured for %s", body.variable_id)
    return threshold_to_dict(row)
