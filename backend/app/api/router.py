"""Top-level API router aggregation."""

from fastapi import APIRouter

from . import measurements, alerts, thresholds

api_router = APIRouter(prefix="/api")

api_router.include_router(measurements.router)
api_router.include_router(alerts.router)
api_router.include_router(thresholds.router)
