"""FastAPI dependencies resolving objects stored on app.state."""

from fastapi import Request

from ..services.ingestion import IngestionCoordinator


def get_coordinator(request: Request) -> IngestionCoordinator:
    return request.app.state.coordinator
