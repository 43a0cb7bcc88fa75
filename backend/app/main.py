"""FastAPI application factory and lifespan for the VRISA alert engine."""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from functools import partial
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError

from .config import settings
from .models.database import engine as default_engine, init_database, make_session_factory
from .api.router import api_router
from .services.ingestion import IngestionCoordinator
from .services.locks import KeyedLock
from .services.unit_of_work import UnitOfWork

# Configure logging for our app (uvicorn only configures its own loggers)
logging.basicConfig(
    level=settings.log_level,
    format="%(levelname)s:     %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: create tables before serving requests."""
    bind = app.state.engine
    logger.info("Database: %s", bind.url.render_as_string(hide_password=True))
    init_database(bind)
    logger.info("Database initialized")

    yield

    logger.info("Shutting down...")
    bind.dispose()
    logger.info("Application shutdown complete")


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or missing request fields are a client error (400), not 422."""
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


async def _storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Unhandled database error on %s %s: %s",
                 request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


def create_app(engine: Optional[Engine] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Storage is wired here and handed to the routers through app.state, so
    tests can pass their own engine.
    """
    bind = engine if engine is not None else default_engine
    session_factory = make_session_factory(bind)
    window = timedelta(minutes=settings.dedup_window_minutes)

    app = FastAPI(
        title="VRISA Alert Engine",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.engine = bind
    app.state.session_factory = session_factory
    app.state.coordinator = IngestionCoordinator(
        uow_factory=partial(UnitOfWork, session_factory, window),
        locks=KeyedLock(),
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(SQLAlchemyError, _storage_error)

    # API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
