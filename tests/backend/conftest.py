"""Shared fixtures: an isolated in-memory database with reference rows."""

from datetime import datetime, timedelta, timezone
from functools import partial

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app.main import create_app
from app.models.database import init_database, make_session_factory
from app.models.directory import SensorModel, StationModel, VariableModel
from app.models.threshold import ThresholdModel
from app.services.ingestion import IngestionCoordinator
from app.services.locks import KeyedLock
from app.services.unit_of_work import UnitOfWork

T0 = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock for dedup-window tests."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def populate(session_factory) -> None:
    """Two stations, three sensors, PM25 with full tiers, O3 without tiers."""
    db = session_factory()
    try:
        db.add_all([
            VariableModel(id="PM25", name="Fine particulate matter PM2.5", unit="µg/m³"),
            VariableModel(id="NO2", name="Nitrogen dioxide", unit="ppb"),
            VariableModel(id="O3", name="Ozone", unit="ppb"),
            StationModel(id=1, name="Univalle"),
            StationModel(id=2, name="Compartir"),
        ])
        db.flush()
        db.add_all([
            SensorModel(id=1, station_id=1, model="SEN-A1", brand="Honeywell"),
            SensorModel(id=2, station_id=1, model="SEN-B2", brand="Siemens"),
            SensorModel(id=3, station_id=2, model="SEN-C3", brand="Honeywell"),
            ThresholdModel(variable_id="PM25", low=12, medium=35, high=55, critical=150),
            # Only the upper tiers configured
            ThresholdModel(variable_id="NO2", high=200, critical=400),
        ])
        db.commit()
    finally:
        db.close()


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_database(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    factory = make_session_factory(engine)
    populate(factory)
    return factory


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def coordinator(session_factory, clock):
    return IngestionCoordinator(
        uow_factory=partial(UnitOfWork, session_factory, timedelta(hours=1)),
        locks=KeyedLock(),
        clock=clock,
    )


@pytest.fixture
def client(engine, session_factory):
    app = create_app(engine=engine)
    with TestClient(app) as c:
        yield c
