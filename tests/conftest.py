"""Shared fixtures: in-memory databases, an app per test and model factories."""

from collections.abc import Iterator
from datetime import UTC, datetime
from decimal import Decimal

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from yardops.core.config import Settings
from yardops.core.database import build_engine, build_session_factory, init_db
from yardops.main import create_app
from yardops.models import (
    Location,
    Meter,
    MeterAssignment,
    MeterType,
    Reading,
    ScheduledReading,
    User,
)
from yardops.models.enums import ReadingFrequency, UserRole

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


def _test_settings() -> Settings:
    return Settings(DATABASE_URL="sqlite://", SMTP_USER="", SMTP_PASSWORD="", DEBUG=False)


@pytest.fixture
def db() -> Iterator[Session]:
    """A session on a fresh in-memory database."""
    engine = build_engine("sqlite://")
    init_db(engine)
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def app() -> FastAPI:
    return create_app(_test_settings())


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Create a test client with proper lifespan handling."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def app_db(app: FastAPI, client: TestClient) -> Iterator[Session]:
    """A session on the database behind ``client``."""
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def make_user(
    db: Session,
    email: str = "reader@example.com",
    role: UserRole = UserRole.READER,
    first_name: str = "Jane",
    last_name: str = "Doe",
) -> User:
    user = User(email=email, first_name=first_name, last_name=last_name, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_meter(
    db: Session,
    meter_number: str = "WTR-001",
    frequency: ReadingFrequency = ReadingFrequency.WEEKLY,
    location_name: str = "Dock A",
    type_name: str = "WATER",
) -> Meter:
    """Create a meter, reusing the location and meter type if they already exist."""
    location = db.query(Location).filter(Location.name == location_name).first()
    if not location:
        location = Location(name=location_name)
    meter_type = db.query(MeterType).filter(MeterType.name == type_name).first()
    if not meter_type:
        meter_type = MeterType(name=type_name)

    meter = Meter(
        meter_number=meter_number,
        frequency=frequency,
        location=location,
        meter_type=meter_type,
    )
    db.add(meter)
    db.commit()
    db.refresh(meter)
    return meter


def assign(db: Session, meter: Meter, user: User) -> MeterAssignment:
    assignment = MeterAssignment(meter_id=meter.id, user_id=user.id)
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment


def add_reading(
    db: Session,
    meter: Meter,
    user: User,
    reading_date: datetime,
    value: str = "100.0",
    comment: str | None = None,
) -> Reading:
    reading = Reading(
        meter_id=meter.id,
        user_id=user.id,
        value=Decimal(value),
        reading_date=reading_date,
        comment=comment,
    )
    db.add(reading)
    db.commit()
    db.refresh(reading)
    return reading


def add_schedule(db: Session, meter: Meter, due_date: datetime) -> ScheduledReading:
    scheduled = ScheduledReading(meter_id=meter.id, scheduled_date=due_date, due_date=due_date)
    db.add(scheduled)
    db.commit()
    db.refresh(scheduled)
    return scheduled
