"""Shared test fixtures and configuration."""
import itertools
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from checkpoint.main import app
from checkpoint.db.base import Base
from checkpoint.db.models import Participant, RedemptionSession, Team
from checkpoint.api.deps import get_db, get_stations
from checkpoint.core.rate_limit import limiter
from checkpoint.services.stations import StationRegistry


# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(autouse=True)
def disable_rate_limiting_for_tests(request):
    """Disable rate limiting for all tests except rate limiting tests."""
    if "rate_limit" in request.keywords:
        limiter.reset()
        yield
        limiter.reset()
    else:
        limiter.enabled = False
        yield
        limiter.enabled = True


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh database for each test."""
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory bound to the test database, as handed to dispatchers."""
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """Create a new database session for a test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def stations(session_factory):
    """Station registry writing to the test database."""
    return StationRegistry(session_factory)


@pytest.fixture(scope="function")
def client(db_session, stations):
    """Create a test client with a test database."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_stations] = lambda: stations
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_team(db_session):
    """Factory for teams."""
    counter = itertools.count(1)

    def _make_team(team_name=None, table_number=None):
        n = next(counter)
        team = Team(
            team_name=team_name or f"Team {n}",
            team_code=f"TEAM{n:03d}",
            table_number=table_number,
        )
        db_session.add(team)
        db_session.commit()
        db_session.refresh(team)
        return team

    return _make_team


@pytest.fixture
def make_participant(db_session):
    """Factory for participants; every participant gets a unique token."""
    counter = itertools.count(1)

    def _make_participant(
        qr_token=None,
        name=None,
        team=None,
        is_inside_venue=False,
        checked_in_day1=False,
        dietary_restrictions=None,
    ):
        n = next(counter)
        participant = Participant(
            name=name or f"Participant {n}",
            email=f"participant{n}@example.com",
            qr_token=qr_token or f"token-{n:04d}",
            team_id=team.id if team else None,
            is_inside_venue=is_inside_venue,
            checked_in_day1=checked_in_day1,
            dietary_restrictions=dietary_restrictions,
        )
        db_session.add(participant)
        db_session.commit()
        db_session.refresh(participant)
        return participant

    return _make_participant


@pytest.fixture
def make_redemption_session(db_session):
    """Factory for redemption sessions (meals)."""

    def _make_session(
        session_key="LUNCH_DAY1",
        display_label=None,
        is_active=True,
        start_time=None,
        end_time=None,
    ):
        session = RedemptionSession(
            session_key=session_key,
            display_label=display_label or session_key.replace("_", " ").title(),
            is_active=is_active,
            start_time=start_time,
            end_time=end_time,
            created_at=datetime.now(timezone.utc),
        )
        db_session.add(session)
        db_session.commit()
        db_session.refresh(session)
        return session

    return _make_session
