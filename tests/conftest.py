"""Shared test fixtures."""
from datetime import datetime, timedelta
from pathlib import Path
from typing import Generator, List

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Import all models so SQLModel.metadata knows about them
from activitycore.models.activity import Activity, GpsPoint  # noqa: F401
from activitycore.models.athlete import AthleteProfile  # noqa: F401
from activitycore.models.track import TrackSample

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# One degree of latitude along a meridian is R * pi / 180 meters (spherical earth)
METERS_PER_DEGREE_LAT = 6_371_000.0 * 3.141592653589793 / 180.0


def make_straight_track(
    total_meters: float,
    total_seconds: float,
    n_points: int = 11,
    start: datetime = datetime(2025, 3, 1, 7, 0, 0),
    lat0: float = 45.0,
    lng0: float = 6.0,
) -> List[TrackSample]:
    """
    Evenly spaced samples heading due north at constant pace.
    Along a meridian haversine distance is exactly proportional to latitude delta.
    """
    step_deg = total_meters / METERS_PER_DEGREE_LAT / (n_points - 1)
    step_s = total_seconds / (n_points - 1)
    return [
        TrackSample(
            sequence=i,
            timestamp=start + timedelta(seconds=i * step_s),
            lat=lat0 + i * step_deg,
            lng=lng0,
        )
        for i in range(n_points)
    ]


@pytest.fixture(name="straight_track")
def straight_track_fixture():
    """Factory for synthetic constant-pace tracks (see make_straight_track)."""
    return make_straight_track


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine. Tables recreated fresh for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="test_session")
def test_session_fixture(engine) -> Generator[Session, None, None]:
    """Provides a DB session connected to in-memory SQLite."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="seeded_activity")
def seeded_activity_fixture(test_session: Session) -> Activity:
    """A persisted Activity for use in GPS point tests."""
    activity = Activity(
        name="Morning Run",
        sport_type="run",
        started_at=datetime(2025, 1, 15, 7, 30),
        elapsed_time_seconds=3600,
        distance_meters=10000.0,
        avg_heart_rate=148,
        max_heart_rate=172,
    )
    test_session.add(activity)
    test_session.commit()
    test_session.refresh(activity)
    return activity
