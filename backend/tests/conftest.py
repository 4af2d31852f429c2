import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from robobracket.database import get_session
from robobracket.main import app
from robobracket.models.event import Event
from robobracket.models.team import Team

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share the same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models imported before create_all() (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables created per test and dropped afterwards
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema."""
    from robobracket.models.advancement_hold import AdvancementHold  # noqa: F401
    from robobracket.models.category_result import CategoryResult  # noqa: F401
    from robobracket.models.match import Match  # noqa: F401
    from robobracket.models.qualifier_bye import QualifierBye  # noqa: F401

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override is set BEFORE TestClient() and stays in place for the whole test.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def event(session: Session) -> Event:
    event = Event(name="Regional Robotics Cup", location="Test Arena")
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


@pytest.fixture
def make_teams(session: Session, event: Event):
    """Factory: register *count* teams in a category, seeded 1..count by default."""

    def _make(count, category_id="sumo", education_level=None, seeded=True, prefix="Team"):
        teams = []
        for i in range(1, count + 1):
            team = Team(
                event_id=event.id,
                category_id=category_id,
                name=f"{prefix} {i}",
                seed=i if seeded else None,
                education_level=education_level,
            )
            session.add(team)
            teams.append(team)
        session.commit()
        for team in teams:
            session.refresh(team)
        return teams

    return _make
