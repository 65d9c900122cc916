"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import progression.models  # noqa: F401
from progression.database import Base, get_db
from progression.main import app
from progression.schemas.goals import GoalConfig
from progression.schemas.metrics import AggregateMetrics, InteractionScores
from progression.services import metrics_service

CHAIN = ["Megan", "David", "Linda"]


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite so separate sessions get separate connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'progression_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """HTTP client bound to the app, with the test database behind get_db."""

    async def _override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def goals():
    """The default team goals: 10 sessions at 85 or better."""
    return GoalConfig(window_size=10, threshold=85)


@pytest.fixture
def make_scores():
    """Factory for session scores; sub-scores follow overall unless given."""

    def _make(overall=80, **overrides):
        values = {
            "overall_performance": overall,
            "engagement": overall,
            "objection_handling": overall,
            "information_gathering": overall,
            "program_explanation": overall,
            "closing_skills": overall,
            "overall_effectiveness": overall,
        }
        values.update(overrides)
        return InteractionScores(**values)

    return _make


@pytest.fixture
def make_metrics():
    def _make(overall=90, total_calls=10, **overrides):
        values = {
            "overall_performance": overall,
            "engagement": overall,
            "objection_handling": overall,
            "information_gathering": overall,
            "program_explanation": overall,
            "closing_skills": overall,
            "overall_effectiveness": overall,
            "total_calls": total_calls,
        }
        values.update(overrides)
        return AggregateMetrics(**values)

    return _make


@pytest.fixture
def add_sessions(db, make_scores):
    """Record sessions one minute apart, oldest first."""
    start = datetime(2024, 1, 1, 9, 0)
    counter = {"n": 0}

    async def _add(member_id, character_name, overalls, team_id=None, **overrides):
        for overall in overalls:
            await metrics_service.record_interaction(
                db,
                member_id,
                character_name,
                make_scores(overall, **overrides),
                team_id=team_id,
                session_date=start + timedelta(minutes=counter["n"]),
            )
            counter["n"] += 1

    return _add
