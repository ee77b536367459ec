import itertools

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from arena.api.dependencies import get_current_actor, get_db
from arena.core.database import init_db
from arena.main import app
from arena.schemas import enrollment_schemas, leaderboard_schemas, tournament_schemas
from arena.schemas.auth_schemas import Actor
from arena.services import enrollment_service, leaderboard_service, tournament_service

ADMIN_ID = "admin_1"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_tournament(db):
    counter = itertools.count(1)

    def _make(**overrides):
        n = next(counter)
        data = {
            "title": f"PUBG Mobile Cup {n}",
            "game_name": "PUBG Mobile",
            "max_participants": 4,
        }
        data.update(overrides)
        return tournament_service.create_tournament(
            db, tournament_schemas.TournamentCreate(**data), creator_id=ADMIN_ID
        )

    return _make


@pytest.fixture
def make_enrollment(db):
    def _make(tournament, user_id, **overrides):
        data = {
            "in_game_nickname": f"nick_{user_id}",
            "game_uid": f"uid_{user_id}",
            "transaction_id": f"txn_{user_id}",
        }
        data.update(overrides)
        return enrollment_service.submit_enrollment(
            db, tournament.id, user_id, enrollment_schemas.EnrollmentCreate(**data)
        )

    return _make


@pytest.fixture
def make_entry(db):
    def _make(tournament, user_id, **stats):
        return leaderboard_service.create_entry(
            db,
            leaderboard_schemas.LeaderboardEntryCreate(tournament_id=tournament.id, user_id=user_id, **stats),
        )

    return _make


# --- HTTP ---

@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def act_as():
    """Swap the authenticated actor for the rest of the test."""
    def _act_as(user_id: str, is_admin: bool = False) -> Actor:
        actor = Actor(id=user_id, is_admin=is_admin)
        app.dependency_overrides[get_current_actor] = lambda: actor
        return actor

    return _act_as


@pytest.fixture
def file_sessions(tmp_path):
    """Independent sessions over one on-disk database, for interleaving two admins' writes."""
    engine = create_engine(f"sqlite:///{tmp_path / 'arena.db'}")
    init_db(bind=engine)
    Sessions = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    opened = []

    def _open():
        session = Sessions()
        opened.append(session)
        return session

    yield _open
    for session in opened:
        session.close()
    engine.dispose()
