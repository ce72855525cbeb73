"""
Shared fixtures: in-memory database, fresh change feed, services
"""

import asyncio
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from partyroom.core.database import Base
from partyroom.models.session import GameSession
from partyroom.models.player import Player
from partyroom.models.game_state import GameState
from partyroom.models.telemetry import TelemetryEvent
from partyroom.services.realtime_service import ChangeFeed
from partyroom.services.session_store import SessionStore
from partyroom.services.session_service import SessionService
from partyroom.services.lobby_service import LobbyService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def store(db, feed):
    return SessionStore(db, feed)


@pytest.fixture
def session_service(db, store):
    return SessionService(db, store=store)


@pytest.fixture
def lobby_service(db, store):
    return LobbyService(db, store=store)


@pytest.fixture
def lobby(session_service):
    """A fresh lobby session and its host credentials"""
    async def make(language="en"):
        return await session_service.create_session(language)
    return make


@pytest.fixture
def settle():
    """Let change-feed consumers catch up"""
    async def run(rounds: int = 10):
        for _ in range(rounds):
            await asyncio.sleep(0)
    return run
