"""
Database configuration
"""
import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from partyroom.core.config import settings

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=connect_args,
    echo=False  # True prints every SQL statement
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """Yield a database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

async def init_db():
    """Create all tables"""
    # Import every model so it registers on Base.metadata
    from partyroom.models.session import GameSession
    from partyroom.models.player import Player
    from partyroom.models.game_state import GameState
    from partyroom.models.telemetry import TelemetryEvent

    Base.metadata.create_all(bind=engine)
    logger.info("✅ Database tables ready")
