"""
Session data model
"""

import uuid
from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import relationship
from partyroom.core.database import Base
from partyroom.core.utils import utcnow

def new_id() -> str:
    return str(uuid.uuid4())

class GameSession(Base):
    """Host session table"""
    __tablename__ = "sessions"

    id = Column(String(36), primary_key=True, default=new_id)
    room_code = Column(String(6), nullable=False, index=True)
    host_id = Column(String(64), nullable=False)          # capability token held by the host device
    status = Column(String(20), nullable=False, default="lobby")  # lobby, tutorial, playing, ended
    language = Column(String(2), nullable=False, default="fa")    # fa, en
    max_players = Column(Integer, nullable=False, default=12)
    current_game = Column(String(20), nullable=True)      # name_game, song_guess, spy; only while playing
    settings = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=utcnow)
    expires_at = Column(DateTime, nullable=False)
    last_activity = Column(DateTime, default=utcnow)

    # Relationships
    players = relationship("Player", back_populates="session")
