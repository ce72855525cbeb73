"""
Player data model
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from partyroom.core.database import Base
from partyroom.core.utils import utcnow
from partyroom.models.session import new_id

class Player(Base):
    """Joined player table; rows are never deleted"""
    __tablename__ = "players"

    id = Column(String(36), primary_key=True, default=new_id)
    session_id = Column(String(36), ForeignKey("sessions.id"), nullable=False, index=True)
    nickname = Column(String(20), nullable=False)
    avatar_emoji = Column(String(8), nullable=False)
    player_id = Column(String(64), nullable=False)        # capability token held by the player device
    status = Column(String(20), nullable=False, default="connected")  # connected, disconnected, kicked
    team = Column(String(10), nullable=True)              # team_a, team_b
    score = Column(Integer, nullable=False, default=0)
    joined_at = Column(DateTime, default=utcnow)
    last_seen = Column(DateTime, default=utcnow)
    reconnect_token = Column(String(64), nullable=True)

    # Relationships
    session = relationship("GameSession", back_populates="players")
