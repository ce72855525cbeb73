"""
Game state data model
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, JSON
from partyroom.core.database import Base
from partyroom.core.utils import utcnow
from partyroom.models.session import new_id

class GameState(Base):
    """Per-session game progress"""
    __tablename__ = "game_state"

    id = Column(String(36), primary_key=True, default=new_id)
    session_id = Column(String(36), ForeignKey("sessions.id"), nullable=False, index=True)
    round = Column(Integer, nullable=False, default=1)
    phase = Column(String(20), nullable=False, default="waiting")  # waiting, question, answer, results
    data = Column(JSON, nullable=False, default=dict)     # shape depends on the selected game
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
