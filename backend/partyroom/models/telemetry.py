"""
Telemetry data model
"""

from sqlalchemy import Column, String, ForeignKey, DateTime, JSON
from partyroom.core.database import Base
from partyroom.core.utils import utcnow
from partyroom.models.session import new_id

class TelemetryEvent(Base):
    """Append-only event log"""
    __tablename__ = "telemetry"

    id = Column(String(36), primary_key=True, default=new_id)
    session_id = Column(String(36), ForeignKey("sessions.id"), nullable=True)
    event_type = Column(String(50), nullable=False)
    event_metadata = Column("metadata", JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=utcnow)
