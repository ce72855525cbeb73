"""
Change-feed event schemas
"""

from pydantic import BaseModel, Field
from typing import Annotated, Literal, Optional, Union
from partyroom.schemas.session_schemas import SessionRecord, PlayerRecord

ChangeType = Literal["INSERT", "UPDATE", "DELETE"]

class SessionChange(BaseModel):
    """A committed write on the sessions collection"""
    table: Literal["sessions"] = "sessions"
    event_type: ChangeType
    new: Optional[SessionRecord] = None
    old: Optional[SessionRecord] = None

    @property
    def session_id(self) -> str:
        return (self.new or self.old).id

class PlayerChange(BaseModel):
    """A committed write on the players collection"""
    table: Literal["players"] = "players"
    event_type: ChangeType
    new: Optional[PlayerRecord] = None
    old: Optional[PlayerRecord] = None

    @property
    def session_id(self) -> str:
        return (self.new or self.old).session_id

ChangeEvent = Annotated[Union[SessionChange, PlayerChange], Field(discriminator="table")]
