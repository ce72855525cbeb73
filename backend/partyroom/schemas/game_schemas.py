"""
Game selection and game state schemas
"""

from pydantic import BaseModel, Field, field_serializer
from typing import Annotated, Literal, Optional, Union
from datetime import datetime
from partyroom.core.utils import format_timestamp_with_timezone
from partyroom.schemas.session_schemas import GameType

GamePhase = Literal["waiting", "question", "answer", "results"]

NAME_GAME_LETTERS = {"en": "A", "fa": "ک"}

class NameGameData(BaseModel):
    """Naming round: players find words starting with a letter"""
    game: Literal["name_game"] = "name_game"
    letter: str = "A"
    round_seconds: int = Field(default=60, gt=0)

class SongGuessData(BaseModel):
    game: Literal["song_guess"] = "song_guess"

class SpyData(BaseModel):
    game: Literal["spy"] = "spy"

GameData = Annotated[Union[NameGameData, SongGuessData, SpyData], Field(discriminator="game")]

class GameSelect(BaseModel):
    """Host picks a game"""
    game: GameType

class GameStateRecord(BaseModel):
    """A game_state row"""
    id: str
    session_id: str
    round: int = Field(ge=1)
    phase: GamePhase
    data: GameData
    updated_at: datetime

    @field_serializer('updated_at', when_used='json')
    def serialize_dt(self, dt: Optional[datetime]) -> Optional[str]:
        return format_timestamp_with_timezone(dt) or None

    class Config:
        from_attributes = True
