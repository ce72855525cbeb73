"""
Session and player schemas
"""

from pydantic import BaseModel, Field, field_serializer
from typing import Literal, Optional
from datetime import datetime
from partyroom.core.utils import format_timestamp_with_timezone

SessionStatus = Literal["lobby", "tutorial", "playing", "ended"]
Language = Literal["fa", "en"]
GameType = Literal["name_game", "song_guess", "spy"]
PlayerStatus = Literal["connected", "disconnected", "kicked"]
Team = Literal["team_a", "team_b"]


class SessionSettings(BaseModel):
    """Host display and moderation toggles"""
    bigText: bool = False
    colorBlind: bool = False
    kidsMode: bool = True
    allowAnonymous: bool = True

class SessionCreate(BaseModel):
    """Request to create a session"""
    language: Language = Field(default="fa", description="Display language")

class SessionSettingsUpdate(BaseModel):
    """Host settings panel update"""
    settings: Optional[SessionSettings] = None
    max_players: Optional[int] = None

class SessionRecord(BaseModel):
    """A session row"""
    id: str
    room_code: str
    host_id: str
    status: SessionStatus
    language: Language
    max_players: int
    current_game: Optional[GameType] = None
    settings: SessionSettings
    created_at: datetime
    expires_at: datetime
    last_activity: datetime

    @field_serializer('created_at', 'expires_at', 'last_activity', when_used='json')
    def serialize_dt(self, dt: Optional[datetime]) -> Optional[str]:
        return format_timestamp_with_timezone(dt) or None

    class Config:
        from_attributes = True

class PublicSession(BaseModel):
    """Session as seen by players; the host capability is left out"""
    id: str
    room_code: str
    status: SessionStatus
    language: Language
    max_players: int
    current_game: Optional[GameType] = None
    settings: SessionSettings

    class Config:
        from_attributes = True

class PlayerJoin(BaseModel):
    """Join request from a phone"""
    room_code: str = Field(..., min_length=1, max_length=6)
    nickname: str = ""

class PlayerRecord(BaseModel):
    """A player row"""
    id: str
    session_id: str
    nickname: str
    avatar_emoji: str
    player_id: str
    status: PlayerStatus
    team: Optional[Team] = None
    score: int = Field(default=0, ge=0)
    joined_at: datetime
    last_seen: datetime
    reconnect_token: Optional[str] = None

    @field_serializer('joined_at', 'last_seen', when_used='json')
    def serialize_dt(self, dt: Optional[datetime]) -> Optional[str]:
        return format_timestamp_with_timezone(dt) or None

    class Config:
        from_attributes = True

class HostCredentials(BaseModel):
    """Capability stored by the host device"""
    host_id: str
    session_id: str

class PlayerCredentials(BaseModel):
    """Capability stored by a player device"""
    player_id: str
    session_id: str
    player_db_id: str

class DeviceCredentials(BaseModel):
    """Everything a device has persisted locally; host takes priority on resume"""
    host_id: Optional[str] = None
    session_id: Optional[str] = None
    player_id: Optional[str] = None
    player_db_id: Optional[str] = None

    @property
    def has_host(self) -> bool:
        return bool(self.host_id and self.session_id)

    @property
    def has_player(self) -> bool:
        return bool(self.player_db_id and self.session_id)

    @classmethod
    def for_host(cls, creds: HostCredentials) -> "DeviceCredentials":
        return cls(host_id=creds.host_id, session_id=creds.session_id)

    @classmethod
    def for_player(cls, creds: PlayerCredentials) -> "DeviceCredentials":
        return cls(
            player_id=creds.player_id,
            session_id=creds.session_id,
            player_db_id=creds.player_db_id
        )

class SessionCreated(BaseModel):
    """Response to session creation"""
    session: SessionRecord
    credentials: HostCredentials
    join_url: str
    qr_url: str

class PlayerJoined(BaseModel):
    """Response to a successful join"""
    player: PlayerRecord
    credentials: PlayerCredentials

class JoinLinks(BaseModel):
    join_url: str
    qr_url: str
