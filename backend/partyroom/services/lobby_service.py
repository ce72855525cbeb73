"""
Join admission, player liveness and kicks
"""

import logging
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from partyroom.core.config import settings
from partyroom.core.errors import (
    EmptyNicknameError,
    GameAlreadyStartedError,
    HostAuthorizationError,
    InvalidRoomCodeError,
    PlayerKickedError,
    PlayerNotFoundError,
    RoomFullError,
    SessionNotFoundError,
)
from partyroom.core.utils import utcnow, can_reconnect
from partyroom.schemas.session_schemas import PlayerCredentials, PlayerRecord, DeviceCredentials
from partyroom.services.identity import generate_player_id, get_random_emoji, sanitize_nickname
from partyroom.services.realtime_service import ChangeFeed
from partyroom.services.session_store import SessionStore

logger = logging.getLogger(__name__)

class LobbyService:
    """Admits players into a lobby and tracks their liveness"""

    def __init__(self, db: Session, feed: Optional[ChangeFeed] = None,
                 store: Optional[SessionStore] = None):
        self.db = db
        self.store = store or SessionStore(db, feed)

    async def join(self, room_code: str, nickname: str) -> Tuple[PlayerRecord, PlayerCredentials]:
        """Admit a player by room code.

        The capacity check counts connected players and then inserts; two
        phones joining at the same moment can both pass the check, so a
        room can end up over max_players.
        """
        if not nickname or not nickname.strip():
            raise EmptyNicknameError()

        session = await self.store.get_session_by_code((room_code or "").strip().upper())
        if not session:
            raise InvalidRoomCodeError()

        if session.status != "lobby":
            raise GameAlreadyStartedError()

        connected = await self.store.count_players(session.id, status="connected")
        if connected >= session.max_players:
            raise RoomFullError()

        now = utcnow()
        player = await self.store.insert_player(
            session_id=session.id,
            nickname=sanitize_nickname(nickname),
            avatar_emoji=get_random_emoji(),
            player_id=generate_player_id(),
            status="connected",
            team=None,
            score=0,
            joined_at=now,
            last_seen=now,
            reconnect_token=None
        )
        await self.store.log_event("player_joined", session.id, {"player": player.id})
        logger.info(f"👋 {player.nickname} joined session {session.id} ({connected + 1}/{session.max_players})")
        return player, PlayerCredentials(
            player_id=player.player_id,
            session_id=session.id,
            player_db_id=player.id
        )

    async def list_players(self, session_id: str, status: Optional[str] = None) -> List[PlayerRecord]:
        return await self.store.list_players(session_id, status=status)

    async def heartbeat(self, player_db_id: str) -> PlayerRecord:
        """Refresh last_seen for a player device"""
        player = await self.store.get_player(player_db_id)
        if not player:
            raise PlayerNotFoundError()
        if player.status == "kicked":
            raise PlayerKickedError()
        logger.debug(f"💓 Heartbeat from player {player_db_id}")
        return await self.store.update_player(player_db_id, last_seen=utcnow())

    async def kick_player(self, player_db_id: str, host_id: Optional[str] = None) -> PlayerRecord:
        """Remove a player; kicked is terminal"""
        player = await self.store.get_player(player_db_id)
        if not player:
            raise PlayerNotFoundError()
        session = await self.store.get_session(player.session_id)
        if not session:
            raise SessionNotFoundError()
        if host_id != session.host_id:
            if settings.ENFORCE_HOST_TOKEN:
                raise HostAuthorizationError()
            logger.warning(f"⚠️ Kick on session {session.id} without a matching host token")
        if player.status == "kicked":
            return player
        kicked = await self.store.update_player(player_db_id, status="kicked")
        await self.store.log_event("player_kicked", session.id, {"player": player_db_id})
        logger.info(f"🚫 {player.nickname} removed from session {session.id}")
        return kicked

    async def leave(self, player_db_id: str) -> PlayerRecord:
        """Player closed the lobby; the row stays so a quick return can reclaim it"""
        player = await self.store.get_player(player_db_id)
        if not player:
            raise PlayerNotFoundError()
        if player.status != "connected":
            return player
        logger.info(f"🚪 {player.nickname} left session {player.session_id}")
        return await self.store.update_player(player_db_id, status="disconnected", last_seen=utcnow())

    async def resume_player(self, credentials: DeviceCredentials) -> Optional[PlayerRecord]:
        """Look up the stored player row.

        None when the row is gone, belongs elsewhere, or was last seen
        outside the reconnect window. Kicked rows come back as-is.
        """
        if not credentials.has_player:
            return None
        player = await self.store.get_player(credentials.player_db_id)
        if not player or player.session_id != credentials.session_id:
            return None
        if credentials.player_id and player.player_id != credentials.player_id:
            return None
        if player.status == "kicked":
            return player
        if not can_reconnect(player.last_seen):
            logger.info(f"⌛ Player {player.id} was away too long to reconnect")
            if player.status == "connected":
                await self.store.update_player(player.id, status="disconnected")
            return None
        if player.status == "disconnected":
            player = await self.store.update_player(player.id, status="connected", last_seen=utcnow())
        return player
