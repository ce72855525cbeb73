"""
Session lifecycle service
"""

import logging
from datetime import timedelta
from typing import Optional, Tuple
from sqlalchemy.orm import Session
from partyroom.core.config import settings
from partyroom.core.errors import (
    HostAuthorizationError,
    InvalidSettingsError,
    InvalidTransitionError,
    NotEnoughPlayersError,
    SessionNotFoundError,
)
from partyroom.core.utils import utcnow, get_join_url, get_qr_code_url
from partyroom.schemas.session_schemas import (
    HostCredentials,
    JoinLinks,
    SessionRecord,
    SessionSettings,
    SessionSettingsUpdate,
)
from partyroom.schemas.game_schemas import (
    NAME_GAME_LETTERS,
    GameStateRecord,
    NameGameData,
    SongGuessData,
    SpyData,
)
from partyroom.services.identity import generate_room_code, generate_host_id
from partyroom.services.realtime_service import ChangeFeed
from partyroom.services.session_store import SessionStore

logger = logging.getLogger(__name__)


def default_game_data(game: str, language: str) -> dict:
    """Initial GameState.data for a freshly selected game"""
    if game == "name_game":
        return NameGameData(
            letter=NAME_GAME_LETTERS.get(language, "A"),
            round_seconds=settings.NAME_GAME_ROUND_SECONDS
        ).model_dump()
    if game == "song_guess":
        return SongGuessData().model_dump()
    if game == "spy":
        return SpyData().model_dump()
    raise ValueError(f"Unknown game: {game}")


class SessionService:
    """Creates sessions and drives lobby -> tutorial -> playing -> ended"""

    def __init__(self, db: Session, feed: Optional[ChangeFeed] = None,
                 store: Optional[SessionStore] = None):
        self.db = db
        self.store = store or SessionStore(db, feed)

    async def create_session(self, language: str = None) -> Tuple[SessionRecord, HostCredentials]:
        """Insert a lobby session and hand back the host capability"""
        language = language or settings.DEFAULT_LANGUAGE
        now = utcnow()
        session = await self.store.create_session(
            room_code=generate_room_code(),
            host_id=generate_host_id(),
            status="lobby",
            language=language,
            max_players=settings.DEFAULT_MAX_PLAYERS,
            current_game=None,
            settings=SessionSettings().model_dump(),
            created_at=now,
            expires_at=now + timedelta(hours=settings.SESSION_TTL_HOURS),
            last_activity=now
        )
        await self.store.log_event("session_created", session.id, {"language": language})
        logger.info(f"🎮 Session {session.id} created with room code {session.room_code}")
        return session, HostCredentials(host_id=session.host_id, session_id=session.id)

    async def get_session(self, session_id: str) -> Optional[SessionRecord]:
        return await self.store.get_session(session_id)

    async def get_session_by_code(self, room_code: str) -> Optional[SessionRecord]:
        return await self.store.get_session_by_code(room_code.strip().upper())

    async def require_session(self, session_id: str) -> SessionRecord:
        session = await self.store.get_session(session_id)
        if not session:
            raise SessionNotFoundError()
        return session

    async def get_links(self, session_id: str) -> JoinLinks:
        session = await self.require_session(session_id)
        return JoinLinks(
            join_url=get_join_url(session.room_code),
            qr_url=get_qr_code_url(session.room_code)
        )

    def _authorize_host(self, session: SessionRecord, host_id: Optional[str]):
        """Host-only writes trust the caller unless ENFORCE_HOST_TOKEN is on"""
        if host_id == session.host_id:
            return
        if settings.ENFORCE_HOST_TOKEN:
            raise HostAuthorizationError()
        logger.warning(f"⚠️ Host-only write on session {session.id} without a matching host token")

    async def update_settings(self, session_id: str, update: SessionSettingsUpdate,
                              host_id: Optional[str] = None) -> SessionRecord:
        session = await self.require_session(session_id)
        self._authorize_host(session, host_id)
        fields = {"last_activity": utcnow()}
        if update.settings is not None:
            fields["settings"] = update.settings.model_dump()
        if update.max_players is not None:
            if not settings.MIN_PLAYERS <= update.max_players <= settings.MAX_PLAYERS_LIMIT:
                raise InvalidSettingsError(
                    f"Max players must be between {settings.MIN_PLAYERS} and {settings.MAX_PLAYERS_LIMIT}"
                )
            fields["max_players"] = update.max_players
        return await self.store.update_session(session_id, **fields)

    async def start_game(self, session_id: str, host_id: Optional[str] = None) -> SessionRecord:
        """Move the lobby into the tutorial once enough players are connected"""
        session = await self.require_session(session_id)
        self._authorize_host(session, host_id)
        if session.status != "lobby":
            raise InvalidTransitionError()
        connected = await self.store.count_players(session_id, status="connected")
        if connected < settings.MIN_PLAYERS_TO_START:
            raise NotEnoughPlayersError(f"At least {settings.MIN_PLAYERS_TO_START} players required")
        updated = await self.store.update_session(session_id, status="tutorial", last_activity=utcnow())
        await self.store.log_event("game_started", session_id, {"players": connected})
        logger.info(f"▶️ Session {session_id} entering tutorial with {connected} players")
        return updated

    async def complete_tutorial(self, session_id: str, host_id: Optional[str] = None) -> SessionRecord:
        """Tutorial finished or skipped; the host moves on to game selection"""
        session = await self.require_session(session_id)
        self._authorize_host(session, host_id)
        if session.status == "playing":
            return session
        if session.status != "tutorial":
            raise InvalidTransitionError()
        return await self.store.update_session(session_id, status="playing", last_activity=utcnow())

    async def select_game(self, session_id: str, game: str,
                          host_id: Optional[str] = None) -> Tuple[SessionRecord, GameStateRecord]:
        session = await self.require_session(session_id)
        self._authorize_host(session, host_id)
        if session.status not in ("tutorial", "playing"):
            raise InvalidTransitionError()
        data = default_game_data(game, session.language)
        updated = await self.store.update_session(
            session_id,
            current_game=game,
            status="playing",
            last_activity=utcnow()
        )
        state = await self.store.insert_game_state(session_id, round=1, phase="waiting", data=data)
        await self.store.log_event("game_selected", session_id, {"game": game})
        logger.info(f"🎲 Session {session_id} playing {game}")
        return updated, state

    async def end_session(self, session_id: str, host_id: Optional[str] = None) -> SessionRecord:
        session = await self.require_session(session_id)
        self._authorize_host(session, host_id)
        if session.status == "ended":
            return session
        updated = await self.store.update_session(
            session_id,
            status="ended",
            current_game=None,
            last_activity=utcnow()
        )
        await self.store.log_event("session_ended", session_id)
        return updated

    async def get_game_state(self, session_id: str) -> Optional[GameStateRecord]:
        await self.require_session(session_id)
        return await self.store.get_game_state(session_id)
