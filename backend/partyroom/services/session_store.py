"""
Persistence client for sessions, players, game state and telemetry
"""

import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from partyroom.core.errors import DatastoreError
from partyroom.core.utils import utcnow
from partyroom.models.session import GameSession
from partyroom.models.player import Player
from partyroom.models.game_state import GameState
from partyroom.models.telemetry import TelemetryEvent
from partyroom.schemas.session_schemas import SessionRecord, PlayerRecord
from partyroom.schemas.game_schemas import GameStateRecord
from partyroom.schemas.realtime_schemas import SessionChange, PlayerChange
from partyroom.services.realtime_service import ChangeFeed, get_change_feed

logger = logging.getLogger(__name__)

class SessionStore:
    """Row-level reads and writes; every committed session/player write is published"""

    def __init__(self, db: Session, feed: Optional[ChangeFeed] = None):
        self.db = db
        self.feed = feed or get_change_feed()

    def _commit(self, action: str):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ {action} failed: {e}")
            raise DatastoreError(f"{action} failed") from e

    def _query(self, action: str, run):
        try:
            return run()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ {action} failed: {e}")
            raise DatastoreError(f"{action} failed") from e

    # Sessions

    async def create_session(self, **fields) -> SessionRecord:
        session = GameSession(**fields)
        self.db.add(session)
        self._commit("Insert session")
        self.db.refresh(session)
        record = SessionRecord.model_validate(session)
        self.feed.publish(SessionChange(event_type="INSERT", new=record))
        return record

    async def get_session(self, session_id: str) -> Optional[SessionRecord]:
        session = self._query(
            "Select session",
            lambda: self.db.query(GameSession).filter(GameSession.id == session_id).first()
        )
        return SessionRecord.model_validate(session) if session else None

    async def get_session_by_code(self, room_code: str) -> Optional[SessionRecord]:
        """Most recent session using this room code"""
        session = self._query(
            "Select session by code",
            lambda: self.db.query(GameSession)
            .filter(GameSession.room_code == room_code)
            .order_by(GameSession.created_at.desc())
            .first()
        )
        return SessionRecord.model_validate(session) if session else None

    async def update_session(self, session_id: str, **fields) -> Optional[SessionRecord]:
        session = self._query(
            "Select session",
            lambda: self.db.query(GameSession).filter(GameSession.id == session_id).first()
        )
        if not session:
            return None
        old = SessionRecord.model_validate(session)
        for key, value in fields.items():
            setattr(session, key, value)
        self._commit("Update session")
        self.db.refresh(session)
        record = SessionRecord.model_validate(session)
        self.feed.publish(SessionChange(event_type="UPDATE", new=record, old=old))
        return record

    # Players

    async def list_players(self, session_id: str, status: Optional[str] = None,
                           order_by: str = "joined_at") -> List[PlayerRecord]:
        def run():
            query = self.db.query(Player).filter(Player.session_id == session_id)
            if status:
                query = query.filter(Player.status == status)
            if order_by == "score":
                query = query.order_by(Player.score.desc(), Player.joined_at)
            else:
                query = query.order_by(Player.joined_at)
            return query.all()

        return [PlayerRecord.model_validate(p) for p in self._query("Select players", run)]

    async def count_players(self, session_id: str, status: Optional[str] = None) -> int:
        def run():
            query = self.db.query(func.count(Player.id)).filter(Player.session_id == session_id)
            if status:
                query = query.filter(Player.status == status)
            return query.scalar()

        return self._query("Count players", run) or 0

    async def get_player(self, player_db_id: str) -> Optional[PlayerRecord]:
        player = self._query(
            "Select player",
            lambda: self.db.query(Player).filter(Player.id == player_db_id).first()
        )
        return PlayerRecord.model_validate(player) if player else None

    async def insert_player(self, **fields) -> PlayerRecord:
        player = Player(**fields)
        self.db.add(player)
        self._commit("Insert player")
        self.db.refresh(player)
        record = PlayerRecord.model_validate(player)
        self.feed.publish(PlayerChange(event_type="INSERT", new=record))
        return record

    async def update_player(self, player_db_id: str, **fields) -> Optional[PlayerRecord]:
        player = self._query(
            "Select player",
            lambda: self.db.query(Player).filter(Player.id == player_db_id).first()
        )
        if not player:
            return None
        old = PlayerRecord.model_validate(player)
        for key, value in fields.items():
            setattr(player, key, value)
        self._commit("Update player")
        self.db.refresh(player)
        record = PlayerRecord.model_validate(player)
        self.feed.publish(PlayerChange(event_type="UPDATE", new=record, old=old))
        return record

    # Game state

    async def insert_game_state(self, session_id: str, round: int, phase: str,
                                data: Dict[str, Any]) -> GameStateRecord:
        state = GameState(session_id=session_id, round=round, phase=phase, data=data)
        self.db.add(state)
        self._commit("Insert game state")
        self.db.refresh(state)
        return GameStateRecord.model_validate(state)

    async def get_game_state(self, session_id: str) -> Optional[GameStateRecord]:
        """Latest game state row for a session"""
        state = self._query(
            "Select game state",
            lambda: self.db.query(GameState)
            .filter(GameState.session_id == session_id)
            .order_by(GameState.updated_at.desc())
            .first()
        )
        return GameStateRecord.model_validate(state) if state else None

    async def update_game_state(self, state_id: str, **fields) -> Optional[GameStateRecord]:
        state = self._query(
            "Select game state",
            lambda: self.db.query(GameState).filter(GameState.id == state_id).first()
        )
        if not state:
            return None
        for key, value in fields.items():
            setattr(state, key, value)
        state.updated_at = utcnow()
        self._commit("Update game state")
        self.db.refresh(state)
        return GameStateRecord.model_validate(state)

    # Telemetry

    async def log_event(self, event_type: str, session_id: Optional[str] = None,
                        metadata: Optional[Dict[str, Any]] = None):
        """Append a telemetry event; failures are logged, never raised"""
        event = TelemetryEvent(
            session_id=session_id,
            event_type=event_type,
            event_metadata=metadata or {}
        )
        self.db.add(event)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Telemetry event {event_type} dropped: {e}")

    async def count_events(self, event_type: Optional[str] = None,
                           session_id: Optional[str] = None) -> int:
        def run():
            query = self.db.query(func.count(TelemetryEvent.id))
            if event_type:
                query = query.filter(TelemetryEvent.event_type == event_type)
            if session_id:
                query = query.filter(TelemetryEvent.session_id == session_id)
            return query.scalar()

        return self._query("Count telemetry", run) or 0
