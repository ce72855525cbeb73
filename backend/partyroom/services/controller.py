"""
Session/lobby controller

Drives what a device shows from the persisted session status and the
capability it holds. The datastore is the only source of truth: local
state is a projection refreshed by re-fetching or by change events, and
nothing is merged back optimistically.
"""

import asyncio
import enum
import logging
from typing import Dict, List, Optional, Tuple
from partyroom.core.errors import DatastoreError, LobbyError
from partyroom.core.utils import is_expired, parse_join_path
from partyroom.schemas.session_schemas import DeviceCredentials, PlayerRecord, SessionRecord
from partyroom.schemas.realtime_schemas import SessionChange, PlayerChange
from partyroom.services.lobby_service import LobbyService
from partyroom.services.liveness_service import Heartbeat
from partyroom.services.name_game_service import NameGame, get_game_module
from partyroom.services.realtime_service import ChangeFeed, Subscription, get_change_feed
from partyroom.services.session_service import SessionService

logger = logging.getLogger(__name__)


class ViewMode(str, enum.Enum):
    HOME = "home"
    HOST_LOBBY = "host-lobby"
    PLAYER_JOIN = "player-join"
    PLAYER_LOBBY = "player-lobby"
    GAME_SELECT = "game-select"
    WAITING = "waiting"
    PLAYING = "playing"
    REMOVED = "removed"


def resolve_view(session: Optional[SessionRecord], is_host: bool) -> Tuple[ViewMode, bool]:
    """Map a session row to (view, tutorial overlay shown)"""
    if session is None or session.status == "ended" or is_expired(session.expires_at):
        return ViewMode.HOME, False
    lobby = ViewMode.HOST_LOBBY if is_host else ViewMode.PLAYER_LOBBY
    if session.status == "lobby":
        return lobby, False
    if session.status == "tutorial":
        return lobby, True
    if session.current_game:
        return ViewMode.PLAYING, False
    # Only the host picks a game; players wait until one is chosen
    return (ViewMode.GAME_SELECT if is_host else ViewMode.WAITING), False


class LobbyController:
    """One device's view of a session"""

    def __init__(self, credentials: Optional[DeviceCredentials],
                 session_service: SessionService, lobby_service: LobbyService,
                 feed: Optional[ChangeFeed] = None, heartbeat_interval: Optional[float] = None,
                 tick_interval: float = 1.0):
        self.credentials = credentials or DeviceCredentials()
        self.sessions = session_service
        self.lobby = lobby_service
        self.feed = feed or get_change_feed()
        self.heartbeat_interval = heartbeat_interval
        self.tick_interval = tick_interval

        self.view = ViewMode.HOME
        self.tutorial = False
        self.room_code: Optional[str] = None
        self.session: Optional[SessionRecord] = None
        self.players: Dict[str, PlayerRecord] = {}
        self.game: Optional[NameGame] = None
        self.error: Optional[str] = None

        self.mounted = True
        self.heartbeat: Optional[Heartbeat] = None
        self.subscriptions: List[Subscription] = []
        self._tasks: List[asyncio.Task] = []

    @property
    def is_host(self) -> bool:
        return self.credentials.has_host

    @property
    def session_id(self) -> Optional[str]:
        return self.session.id if self.session else self.credentials.session_id

    @property
    def me(self) -> Optional[PlayerRecord]:
        if not self.credentials.player_db_id:
            return None
        return self.players.get(self.credentials.player_db_id)

    def connected_players(self) -> List[PlayerRecord]:
        players = [p for p in self.players.values() if p.status == "connected"]
        return sorted(players, key=lambda p: p.joined_at)

    # Startup

    async def resume(self, path: Optional[str] = None) -> ViewMode:
        """Resolve the first view before anything renders"""
        code = parse_join_path(path) if path else None
        if code:
            self.room_code = code
            self.view = ViewMode.PLAYER_JOIN
            return self.view

        if self.credentials.has_host:
            session = await self.sessions.get_session(self.credentials.session_id)
            if not self.mounted:
                return self.view
            if session is None:
                logger.info(f"Stored session {self.credentials.session_id} is gone, back to home")
                self.view, self.tutorial = ViewMode.HOME, False
                return self.view
            await self._load(session)
            return self.view

        if self.credentials.has_player:
            player = await self.lobby.resume_player(self.credentials)
            session = await self.sessions.get_session(self.credentials.session_id) if player else None
            if not self.mounted:
                return self.view
            if player is None or session is None:
                self.view, self.tutorial = ViewMode.HOME, False
                return self.view
            self.players[player.id] = player
            if player.status == "kicked":
                self.session = session
                self._removed()
                return self.view
            await self._load(session)
            if self.view != ViewMode.HOME:
                self._start_heartbeat()
            return self.view

        self.view = ViewMode.HOME
        return self.view

    def open_join(self, path: str) -> bool:
        code = parse_join_path(path)
        if not code:
            return False
        self.room_code = code
        self.view = ViewMode.PLAYER_JOIN
        return True

    async def _load(self, session: SessionRecord):
        if self.subscriptions and self.subscriptions[0].session_id != session.id:
            self._stop_feed()
        self.session = session
        self.room_code = session.room_code
        await self.refresh_players()
        await self._enter(session)
        if self.view == ViewMode.HOME:
            self._stop_feed()
        else:
            self.start()

    async def refresh_players(self):
        if not self.session_id:
            return
        players = await self.lobby.list_players(self.session_id)
        if not self.mounted:
            return
        self.players = {p.id: p for p in players}
        if self.game:
            self.game.update_players(self.players.values())

    async def _enter(self, session: SessionRecord):
        view, tutorial = resolve_view(session, self.is_host)
        if view == ViewMode.PLAYING and (self.game is None or self.game.session.current_game != session.current_game):
            module = get_game_module(session.current_game)
            if module is not None:
                state = await self.sessions.get_game_state(session.id)
                if not self.mounted:
                    return
                self._set_game(module(session, is_host=self.is_host, state=state, tick_interval=self.tick_interval))
                self.game.update_players(self.players.values())
            else:
                self._set_game(None)
        elif view != ViewMode.PLAYING:
            self._set_game(None)
        self.view, self.tutorial = view, tutorial

    def _set_game(self, game: Optional[NameGame]):
        """Swap the mounted game module; its round countdown runs while mounted"""
        if self.game is not None and self.game is not game:
            self.game.timer.stop()
        self.game = game
        if game is not None:
            game.timer.start()

    # Change feed

    def start(self):
        """Subscribe to the session and player channels and consume them"""
        if self.subscriptions or not self.session_id:
            return
        self.subscriptions = [
            self.feed.subscribe("sessions", self.session_id),
            self.feed.subscribe("players", self.session_id),
        ]
        self._tasks = [asyncio.create_task(self._consume(s)) for s in self.subscriptions]

    async def _consume(self, subscription: Subscription):
        async for event in subscription:
            if not self.mounted:
                break
            try:
                await self.apply(event)
            except (DatastoreError, LobbyError) as e:
                logger.warning(f"⚠️ Could not apply {event.table} change: {e}")

    async def apply(self, event) -> ViewMode:
        """Reconcile the projection with one change event"""
        if not self.mounted or self.view == ViewMode.REMOVED:
            return self.view
        if isinstance(event, SessionChange):
            if event.new is None or event.new.id != self.session_id:
                return self.view
            self.session = event.new
            await self._enter(event.new)
        elif isinstance(event, PlayerChange):
            if event.new is None or event.new.session_id != self.session_id:
                return self.view
            self.players[event.new.id] = event.new
            if event.new.id == self.credentials.player_db_id and event.new.status == "kicked":
                self._removed()
                return self.view
            if self.game:
                self.game.update_players(self.players.values())
        return self.view

    def _removed(self):
        self.view, self.tutorial = ViewMode.REMOVED, False
        self._set_game(None)
        self._stop_heartbeat()
        self._stop_feed()

    # Player device

    def _start_heartbeat(self):
        if (self.heartbeat and not self.heartbeat.stopped) or not self.credentials.player_db_id:
            return
        player_db_id = self.credentials.player_db_id
        self.heartbeat = Heartbeat(lambda: self.lobby.heartbeat(player_db_id), self.heartbeat_interval)
        self.heartbeat.start()

    def _stop_heartbeat(self):
        if self.heartbeat:
            self.heartbeat.stop()

    async def join(self, nickname: str, room_code: Optional[str] = None) -> Optional[DeviceCredentials]:
        """Join from the join screen; failures stay on the join screen with an error"""
        self.error = None
        try:
            player, credentials = await self.lobby.join(room_code or self.room_code or "", nickname)
        except LobbyError as e:
            self.error = e.code
            return None
        except DatastoreError as e:
            logger.error(f"❌ Failed to join: {e}")
            self.error = "join_failed"
            return None
        if not self.mounted:
            return None
        # A device holds one capability at a time
        self._stop_heartbeat()
        self.heartbeat = None
        self.credentials = DeviceCredentials.for_player(credentials)
        self.players[player.id] = player
        session = await self.sessions.get_session(credentials.session_id)
        if not self.mounted or session is None:
            return self.credentials
        await self._load(session)
        self._start_heartbeat()
        return self.credentials

    # Host device

    async def create_session(self, language: Optional[str] = None) -> Optional[DeviceCredentials]:
        self.error = None
        try:
            session, credentials = await self.sessions.create_session(language)
        except DatastoreError as e:
            logger.error(f"❌ Failed to create session: {e}")
            self.error = "create_failed"
            return None
        if not self.mounted:
            return None
        self._stop_heartbeat()
        self.credentials = DeviceCredentials.for_host(credentials)
        await self._load(session)
        return self.credentials

    async def _host_action(self, action) -> bool:
        self.error = None
        try:
            result = await action
        except LobbyError as e:
            self.error = e.code
            return False
        except DatastoreError as e:
            logger.error(f"❌ Host action failed: {e}")
            self.error = "action_failed"
            return False
        if self.mounted and isinstance(result, SessionRecord):
            self.session = result
        return True

    async def start_game(self) -> bool:
        return await self._host_action(self.sessions.start_game(self.session_id, self.credentials.host_id))

    async def complete_tutorial(self) -> bool:
        """Tutorial done: the host writes status=playing; players just close the overlay"""
        self.tutorial = False
        if not self.is_host or not self.session_id:
            return False
        ok = await self._host_action(self.sessions.complete_tutorial(self.session_id, self.credentials.host_id))
        if ok and self.mounted:
            await self._enter(self.session)
        return ok

    async def skip_tutorial(self) -> bool:
        return await self.complete_tutorial()

    async def select_game(self, game: str) -> bool:
        if not self.is_host:
            return False
        self.error = None
        try:
            session, _ = await self.sessions.select_game(self.session_id, game, self.credentials.host_id)
        except LobbyError as e:
            self.error = e.code
            return False
        except DatastoreError as e:
            logger.error(f"❌ Failed to select game: {e}")
            self.error = "action_failed"
            return False
        if self.mounted:
            self.session = session
            await self._enter(session)
        return True

    async def kick(self, player_db_id: str) -> bool:
        return await self._host_action(self.lobby.kick_player(player_db_id, self.credentials.host_id))

    # Teardown

    def _stop_feed(self):
        """Drop the current channels so a later session can subscribe afresh"""
        current = asyncio.current_task()
        for subscription in self.subscriptions:
            subscription.unsubscribe()
        for task in self._tasks:
            if task is not current and not task.done():
                task.cancel()
        self.subscriptions = []
        self._tasks = []

    def close(self):
        """Stop listening; anything still in flight is ignored when it lands"""
        self.mounted = False
        self._stop_heartbeat()
        self._set_game(None)
        self._stop_feed()
