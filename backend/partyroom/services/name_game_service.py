"""
Naming game module

Display scaffold only: a local round countdown and a scoreboard. The
round deadline is not persisted, so each screen counts down on its own.
"""

import asyncio
from typing import Dict, Iterable, List, Optional, Type
from partyroom.core.config import settings
from partyroom.core.utils import format_time
from partyroom.schemas.session_schemas import PlayerRecord, SessionRecord
from partyroom.schemas.game_schemas import GameStateRecord, NameGameData, NAME_GAME_LETTERS


class RoundTimer:
    """Client-side countdown, one tick per second"""

    def __init__(self, seconds: Optional[int] = None, interval: float = 1.0):
        self.seconds = settings.NAME_GAME_ROUND_SECONDS if seconds is None else seconds
        self.interval = interval
        self.remaining = self.seconds
        self._task: Optional[asyncio.Task] = None

    def tick(self, steps: int = 1) -> int:
        self.remaining = max(self.remaining - steps, 0)
        return self.remaining

    @property
    def expired(self) -> bool:
        return self.remaining == 0

    @property
    def display(self) -> str:
        return format_time(self.remaining)

    def reset(self):
        self.remaining = self.seconds

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        """Count down in the background until zero or stop()"""
        if self.running or self.expired:
            return
        self._task = asyncio.create_task(self._loop())

    async def _loop(self):
        while not self.expired:
            await asyncio.sleep(self.interval)
            self.tick()

    def stop(self):
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None


def scoreboard(players: Iterable[PlayerRecord]) -> List[PlayerRecord]:
    """Connected players, highest score first"""
    connected = [p for p in players if p.status == "connected"]
    return sorted(connected, key=lambda p: p.score, reverse=True)


class NameGame:
    """View model for the naming round on the TV and on phones"""

    game = "name_game"

    def __init__(self, session: SessionRecord, is_host: bool = False,
                 state: Optional[GameStateRecord] = None, tick_interval: float = 1.0):
        self.session = session
        self.is_host = is_host
        data = state.data if state and isinstance(state.data, NameGameData) else None
        self.round = state.round if state else 1
        self.letter = data.letter if data else NAME_GAME_LETTERS.get(session.language, "A")
        self.timer = RoundTimer(data.round_seconds if data else None, tick_interval)
        self.players: List[PlayerRecord] = []

    def update_players(self, players: Iterable[PlayerRecord]) -> List[PlayerRecord]:
        self.players = scoreboard(players)
        return self.players

    @property
    def leader(self) -> Optional[PlayerRecord]:
        return self.players[0] if self.players else None

    def snapshot(self) -> dict:
        return {
            "game": self.game,
            "round": self.round,
            "letter": self.letter,
            "time_left": self.timer.display,
            "is_host": self.is_host,
            "scoreboard": [
                {"nickname": p.nickname, "avatar_emoji": p.avatar_emoji, "score": p.score}
                for p in self.players
            ],
        }


# Games with a playable module; song_guess and spy can be picked but have none yet
GAME_MODULES: Dict[str, Type[NameGame]] = {
    "name_game": NameGame,
}


def get_game_module(game: Optional[str]) -> Optional[Type[NameGame]]:
    return GAME_MODULES.get(game) if game else None
