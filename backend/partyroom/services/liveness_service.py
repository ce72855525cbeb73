"""
Periodic liveness heartbeat for player devices
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional
from partyroom.core.config import settings
from partyroom.core.errors import DatastoreError, LobbyError

logger = logging.getLogger(__name__)

class Heartbeat:
    """Calls a last_seen write every interval until stopped"""

    def __init__(self, beat: Callable[[], Awaitable[object]], interval: Optional[float] = None):
        self.beat = beat
        self.interval = settings.HEARTBEAT_INTERVAL if interval is None else interval
        self.stopped = False
        self.beats = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done() and not self.stopped

    def start(self):
        if self.stopped or self._task is not None:
            return
        self._task = asyncio.create_task(self._loop())

    async def tick(self) -> bool:
        """One write; returns False once stopped"""
        if self.stopped:
            return False
        await self.beat()
        self.beats += 1
        return True

    async def _loop(self):
        while not self.stopped:
            await asyncio.sleep(self.interval)
            if self.stopped:
                break
            try:
                await self.tick()
            except LobbyError as e:
                # Kicked or deleted; nothing left to keep alive
                logger.info(f"Heartbeat stopped: {e}")
                self.stopped = True
            except DatastoreError as e:
                logger.warning(f"⚠️ Heartbeat write failed: {e}")

    def stop(self):
        """Terminal; no writes happen after this"""
        self.stopped = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
