"""
In-process change feed

Every committed write on the sessions and players collections is
published here. Subscribers listen on one channel per (table, session id)
and receive events in publish order. Two channels are independent: a
player change and a session change caused by the same host action may
arrive in either order.
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union
from partyroom.schemas.realtime_schemas import SessionChange, PlayerChange

logger = logging.getLogger(__name__)

Change = Union[SessionChange, PlayerChange]
ChannelKey = Tuple[str, str]

_CLOSED = object()

def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None

class Subscription:
    """An async stream of change events for one channel"""

    def __init__(self, feed: "ChangeFeed", table: str, session_id: str,
                 events: Optional[Iterable[str]] = None):
        self.feed = feed
        self.table = table
        self.session_id = session_id
        self.events: Optional[Set[str]] = set(events) if events else None
        self.closed = False
        self._queue: asyncio.Queue = asyncio.Queue()
        self._loop = _running_loop()

    @property
    def key(self) -> ChannelKey:
        return (self.table, self.session_id)

    def matches(self, event: Change) -> bool:
        return self.events is None or event.event_type in self.events

    def deliver(self, event: Change):
        if self.closed:
            return
        # Writes may commit on another thread's loop than the one listening
        if self._loop is not None and _running_loop() is not self._loop:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, event)
        else:
            self._queue.put_nowait(event)

    def pending(self) -> int:
        return self._queue.qsize()

    def unsubscribe(self):
        """Stop the stream; events already queued are dropped"""
        if self.closed:
            return
        self.closed = True
        self.feed._remove(self)
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self):
        return self

    async def __anext__(self) -> Change:
        if self.closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED or self.closed:
            raise StopAsyncIteration
        return item

class ChangeFeed:
    """Fan-out of committed changes to channel subscribers"""

    def __init__(self):
        self.channels: Dict[ChannelKey, List[Subscription]] = {}

    def subscribe(self, table: str, session_id: str,
                  events: Optional[Iterable[str]] = None) -> Subscription:
        if table not in ("sessions", "players"):
            raise ValueError(f"Unknown table: {table}")
        subscription = Subscription(self, table, session_id, events)
        self.channels.setdefault(subscription.key, []).append(subscription)
        logger.debug(f"Subscribed to {table}:{session_id}, {len(self.channels[subscription.key])} listeners")
        return subscription

    def _remove(self, subscription: Subscription):
        listeners = self.channels.get(subscription.key)
        if not listeners:
            return
        if subscription in listeners:
            listeners.remove(subscription)
        if not listeners:
            del self.channels[subscription.key]

    def publish(self, event: Change) -> int:
        """Deliver an event to every matching subscriber; returns how many got it"""
        listeners = list(self.channels.get((event.table, event.session_id), []))
        delivered = 0
        for subscription in listeners:
            if subscription.matches(event):
                subscription.deliver(event)
                delivered += 1
        logger.debug(f"📡 {event.table} {event.event_type} for {event.session_id} -> {delivered} listeners")
        return delivered

    def listener_count(self, table: str, session_id: str) -> int:
        return len(self.channels.get((table, session_id), []))

# Process-wide feed
_feed: Optional[ChangeFeed] = None

def get_change_feed() -> ChangeFeed:
    """Return the process-wide change feed"""
    global _feed
    if _feed is None:
        _feed = ChangeFeed()
    return _feed
