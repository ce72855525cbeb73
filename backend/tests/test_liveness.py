"""
Heartbeat loop
"""

import asyncio

from partyroom.core.errors import PlayerKickedError
from partyroom.services.liveness_service import Heartbeat


async def test_heartbeat_writes_on_interval():
    calls = []

    async def beat():
        calls.append(1)

    heartbeat = Heartbeat(beat, interval=0.01)
    heartbeat.start()
    await asyncio.sleep(0.1)
    heartbeat.stop()
    count = len(calls)
    assert count >= 2

    await asyncio.sleep(0.05)
    assert len(calls) == count
    assert await heartbeat.tick() is False


async def test_heartbeat_stops_when_player_kicked():
    async def beat():
        raise PlayerKickedError()

    heartbeat = Heartbeat(beat, interval=0.01)
    heartbeat.start()
    await asyncio.sleep(0.05)
    assert heartbeat.stopped
    assert not heartbeat.running


async def test_stopped_heartbeat_never_starts():
    heartbeat = Heartbeat(lambda: None, interval=0.01)
    heartbeat.stop()
    heartbeat.start()
    assert not heartbeat.running
