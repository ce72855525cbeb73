"""
WebSocket routes: the change feed for remote devices
"""

import asyncio
import json
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from partyroom.services.realtime_service import Subscription, get_change_feed
from partyroom.services.websocket_service import WebSocketManager

logger = logging.getLogger(__name__)

router = APIRouter()

# Process-wide connection manager
_manager = None

def get_websocket_manager():
    """Return the process-wide WebSocket manager"""
    global _manager
    if _manager is None:
        _manager = WebSocketManager()
    return _manager

async def _forward(subscription: Subscription, websocket: WebSocket, manager: WebSocketManager):
    async for event in subscription:
        sent = await manager.send_personal_message(
            {"type": "change", "event": event.model_dump(mode="json")},
            websocket
        )
        if not sent:
            break

@router.websocket("/session/{session_id}")
async def websocket_session_endpoint(websocket: WebSocket, session_id: str):
    """Stream session and player changes for one session"""
    manager = get_websocket_manager()
    feed = get_change_feed()
    await manager.connect(websocket, session_id)

    subscriptions = [
        feed.subscribe("sessions", session_id),
        feed.subscribe("players", session_id),
    ]
    forwarders = [asyncio.create_task(_forward(s, websocket, manager)) for s in subscriptions]

    try:
        await manager.send_personal_message({
            "type": "connected",
            "session_id": session_id,
            "channels": [s.table for s in subscriptions]
        }, websocket)
        await manager.broadcast_to_session({"type": "device_joined", "session_id": session_id}, session_id)

        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning(f"Ignoring invalid JSON on session {session_id}")
                continue

            if message.get("type") == "ping":
                await manager.send_personal_message({
                    "type": "pong",
                    "timestamp": message.get("timestamp")
                }, websocket)

    except WebSocketDisconnect:
        logger.info(f"Socket left session {session_id}")
    finally:
        for subscription in subscriptions:
            subscription.unsubscribe()
        for task in forwarders:
            task.cancel()
        manager.disconnect(websocket, session_id)
        await manager.broadcast_to_session({"type": "device_left", "session_id": session_id}, session_id)
