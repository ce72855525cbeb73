"""
WebSocket connection manager
"""

import json
import logging
from fastapi import WebSocket
from typing import Dict, List

logger = logging.getLogger(__name__)

class WebSocketManager:
    """Tracks the sockets listening to each session"""

    def __init__(self):
        # session id -> connected sockets
        self.session_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, session_id: str):
        """Accept a socket for a session"""
        await websocket.accept()
        connections = self.session_connections.setdefault(session_id, [])
        # Ignore duplicate registrations
        if websocket not in connections:
            connections.append(websocket)
            logger.info(f"New connection on session {session_id}, {len(connections)} open")

    def disconnect(self, websocket: WebSocket, session_id: str):
        connections = self.session_connections.get(session_id)
        if connections and websocket in connections:
            connections.remove(websocket)
            logger.info(f"Connection closed on session {session_id}, {len(connections)} open")
            if not connections:
                del self.session_connections[session_id]

    def connection_count(self, session_id: str) -> int:
        return len(self.session_connections.get(session_id, []))

    async def send_personal_message(self, message: dict, websocket: WebSocket) -> bool:
        """Send to one socket; returns False if the socket is gone"""
        try:
            await websocket.send_text(json.dumps(message, ensure_ascii=False))
            return True
        except (RuntimeError, OSError) as e:
            logger.warning(f"⚠️ Failed to send message: {e}")
            return False

    async def broadcast_to_session(self, message: dict, session_id: str):
        """Send to every socket on a session, dropping the ones that fail"""
        connections = list(self.session_connections.get(session_id, []))
        if not connections:
            return

        message_text = json.dumps(message, ensure_ascii=False)
        failed_connections = []
        for connection in connections:
            try:
                await connection.send_text(message_text)
            except (RuntimeError, OSError) as e:
                logger.warning(f"⚠️ Broadcast failed: {e}")
                failed_connections.append(connection)

        for failed_connection in failed_connections:
            self.disconnect(failed_connection, session_id)

        logger.debug(f"📡 {message.get('type', 'unknown')} sent to {len(connections) - len(failed_connections)} sockets on {session_id}")
