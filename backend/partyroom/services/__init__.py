# Business logic services
from .session_store import SessionStore
from .session_service import SessionService
from .lobby_service import LobbyService
from .realtime_service import ChangeFeed, get_change_feed
from .controller import LobbyController, ViewMode
from .websocket_service import WebSocketManager

__all__ = [
    "SessionStore",
    "SessionService",
    "LobbyService",
    "ChangeFeed",
    "get_change_feed",
    "LobbyController",
    "ViewMode",
    "WebSocketManager",
]
