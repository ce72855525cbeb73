"""
API routers
"""

from fastapi import APIRouter
from .session_routes import router as session_router
from .player_routes import router as player_router
from .network_routes import router as network_router
from .websocket_routes import router as ws_router

# Main router
api_router = APIRouter()

# Feature routers
api_router.include_router(session_router, prefix="/sessions", tags=["Sessions"])
api_router.include_router(player_router, prefix="/players", tags=["Players"])
api_router.include_router(network_router, prefix="/network", tags=["Network"])
api_router.include_router(ws_router, prefix="/ws", tags=["WebSocket"])
