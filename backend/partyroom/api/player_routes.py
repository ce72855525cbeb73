"""
Player API routes
"""

from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session
from typing import Optional
from partyroom.core.database import get_db
from partyroom.core.errors import DatastoreError, LobbyError
from partyroom.services.lobby_service import LobbyService
from partyroom.schemas.session_schemas import PlayerJoin, PlayerJoined, PlayerRecord
from partyroom.api.session_routes import raise_http

router = APIRouter()

@router.post("/join", response_model=PlayerJoined)
async def join_session(
    data: PlayerJoin,
    db: Session = Depends(get_db)
):
    """Join a lobby by room code"""
    service = LobbyService(db)
    try:
        player, credentials = await service.join(data.room_code, data.nickname)
    except (LobbyError, DatastoreError) as e:
        raise_http(e)
    return PlayerJoined(player=player, credentials=credentials)

@router.post("/{player_db_id}/heartbeat", response_model=PlayerRecord)
async def heartbeat(
    player_db_id: str,
    db: Session = Depends(get_db)
):
    service = LobbyService(db)
    try:
        return await service.heartbeat(player_db_id)
    except (LobbyError, DatastoreError) as e:
        raise_http(e)

@router.post("/{player_db_id}/kick", response_model=PlayerRecord)
async def kick_player(
    player_db_id: str,
    x_host_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_db)
):
    """Remove a player from the lobby"""
    service = LobbyService(db)
    try:
        return await service.kick_player(player_db_id, x_host_id)
    except (LobbyError, DatastoreError) as e:
        raise_http(e)

@router.post("/{player_db_id}/leave", response_model=PlayerRecord)
async def leave_lobby(
    player_db_id: str,
    db: Session = Depends(get_db)
):
    """Player closed the lobby screen"""
    service = LobbyService(db)
    try:
        return await service.leave(player_db_id)
    except (LobbyError, DatastoreError) as e:
        raise_http(e)
