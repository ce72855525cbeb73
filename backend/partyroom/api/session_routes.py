"""
Session API routes
"""

import logging
from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import List, Optional
import httpx
from partyroom.core.database import get_db
from partyroom.core.errors import DatastoreError, LobbyError
from partyroom.core.utils import get_join_url, get_qr_code_url
from partyroom.services.session_service import SessionService
from partyroom.services.lobby_service import LobbyService
from partyroom.services.network_service import NetworkService
from partyroom.schemas.session_schemas import (
    JoinLinks,
    PlayerRecord,
    PublicSession,
    SessionCreate,
    SessionCreated,
    SessionRecord,
    SessionSettingsUpdate,
)
from partyroom.schemas.game_schemas import GameSelect, GameStateRecord

logger = logging.getLogger(__name__)

router = APIRouter()

def get_network_service() -> NetworkService:
    return NetworkService()

def raise_http(e: Exception):
    """Turn a service error into an HTTP error"""
    if isinstance(e, LobbyError):
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    if isinstance(e, DatastoreError):
        raise HTTPException(status_code=500, detail={"code": "datastore_error", "message": DatastoreError.message})
    raise e

@router.post("", response_model=SessionCreated)
async def create_session(
    data: SessionCreate,
    db: Session = Depends(get_db)
):
    """Create a session; the response carries the host capability"""
    service = SessionService(db)
    try:
        session, credentials = await service.create_session(data.language)
    except DatastoreError as e:
        raise_http(e)
    return SessionCreated(
        session=session,
        credentials=credentials,
        join_url=get_join_url(session.room_code),
        qr_url=get_qr_code_url(session.room_code)
    )

@router.get("/code/{room_code}", response_model=PublicSession)
async def get_session_by_code(
    room_code: str,
    db: Session = Depends(get_db)
):
    """Look up a session by its room code"""
    service = SessionService(db)
    try:
        session = await service.get_session_by_code(room_code)
    except DatastoreError as e:
        raise_http(e)
    if not session:
        raise HTTPException(status_code=404, detail={"code": "invalid_code", "message": "Invalid room code"})
    return session

@router.get("/{session_id}", response_model=PublicSession)
async def get_session(
    session_id: str,
    db: Session = Depends(get_db)
):
    service = SessionService(db)
    try:
        return await service.require_session(session_id)
    except (LobbyError, DatastoreError) as e:
        raise_http(e)

@router.get("/{session_id}/links", response_model=JoinLinks)
async def get_links(
    session_id: str,
    db: Session = Depends(get_db)
):
    """Join URL and QR image URL for the lobby screen"""
    service = SessionService(db)
    try:
        return await service.get_links(session_id)
    except (LobbyError, DatastoreError) as e:
        raise_http(e)

@router.get("/{session_id}/qr")
async def get_qr_image(
    session_id: str,
    db: Session = Depends(get_db),
    network: NetworkService = Depends(get_network_service)
):
    """Proxy the QR image so the TV does not talk to the image service directly"""
    service = SessionService(db)
    try:
        session = await service.require_session(session_id)
    except (LobbyError, DatastoreError) as e:
        raise_http(e)
    try:
        content, content_type = await network.fetch_qr_image(session.room_code)
    except httpx.HTTPError as e:
        logger.error(f"❌ QR image fetch failed: {e}")
        raise HTTPException(status_code=502, detail={"code": "qr_unavailable", "message": "QR code unavailable"})
    return Response(content=content, media_type=content_type)

@router.patch("/{session_id}/settings", response_model=SessionRecord)
async def update_settings(
    session_id: str,
    update: SessionSettingsUpdate,
    x_host_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_db)
):
    """Save the host settings panel"""
    service = SessionService(db)
    try:
        return await service.update_settings(session_id, update, x_host_id)
    except (LobbyError, DatastoreError) as e:
        raise_http(e)

@router.post("/{session_id}/start", response_model=SessionRecord)
async def start_game(
    session_id: str,
    x_host_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_db)
):
    """Leave the lobby and show the tutorial"""
    service = SessionService(db)
    try:
        return await service.start_game(session_id, x_host_id)
    except (LobbyError, DatastoreError) as e:
        raise_http(e)

@router.post("/{session_id}/tutorial/complete", response_model=SessionRecord)
async def complete_tutorial(
    session_id: str,
    x_host_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_db)
):
    service = SessionService(db)
    try:
        return await service.complete_tutorial(session_id, x_host_id)
    except (LobbyError, DatastoreError) as e:
        raise_http(e)

@router.post("/{session_id}/game", response_model=GameStateRecord)
async def select_game(
    session_id: str,
    selection: GameSelect,
    x_host_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_db)
):
    """Pick the game to play; creates round 1"""
    service = SessionService(db)
    try:
        _, state = await service.select_game(session_id, selection.game, x_host_id)
        return state
    except (LobbyError, DatastoreError) as e:
        raise_http(e)

@router.post("/{session_id}/end", response_model=SessionRecord)
async def end_session(
    session_id: str,
    x_host_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_db)
):
    service = SessionService(db)
    try:
        return await service.end_session(session_id, x_host_id)
    except (LobbyError, DatastoreError) as e:
        raise_http(e)

@router.get("/{session_id}/players", response_model=List[PlayerRecord])
async def list_players(
    session_id: str,
    status: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Players in join order"""
    service = LobbyService(db)
    try:
        return await service.list_players(session_id, status=status)
    except DatastoreError as e:
        raise_http(e)

@router.get("/{session_id}/game-state", response_model=GameStateRecord)
async def get_game_state(
    session_id: str,
    db: Session = Depends(get_db)
):
    service = SessionService(db)
    try:
        state = await service.get_game_state(session_id)
    except (LobbyError, DatastoreError) as e:
        raise_http(e)
    if not state:
        raise HTTPException(status_code=404, detail={"code": "no_game", "message": "No game selected"})
    return state
