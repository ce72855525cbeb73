"""
Join admission, heartbeat and kick
"""

from datetime import timedelta

import pytest

from partyroom.core.errors import (
    EmptyNicknameError,
    GameAlreadyStartedError,
    InvalidRoomCodeError,
    PlayerKickedError,
    RoomFullError,
)
from partyroom.core.utils import utcnow
from partyroom.schemas.session_schemas import DeviceCredentials, SessionSettingsUpdate


async def test_join_inserts_connected_player(lobby, lobby_service, store):
    session, _ = await lobby()
    player, credentials = await lobby_service.join(session.room_code.lower(), "  Sam ")

    assert player.nickname == "Sam"
    assert player.status == "connected"
    assert player.score == 0
    assert player.team is None
    assert player.player_id.startswith("player_")
    assert credentials.session_id == session.id
    assert credentials.player_db_id == player.id
    assert credentials.player_id == player.player_id
    assert await store.count_events("player_joined", session.id) == 1


@pytest.mark.parametrize("nickname", ["", "   ", "\t"])
async def test_blank_nickname_rejected(lobby, lobby_service, store, nickname):
    session, _ = await lobby()
    with pytest.raises(EmptyNicknameError):
        await lobby_service.join(session.room_code, nickname)
    assert await store.count_players(session.id) == 0


async def test_unknown_code_rejected(lobby_service):
    with pytest.raises(InvalidRoomCodeError):
        await lobby_service.join("ZZZZZZ", "Sam")


async def test_room_full_does_not_insert(lobby, lobby_service, session_service, store):
    session, credentials = await lobby()
    await session_service.update_settings(session.id, SessionSettingsUpdate(max_players=2), credentials.host_id)
    await lobby_service.join(session.room_code, "Sam")
    await lobby_service.join(session.room_code, "Lee")

    with pytest.raises(RoomFullError):
        await lobby_service.join(session.room_code, "Kim")
    assert await store.count_players(session.id) == 2


async def test_kicked_players_free_their_seat(lobby, lobby_service, session_service):
    session, credentials = await lobby()
    await session_service.update_settings(session.id, SessionSettingsUpdate(max_players=2), credentials.host_id)
    sam, _ = await lobby_service.join(session.room_code, "Sam")
    await lobby_service.join(session.room_code, "Lee")
    await lobby_service.kick_player(sam.id, credentials.host_id)

    player, _ = await lobby_service.join(session.room_code, "Kim")
    assert player.nickname == "Kim"


@pytest.mark.parametrize("status", ["tutorial", "playing", "ended"])
async def test_started_session_rejects_joins(lobby, lobby_service, store, status):
    session, _ = await lobby()
    await store.update_session(session.id, status=status)
    with pytest.raises(GameAlreadyStartedError):
        await lobby_service.join(session.room_code, "Sam")


async def test_banned_word_is_masked(lobby, lobby_service):
    session, _ = await lobby()
    player, _ = await lobby_service.join(session.room_code, "PLACEHOLDER fan")
    assert player.nickname == "*** fan"


async def test_heartbeat_refreshes_last_seen(lobby, lobby_service, store):
    session, _ = await lobby()
    player, _ = await lobby_service.join(session.room_code, "Sam")
    await store.update_player(player.id, last_seen=utcnow() - timedelta(seconds=30))

    refreshed = await lobby_service.heartbeat(player.id)
    assert refreshed.last_seen > utcnow() - timedelta(seconds=5)


async def test_kick_is_terminal(lobby, lobby_service):
    session, credentials = await lobby()
    player, _ = await lobby_service.join(session.room_code, "Sam")

    kicked = await lobby_service.kick_player(player.id, credentials.host_id)
    assert kicked.status == "kicked"
    with pytest.raises(PlayerKickedError):
        await lobby_service.heartbeat(player.id)

    again = await lobby_service.kick_player(player.id, credentials.host_id)
    assert again.status == "kicked"


async def test_resume_player(lobby, lobby_service, store):
    session, _ = await lobby()
    player, credentials = await lobby_service.join(session.room_code, "Sam")
    stored = DeviceCredentials.for_player(credentials)

    await store.update_player(player.id, status="disconnected", last_seen=utcnow() - timedelta(seconds=10))
    resumed = await lobby_service.resume_player(stored)
    assert resumed.status == "connected"

    await store.update_player(player.id, status="disconnected", last_seen=utcnow() - timedelta(minutes=5))
    assert await lobby_service.resume_player(stored) is None

    wrong = stored.model_copy(update={"player_id": "player_0_other"})
    assert await lobby_service.resume_player(wrong) is None


async def test_stale_connected_player_is_marked_away(lobby, lobby_service, store):
    session, _ = await lobby()
    player, credentials = await lobby_service.join(session.room_code, "Sam")
    await store.update_player(player.id, last_seen=utcnow() - timedelta(minutes=5))

    assert await lobby_service.resume_player(DeviceCredentials.for_player(credentials)) is None
    assert (await store.get_player(player.id)).status == "disconnected"


async def test_kicked_player_resumes_even_when_stale(lobby, lobby_service, store):
    session, credentials = await lobby()
    player, player_credentials = await lobby_service.join(session.room_code, "Sam")
    await lobby_service.kick_player(player.id, credentials.host_id)
    await store.update_player(player.id, last_seen=utcnow() - timedelta(minutes=5))

    resumed = await lobby_service.resume_player(DeviceCredentials.for_player(player_credentials))
    assert resumed.status == "kicked"


async def test_leave_then_return(lobby, lobby_service, store):
    session, _ = await lobby()
    player, credentials = await lobby_service.join(session.room_code, "Sam")

    left = await lobby_service.leave(player.id)
    assert left.status == "disconnected"
    assert await store.count_players(session.id, status="connected") == 0

    resumed = await lobby_service.resume_player(DeviceCredentials.for_player(credentials))
    assert resumed.status == "connected"


async def test_started_and_full_reports_already_started(lobby, lobby_service, session_service, store):
    session, credentials = await lobby()
    await session_service.update_settings(session.id, SessionSettingsUpdate(max_players=2), credentials.host_id)
    await lobby_service.join(session.room_code, "Sam")
    await lobby_service.join(session.room_code, "Lee")
    await store.update_session(session.id, status="tutorial")

    with pytest.raises(GameAlreadyStartedError):
        await lobby_service.join(session.room_code, "Kim")
    assert await store.count_players(session.id) == 2
