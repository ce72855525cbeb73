"""
Naming round display model
"""

import asyncio

from partyroom.services.name_game_service import NameGame, RoundTimer, get_game_module, scoreboard


def test_round_timer_counts_down_to_zero():
    timer = RoundTimer(3)
    assert timer.display == "0:03"
    timer.tick()
    timer.tick(5)
    assert timer.remaining == 0
    assert timer.expired
    timer.reset()
    assert timer.remaining == 3


def test_default_round_length():
    assert RoundTimer().remaining == 60


async def test_round_timer_runs_in_background():
    timer = RoundTimer(3, interval=0.01)
    timer.start()
    assert timer.running
    await asyncio.sleep(0.2)
    assert timer.expired
    assert not timer.running

    timer.start()
    assert not timer.running


async def test_round_timer_stop_freezes_countdown():
    timer = RoundTimer(60, interval=0.01)
    timer.start()
    await asyncio.sleep(0.05)
    timer.stop()
    left = timer.remaining
    await asyncio.sleep(0.05)
    assert timer.remaining == left
    assert 0 < left < 60


async def test_scoreboard_sorted_by_score(lobby, lobby_service, store):
    session, credentials = await lobby()
    sam, _ = await lobby_service.join(session.room_code, "Sam")
    lee, _ = await lobby_service.join(session.room_code, "Lee")
    kim, _ = await lobby_service.join(session.room_code, "Kim")
    await store.update_player(lee.id, score=5)
    await store.update_player(sam.id, score=2)
    await lobby_service.kick_player(kim.id, credentials.host_id)

    players = await store.list_players(session.id)
    board = scoreboard(players)
    assert [p.nickname for p in board] == ["Lee", "Sam"]

    by_score = await store.list_players(session.id, status="connected", order_by="score")
    assert [p.nickname for p in by_score] == ["Lee", "Sam"]


async def test_name_game_uses_stored_round(lobby, session_service, store):
    session, credentials = await lobby("fa")
    await store.update_session(session.id, status="playing")
    session, state = await session_service.select_game(session.id, "name_game", credentials.host_id)

    game = NameGame(session, is_host=True, state=state)
    snapshot = game.snapshot()
    assert snapshot["round"] == 1
    assert snapshot["letter"] == "ک"
    assert snapshot["time_left"] == "1:00"
    assert snapshot["scoreboard"] == []
    assert game.leader is None


def test_game_registry():
    assert get_game_module("name_game") is NameGame
    assert get_game_module("spy") is None
    assert get_game_module(None) is None
