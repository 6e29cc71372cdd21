import asyncio
import random

import pytest

from wordboard.engine.tile_bag import make_tile
from wordboard.managers.game import GameManager
from wordboard.schemas import Placement


class RecordingSio:
    """Stands in for socketio.AsyncServer; keeps every emit for inspection."""

    def __init__(self):
        self.emitted = []
        self.rooms = {}

    async def emit(self, event, data=None, room=None, to=None):
        self.emitted.append((event, data, room or to))

    async def enter_room(self, sid, room):
        self.rooms.setdefault(room, set()).add(sid)

    async def leave_room(self, sid, room):
        self.rooms.get(room, set()).discard(sid)

    def events(self, name):
        return [(data, target) for event, data, target in self.emitted if event == name]

    def clear(self):
        self.emitted.clear()


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def sio():
    return RecordingSio()


@pytest.fixture
def manager(sio, words):
    return GameManager(sio, words)


@pytest.fixture
def playing(manager, sio):
    """Manager with alice and bob in game "g1", started, alice to move."""
    run(manager.join_game("alice", "g1", "Alice"))
    run(manager.join_game("bob", "g1", "Bob"))
    game = manager.games["g1"]
    game.session.rng = random.Random(5)
    run(manager.start_game("alice"))
    game.session.players.sort(key=lambda p: p.id)
    game.session.current_idx = 0
    sio.clear()
    return game


def test_join_enters_room_and_broadcasts_lobby(manager, sio):
    run(manager.join_game("alice", "g1", "Alice"))

    assert sio.rooms["g1"] == {"alice"}
    lobby, target = sio.events("lobbyUpdate")[-1]
    assert target == "g1"
    assert lobby["players"][0]["name"] == "Alice"
    assert lobby["players"][0]["isHost"]
    assert not lobby["canStart"]
    assert sio.events("playerJoined")[-1][0] == {"playerName": "Alice"}
    assert manager.player_games["alice"] == "g1"


def test_failed_join_goes_to_sender_only(manager, sio):
    run(manager.join_game("alice", "g1", "Al"))
    (payload, target), = sio.events("error")
    assert target == "alice"
    assert payload["code"] == "NAME_TOO_SHORT"
    assert "alice" not in manager.player_games


def test_intent_before_join(manager, sio):
    assert run(manager.pass_turn("ghost")) is None
    payload, target = sio.events("error")[-1]
    assert (payload["code"], target) == ("MUST_JOIN_FIRST", "ghost")


def test_start_sends_private_racks(manager, sio):
    run(manager.join_game("alice", "g1", "Alice"))
    run(manager.join_game("bob", "g1", "Bob"))
    sio.clear()

    run(manager.start_game("alice"))

    started, target = sio.events("gameStarted")[0]
    assert target == "g1"
    assert sorted(started["turnOrder"]) == ["alice", "bob"]
    assert started["tileBagCount"] == 86
    racks = sio.events("yourTiles")
    assert sorted(t for _, t in racks) == ["alice", "bob"]
    assert all(len(payload["tiles"]) == 7 for payload, _ in racks)
    assert sio.events("scoreUpdate")


def test_non_host_start_is_refused(manager, sio):
    run(manager.join_game("alice", "g1", "Alice"))
    run(manager.join_game("bob", "g1", "Bob"))
    run(manager.start_game("bob"))
    payload, target = sio.events("error")[-1]
    assert (payload["code"], target) == ("NOT_HOST", "bob")
    assert not sio.events("gameStarted")


def test_accepted_word_broadcasts(playing, manager, sio):
    playing.session.find_player("alice").rack = [make_tile(ch) for ch in "CATSDOG"]
    placements = [
        Placement(row=7, col=7 + i, tile=make_tile(ch)) for i, ch in enumerate("CAT")
    ]

    run(manager.submit_word("alice", placements))

    accepted, target = sio.events("wordAccepted")[0]
    assert target == "alice"
    assert accepted["word"] == "CAT"
    assert accepted["score"] == 10
    board, target = sio.events("boardUpdate")[0]
    assert target == "g1"
    assert board["board"][7][7]["letter"] == "C"
    assert len(board["lastPlay"]["positions"]) == 3
    assert sio.events("tileBagUpdate")[0][0] == {"count": 83}
    turn, _ = sio.events("turnChange")[0]
    assert turn["currentPlayerId"] == "bob"


def test_rejected_word_goes_to_sender(playing, manager, sio):
    playing.session.find_player("alice").rack = [make_tile(ch) for ch in "CATSDOG"]
    placements = [Placement(row=7, col=7, tile=make_tile("T")), Placement(row=7, col=8, tile=make_tile("C"))]

    run(manager.submit_word("alice", placements))

    rejected, target = sio.events("wordRejected")[0]
    assert target == "alice"
    assert rejected["code"] == "INVALID_WORD"
    assert rejected["invalidWords"] == ["TC"]
    assert not sio.events("boardUpdate")
    assert not sio.events("turnChange")


def test_sixth_pass_broadcasts_game_end(playing, manager, sio):
    for _ in range(6):
        run(manager.pass_turn(playing.session.current_player.id))

    assert len(sio.events("turnChange")) == 5
    ended, target = sio.events("gameEnded")[0]
    assert target == "g1"
    assert ended["reason"] == "consecutivePasses"
    assert "winner" in ended


def test_exchange_reports_new_tiles_privately(playing, manager, sio):
    run(manager.exchange_tiles("alice", [0, 1]))

    exchanged, target = sio.events("tilesExchanged")[0]
    assert target == "alice"
    assert len(exchanged["newTiles"]) == 2
    assert sio.events("yourTiles")[0][1] == "alice"
    assert sio.events("turnChange")[0][0]["currentPlayerId"] == "bob"


def test_disconnect_mid_game(playing, manager, sio):
    run(manager.disconnect("alice"))

    payload, target = sio.events("playerDisconnected")[0]
    assert target == "g1"
    assert payload == {"playerId": "alice", "playerName": "Alice"}
    assert sio.events("turnChange")[0][0]["currentPlayerId"] == "bob"
    assert manager.player_games["alice"] == "g1"


def test_disconnect_in_lobby_forgets_player(manager, sio):
    run(manager.join_game("alice", "g1", "Alice"))
    run(manager.join_game("bob", "g1", "Bob"))
    sio.clear()

    run(manager.disconnect("alice"))

    assert "alice" not in manager.player_games
    lobby, _ = sio.events("lobbyUpdate")[0]
    assert [p["name"] for p in lobby["players"]] == ["Bob"]
    assert lobby["players"][0]["isHost"]


def test_disconnect_after_game_ended_is_quiet(playing, manager, sio):
    for _ in range(6):
        run(manager.pass_turn(playing.session.current_player.id))
    sio.clear()

    run(manager.disconnect("bob"))

    assert sio.emitted == []


def test_unknown_sid_disconnect(manager, sio):
    assert run(manager.disconnect("ghost")) is None
    assert sio.emitted == []


def test_status(playing, manager):
    assert manager.status("g1") == {
        "status": "ok",
        "gameActive": True,
        "playerCount": 2,
        "maxPlayers": 4,
    }
    assert manager.status("nope")["playerCount"] == 0


def test_joining_a_second_game_is_refused(manager, sio):
    run(manager.join_game("alice", "g1", "Alice"))
    run(manager.join_game("bob", "g1", "Bob"))

    result = run(manager.join_game("alice", "g2", "Alice"))

    assert result.code.value == "ALREADY_JOINED"
    payload, target = sio.events("error")[-1]
    assert (payload["code"], target) == ("ALREADY_JOINED", "alice")
    assert manager.player_games["alice"] == "g1"
    assert "g2" not in manager.games

    run(manager.disconnect("alice"))
    assert [p.id for p in manager.games["g1"].session.players] == ["bob"]


def test_refused_join_leaves_no_game_behind(manager, sio):
    run(manager.join_game("alice", "g9", "Al"))
    assert "g9" not in manager.games
    assert manager.player_games == {}


def test_emptied_lobby_is_dropped(manager, sio):
    run(manager.join_game("alice", "g1", "Alice"))
    run(manager.disconnect("alice"))
    assert "g1" not in manager.games
    assert manager.player_games == {}


def test_ended_game_is_dropped_and_its_id_reused(playing, manager, sio):
    for _ in range(6):
        run(manager.pass_turn(playing.session.current_player.id))

    assert sio.events("gameEnded")
    assert "g1" not in manager.games
    assert manager.player_games == {}
    assert sio.rooms["g1"] == set()
    assert manager.status("g1")["playerCount"] == 0

    result = run(manager.join_game("alice", "g1", "Alice"))

    assert result.success
    assert manager.games["g1"] is not playing
    assert manager.games["g1"].session.phase == "lobby"
    assert manager.player_games["alice"] == "g1"


def test_ended_game_frees_players_for_other_games(playing, manager, sio):
    for _ in range(6):
        run(manager.pass_turn(playing.session.current_player.id))

    assert run(manager.join_game("bob", "g2", "Bob")).success
    assert manager.player_games["bob"] == "g2"


def test_waiting_player_disconnect_does_not_announce_turn(playing, manager, sio):
    run(manager.disconnect("bob"))

    payload, target = sio.events("playerDisconnected")[0]
    assert payload["playerId"] == "bob"
    assert not sio.events("turnChange")
    assert playing.session.current_player.id == "alice"


def test_last_player_leaving_ends_game(playing, manager, sio):
    run(manager.disconnect("bob"))
    run(manager.disconnect("alice"))

    ended, target = sio.events("gameEnded")[0]
    assert ended["reason"] == "allPlayersDisconnected"
    assert "g1" not in manager.games
