from __future__ import annotations
import asyncio
import logging
from typing import Container, Dict, List, Optional

from ..engine.errors import ERROR_MESSAGES, GameErrorCode, PreconditionError
from ..engine.game_engine import MAX_PLAYERS, MIN_PLAYERS, GameEngine
from ..engine.results import GameFailure, TurnOutcome
from ..engine.session import GameSession
from ..schemas import Placement

logger = logging.getLogger(__name__)

def _dump(model) -> dict:
    return model.model_dump(mode='json')

class Game:
    """One session plus the room it broadcasts to.

    Every intent runs under ``lock`` so engine calls against the session
    never interleave. Once ``closed`` is set the manager has dropped the
    game and ``join`` turns everyone away with ``None``.
    """

    def __init__(self, game_id: str, sio, engine: GameEngine, dictionary: Container[str]):
        self.id = game_id
        self.sio = sio
        self.engine = engine
        self.dictionary = dictionary
        self.session = GameSession(game_id)
        self.lock = asyncio.Lock()
        self.closed = False

    @property
    def finished(self) -> bool:
        return self.session.phase == 'ended' or not self.session.players

    async def close_if_finished(self) -> bool:
        async with self.lock:
            if self.finished:
                self.closed = True
        return self.closed

    async def join(self, sid: str, name: str):
        async with self.lock:
            if self.closed:
                return None
            result = self.engine.join_game(self.session, sid, name)
            if isinstance(result, GameFailure):
                await self._emit_error(sid, result)
                return result
            await self.sio.enter_room(sid, self.id)
            await self._emit_lobby()
            await self.sio.emit('playerJoined', {'playerName': result.player.name}, room=self.id)
            return result

    async def start(self, sid: str):
        async with self.lock:
            result = self.engine.start_game(self.session, requester_id=sid)
            if isinstance(result, GameFailure):
                await self._emit_error(sid, result)
                return result
            state = self.session.to_state()
            await self.sio.emit('gameStarted', {
                'turnOrder': result.turnOrder,
                'currentPlayerId': result.currentPlayerId,
                'board': _dump(state)['board'],
                'tileBagCount': result.bagCount,
            }, room=self.id)
            for player in self.session.players:
                await self._emit_rack(player.id)
            await self._emit_scores()
            return result

    async def submit_word(self, sid: str, placements: List[Placement]):
        async with self.lock:
            result = self.engine.submit_word(self.session, sid, placements, self.dictionary)
            if isinstance(result, GameFailure):
                await self.sio.emit('wordRejected', {
                    'reason': result.error,
                    'code': result.code.value,
                    'rule': result.rule.value if result.rule else None,
                    'invalidWords': result.invalidWords,
                }, to=sid)
                return result
            record = self.session.history[-1]
            await self.sio.emit('wordAccepted', {
                'playerId': sid,
                'word': result.words[0],
                'words': result.words,
                'score': result.score,
                'newScore': result.totalScore,
                'placements': [_dump(p) for p in record.placements],
            }, to=sid)
            await self.sio.emit('boardUpdate', {
                'board': _dump(self.session.to_state())['board'],
                'lastPlay': {'positions': [{'row': p.row, 'col': p.col} for p in record.placements]},
            }, room=self.id)
            await self._emit_rack(sid)
            await self._emit_scores()
            await self.sio.emit('tileBagUpdate', {'count': result.bagCount}, room=self.id)
            await self._emit_turn(result)
            return result

    async def pass_turn(self, sid: str):
        async with self.lock:
            result = self.engine.pass_turn(self.session, sid)
            if isinstance(result, GameFailure):
                await self._emit_error(sid, result)
                return result
            await self._emit_turn(result)
            return result

    async def exchange_tiles(self, sid: str, indices: List[int]):
        async with self.lock:
            result = self.engine.exchange_tiles(self.session, sid, indices)
            if isinstance(result, GameFailure):
                await self._emit_error(sid, result)
                return result
            await self.sio.emit('tilesExchanged', {'newTiles': [_dump(t) for t in result.newTiles]}, to=sid)
            await self._emit_rack(sid)
            await self.sio.emit('tileBagUpdate', {'count': result.bagCount}, room=self.id)
            await self._emit_turn(result)
            return result

    async def disconnect(self, sid: str):
        async with self.lock:
            player = self.session.find_player(sid)
            was_playing = self.session.phase == 'playing'
            turn_before = self.session.current_player.id if was_playing else None
            result = self.engine.disconnect_player(self.session, sid)
            if isinstance(result, GameFailure):
                return result
            if result.removed:
                await self._emit_lobby()
            elif was_playing:
                await self.sio.emit('playerDisconnected', {
                    'playerId': sid,
                    'playerName': player.name if player else None,
                }, room=self.id)
                # only announce a turn change when the turn actually moved
                if result.gameEnded or result.currentPlayerId != turn_before:
                    await self._emit_turn(result)
            return result

    # Broadcast helpers

    async def _emit_error(self, sid: str, failure: GameFailure):
        await self.sio.emit('error', {'message': failure.error, 'code': failure.code.value}, to=sid)

    async def _emit_rack(self, player_id: str):
        player = self.session.find_player(player_id)
        if player is not None:
            await self.sio.emit('yourTiles', {'tiles': [_dump(t) for t in player.rack]}, to=player_id)

    async def _emit_lobby(self):
        await self.sio.emit('lobbyUpdate', {
            'players': [
                {'id': p.id, 'name': p.name, 'isHost': p.isHost, 'connected': p.isConnected}
                for p in self.session.players
            ],
            'canStart': len(self.session.players) >= MIN_PLAYERS,
        }, room=self.id)

    async def _emit_scores(self):
        scores = sorted(
            ({'playerId': p.id, 'playerName': p.name, 'score': p.score} for p in self.session.players),
            key=lambda s: s['score'],
            reverse=True,
        )
        await self.sio.emit('scoreUpdate', {'scores': scores}, room=self.id)

    async def _emit_turn(self, outcome: TurnOutcome):
        if outcome.gameEnded and outcome.end is not None:
            await self.sio.emit('gameEnded', _dump(outcome.end), room=self.id)
            return
        if outcome.phase == 'playing':
            await self.sio.emit('turnChange', {
                'currentPlayerId': outcome.currentPlayerId,
                'consecutivePasses': outcome.consecutivePasses,
            }, room=self.id)

class GameManager:
    def __init__(self, sio, dictionary: Container[str], engine: Optional[GameEngine] = None):
        self.sio = sio
        self.dictionary = dictionary
        self.engine = engine or GameEngine()
        self.games: Dict[str, Game] = {}
        # sid -> game id
        self.player_games: Dict[str, str] = {}

    def get_or_create(self, game_id: str) -> Game:
        if game_id not in self.games:
            self.games[game_id] = Game(game_id, self.sio, self.engine, self.dictionary)
        return self.games[game_id]

    def game_for(self, sid: str) -> Optional[Game]:
        game_id = self.player_games.get(sid)
        return self.games.get(game_id) if game_id else None

    def status(self, game_id: str) -> dict:
        game = self.games.get(game_id)
        session = game.session if game else None
        return {
            'status': 'ok',
            'gameActive': bool(session and session.phase == 'playing'),
            'playerCount': len(session.players) if session else 0,
            'maxPlayers': MAX_PLAYERS,
        }

    async def join_game(self, sid: str, game_id: str, name: str):
        current = self.game_for(sid)
        if current is not None and current.id != game_id:
            failure = GameFailure.from_error(PreconditionError(GameErrorCode.ALREADY_JOINED))
            await self.sio.emit('error', {'message': failure.error, 'code': failure.code.value}, to=sid)
            return failure
        while True:
            game = self.get_or_create(game_id)
            result = await game.join(sid, name)
            # None means the game was dropped while we waited; join its successor
            if result is not None:
                break
        if not isinstance(result, GameFailure):
            self.player_games[sid] = game_id
        await self._settle(game)
        return result

    async def start_game(self, sid: str):
        game = await self._require_game(sid)
        return await game.start(sid) if game else None

    async def submit_word(self, sid: str, placements: List[Placement]):
        game = await self._require_game(sid)
        if game is None:
            return None
        result = await game.submit_word(sid, placements)
        await self._settle(game)
        return result

    async def pass_turn(self, sid: str):
        game = await self._require_game(sid)
        if game is None:
            return None
        result = await game.pass_turn(sid)
        await self._settle(game)
        return result

    async def exchange_tiles(self, sid: str, indices: List[int]):
        game = await self._require_game(sid)
        return await game.exchange_tiles(sid, indices) if game else None

    async def disconnect(self, sid: str):
        game = self.game_for(sid)
        if game is None:
            return None
        result = await game.disconnect(sid)
        if game.session.find_player(sid) is None:
            self.player_games.pop(sid, None)
        await self._settle(game)
        return result

    async def _settle(self, game: Game):
        """Drop ``game`` once it has ended or its lobby is empty."""
        if not await game.close_if_finished():
            return
        # already dropped, and the id may now belong to a newer game
        if self.games.get(game.id) is not game:
            return
        del self.games[game.id]
        members = [sid for sid, game_id in self.player_games.items() if game_id == game.id]
        for sid in members:
            del self.player_games[sid]
        for sid in members:
            await self.sio.leave_room(sid, game.id)
        logger.info("Game %s closed", game.id)

    async def _require_game(self, sid: str) -> Optional[Game]:
        game = self.game_for(sid)
        if game is None:
            code = GameErrorCode.MUST_JOIN_FIRST
            await self.sio.emit('error', {'message': ERROR_MESSAGES[code], 'code': code.value}, to=sid)
        return game
