from __future__ import annotations
import logging
from collections import Counter
from typing import Any, Container, Dict, List, Optional, Sequence, Tuple, Union

from ..schemas import BLANK, FinalScore, GameEndResult, EndReason, Placement, PlayerState, PlayRecord, Tile, Winner
from .board import empty_board, is_board_empty, with_placements
from .errors import GameError, GameErrorCode, InvalidWordError, PreconditionError, ResourceError
from .results import (
    DisconnectResult,
    DisconnectSuccess,
    EndGameResult,
    EndGameSuccess,
    ExchangeTilesResult,
    ExchangeTilesSuccess,
    GameFailure,
    JoinGameResult,
    JoinGameSuccess,
    PassTurnResult,
    PassTurnSuccess,
    StartGameResult,
    StartGameSuccess,
    SubmitWordResult,
    SubmitWordSuccess,
    TurnOutcome,
)
from .scoring import calculate_score
from .session import GameSession
from .tile_bag import RACK_SIZE, draw, make_tile, new_tile_bag, rack_points, return_and_shuffle
from .validation import validate_placement
from .words import extract_words, find_invalid_words

logger = logging.getLogger(__name__)

MIN_PLAYERS = 2
MAX_PLAYERS = 4
MAX_CONSECUTIVE_PASSES = 6
PLAYER_NAME_MIN_LENGTH = 3
PLAYER_NAME_MAX_LENGTH = 20

class GameEngine:
    """Turn and phase state machine for a single ``GameSession``.

    Each public method either applies the whole operation to the session or
    leaves it untouched and returns a ``GameFailure``. Every check runs
    before the first write, so a refused intent never leaves a half-applied
    move behind. The engine keeps no state of its own; one instance can
    serve any number of sessions as long as calls against the same session
    are not interleaved.
    """

    # Lobby

    def join_game(self, session: GameSession, player_id: str, name: str) -> JoinGameResult:
        try:
            name = self._check_can_join(session, player_id, name)
        except GameError as exc:
            return self._reject('join_game', exc)

        player = PlayerState(id=player_id, name=name, isHost=not session.players)
        session.players.append(player)
        logger.info("%s joined game %s", name, session.id)
        return JoinGameSuccess(player=player, playerCount=len(session.players))

    def _check_can_join(self, session: GameSession, player_id: str, name: str) -> str:
        if session.phase != 'lobby':
            raise PreconditionError(GameErrorCode.GAME_ALREADY_STARTED)
        if session.find_player(player_id) is not None:
            raise PreconditionError(GameErrorCode.ALREADY_JOINED)
        name = name.strip()
        if len(name) < PLAYER_NAME_MIN_LENGTH:
            raise PreconditionError(GameErrorCode.NAME_TOO_SHORT)
        if len(name) > PLAYER_NAME_MAX_LENGTH:
            raise PreconditionError(GameErrorCode.NAME_TOO_LONG)
        if any(p.name == name for p in session.players):
            raise PreconditionError(GameErrorCode.NAME_TAKEN)
        if len(session.players) >= MAX_PLAYERS:
            raise PreconditionError(GameErrorCode.GAME_FULL)
        return name

    def start_game(self, session: GameSession, requester_id: Optional[str] = None) -> StartGameResult:
        """Leave the lobby: shuffle seating, fresh board and bag, deal seven tiles each.

        When ``requester_id`` is given only the host may start.
        """
        try:
            self._check_can_start(session, requester_id)
        except GameError as exc:
            return self._reject('start_game', exc)

        session.rng.shuffle(session.players)
        session.board = empty_board()
        session.tile_bag = new_tile_bag(session.rng)
        session.consecutive_passes = 0
        session.history = []
        session.end_result = None
        for player in session.players:
            player.rack = draw(session.tile_bag, RACK_SIZE)
            player.score = 0
        session.phase = 'playing'
        session.current_idx = next((i for i, p in enumerate(session.players) if p.isConnected), 0)

        logger.info("Game %s started with %d players", session.id, len(session.players))
        return StartGameSuccess(turnOrder=[p.id for p in session.players], **self._turn_deltas(session))

    def _check_can_start(self, session: GameSession, requester_id: Optional[str]) -> None:
        if session.phase != 'lobby':
            raise PreconditionError(GameErrorCode.GAME_ALREADY_STARTED)
        if requester_id is not None:
            requester = session.find_player(requester_id)
            if requester is None:
                raise PreconditionError(GameErrorCode.MUST_JOIN_FIRST)
            if not requester.isHost:
                raise PreconditionError(GameErrorCode.NOT_HOST)
        if len(session.players) < MIN_PLAYERS:
            raise PreconditionError(GameErrorCode.NOT_ENOUGH_PLAYERS)

    # Turns

    def submit_word(
        self,
        session: GameSession,
        player_id: str,
        placements: Sequence[Placement],
        dictionary: Container[str],
    ) -> SubmitWordResult:
        """Play tiles from the active player's rack.

        ``dictionary`` is any container of uppercase words. On success the
        tiles move from rack to board, the score is banked, the rack is
        refilled and the turn passes on (or the game ends when both the
        mover's rack and the bag are empty).
        """
        try:
            player = self._require_turn(session, player_id)
            self._check_rack_supplies(player.rack, placements)
            validate_placement(placements, session.board, is_board_empty(session.board))
            committed = [
                Placement(row=p.row, col=p.col, tile=make_tile(p.tile.letter, p.tile.isBlank))
                for p in placements
            ]
            working = with_placements(session.board, committed)
            words = extract_words(committed, working)
            invalid = find_invalid_words(words, dictionary)
            if invalid:
                raise InvalidWordError(invalid)
        except GameError as exc:
            return self._reject('submit_word', exc)

        score = calculate_score(committed, working)
        for p in committed:
            session.board[p.row][p.col] = p.tile
            self._take_from_rack(player.rack, p.tile)
        player.score += score
        new_tiles = draw(session.tile_bag, RACK_SIZE - len(player.rack))
        player.rack.extend(new_tiles)
        session.history.append(PlayRecord(playerId=player.id, words=words, score=score, placements=committed))
        session.consecutive_passes = 0
        logger.info("%s played '%s' for %d points", player.name, words[0], score)

        if not player.rack and not session.tile_bag:
            self._finish(session, 'allTilesPlayed')
        else:
            self._advance(session)

        return SubmitWordSuccess(
            playerId=player.id,
            score=score,
            words=words,
            newTiles=new_tiles,
            rack=list(player.rack),
            totalScore=player.score,
            **self._turn_deltas(session),
        )

    def pass_turn(self, session: GameSession, player_id: str) -> PassTurnResult:
        try:
            player = self._require_turn(session, player_id)
        except GameError as exc:
            return self._reject('pass_turn', exc)

        session.consecutive_passes += 1
        logger.info("%s passed (%d in a row)", player.name, session.consecutive_passes)
        if session.consecutive_passes >= MAX_CONSECUTIVE_PASSES:
            self._finish(session, 'consecutivePasses')
        else:
            self._advance(session)
        return PassTurnSuccess(playerId=player.id, **self._turn_deltas(session))

    def exchange_tiles(self, session: GameSession, player_id: str, indices: Sequence[int]) -> ExchangeTilesResult:
        """Swap the rack tiles at ``indices`` for fresh ones from the bag.

        The returned tiles go back in before the bag is reshuffled, so one of
        them can come straight back out.
        """
        try:
            player = self._require_turn(session, player_id)
            if len(session.tile_bag) < RACK_SIZE:
                raise ResourceError(GameErrorCode.INSUFFICIENT_TILES_IN_BAG)
            self._check_indices(player.rack, indices)
        except GameError as exc:
            return self._reject('exchange_tiles', exc)

        chosen = set(indices)
        returned = [t for i, t in enumerate(player.rack) if i in chosen]
        player.rack = [t for i, t in enumerate(player.rack) if i not in chosen]
        return_and_shuffle(session.tile_bag, returned, session.rng)
        new_tiles = draw(session.tile_bag, len(returned))
        player.rack.extend(new_tiles)
        session.consecutive_passes = 0
        logger.info("%s exchanged %d tiles", player.name, len(returned))

        self._advance(session)
        return ExchangeTilesSuccess(
            playerId=player.id,
            exchanged=len(returned),
            newTiles=new_tiles,
            rack=list(player.rack),
            **self._turn_deltas(session),
        )

    def advance_turn(self, session: GameSession) -> Union[TurnOutcome, GameFailure]:
        if session.phase != 'playing':
            return self._reject('advance_turn', PreconditionError(GameErrorCode.GAME_NOT_STARTED))
        self._advance(session)
        return TurnOutcome(**self._turn_deltas(session))

    def disconnect_player(self, session: GameSession, player_id: str) -> DisconnectResult:
        """Drop a player from the lobby, or mark them away mid-game.

        A departing lobby host hands the role to the next player in line. An
        active player who drops mid-game forfeits the turn.
        """
        player = session.find_player(player_id)
        if player is None:
            return self._reject('disconnect_player', PreconditionError(GameErrorCode.PLAYER_NOT_FOUND))

        removed = False
        if session.phase == 'lobby':
            session.players = [p for p in session.players if p.id != player_id]
            if player.isHost and session.players:
                session.players[0].isHost = True
            removed = True
        elif session.phase == 'playing':
            was_current = session.current_player is player
            player.isConnected = False
            if was_current:
                self._advance(session)
        logger.info("%s disconnected from game %s", player.name, session.id)
        return DisconnectSuccess(playerId=player_id, removed=removed, **self._turn_deltas(session))

    def end_game(self, session: GameSession, reason: EndReason) -> EndGameResult:
        if session.phase == 'ended' and session.end_result is not None:
            return EndGameSuccess(result=session.end_result)
        if session.phase != 'playing':
            return self._reject('end_game', PreconditionError(GameErrorCode.GAME_NOT_STARTED))
        return EndGameSuccess(result=self._finish(session, reason))

    # Internals

    def _require_turn(self, session: GameSession, player_id: str) -> PlayerState:
        if session.phase != 'playing':
            raise PreconditionError(GameErrorCode.GAME_NOT_STARTED)
        current = session.current_player
        if current is None or current.id != player_id:
            raise PreconditionError(GameErrorCode.NOT_YOUR_TURN)
        return current

    @staticmethod
    def _rack_key(tile: Tile) -> Tuple[str, bool]:
        # a blank on the rack stands in for whatever letter the placement assigns it
        return (BLANK, True) if tile.isBlank else (tile.letter, False)

    def _check_rack_supplies(self, rack: List[Tile], placements: Sequence[Placement]) -> None:
        available = Counter(self._rack_key(t) for t in rack)
        for p in placements:
            key = self._rack_key(p.tile)
            if available[key] <= 0:
                raise ResourceError(GameErrorCode.MISSING_TILE, context={"letter": p.tile.letter})
            available[key] -= 1

    def _take_from_rack(self, rack: List[Tile], tile: Tile) -> None:
        key = self._rack_key(tile)
        idx = next(i for i, t in enumerate(rack) if self._rack_key(t) == key)
        del rack[idx]

    @staticmethod
    def _check_indices(rack: List[Tile], indices: Sequence[int]) -> None:
        if not indices:
            raise ResourceError(GameErrorCode.INVALID_TILE_INDEX, 'No tiles selected')
        if len(set(indices)) != len(indices):
            raise ResourceError(GameErrorCode.INVALID_TILE_INDEX, 'Duplicate tile index')
        for index in indices:
            if not 0 <= index < len(rack):
                raise ResourceError(GameErrorCode.INVALID_TILE_INDEX, context={"index": index})

    def _advance(self, session: GameSession) -> None:
        count = len(session.players)
        for step in range(1, count + 1):
            idx = (session.current_idx + step) % count
            if session.players[idx].isConnected:
                session.current_idx = idx
                return
        self._finish(session, 'allPlayersDisconnected')

    def _finish(self, session: GameSession, reason: EndReason) -> GameEndResult:
        session.phase = 'ended'
        for player in session.players:
            player.score -= rack_points(player.rack)

        ranked = sorted(session.players, key=lambda p: p.score, reverse=True)
        top = ranked[0]
        result = GameEndResult(
            reason=reason,
            finalScores=[
                FinalScore(
                    playerId=p.id,
                    playerName=p.name,
                    score=p.score,
                    remainingTilePoints=rack_points(p.rack),
                )
                for p in ranked
            ],
            winner=Winner(playerId=top.id, playerName=top.name, score=top.score),
        )
        session.end_result = result
        logger.info("Game %s ended (%s); winner %s with %d", session.id, reason, top.name, top.score)
        return result

    def _turn_deltas(self, session: GameSession) -> Dict[str, Any]:
        current = session.current_player if session.phase == 'playing' else None
        return {
            "phase": session.phase,
            "currentPlayerId": current.id if current else None,
            "consecutivePasses": session.consecutive_passes,
            "bagCount": len(session.tile_bag),
            "gameEnded": session.phase == 'ended',
            "end": session.end_result,
        }

    def _reject(self, operation: str, exc: GameError) -> GameFailure:
        logger.debug("%s rejected: %s", operation, exc)
        return GameFailure.from_error(exc)
