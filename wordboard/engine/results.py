from __future__ import annotations
from typing import List, Literal, Optional, Union

from pydantic import BaseModel

from ..schemas import GameEndResult, GamePhase, PlayerState, Tile
from .errors import GameError, GameErrorCode, InvalidPlacementError, InvalidWordError, PlacementRule

class GameFailure(BaseModel):
    success: Literal[False] = False
    code: GameErrorCode
    error: str
    rule: Optional[PlacementRule] = None
    invalidWords: Optional[List[str]] = None

    @classmethod
    def from_error(cls, exc: GameError) -> GameFailure:
        return cls(
            code=exc.code,
            error=exc.message,
            rule=exc.rule if isinstance(exc, InvalidPlacementError) else None,
            invalidWords=exc.invalid_words if isinstance(exc, InvalidWordError) else None,
        )

class TurnOutcome(BaseModel):
    """Turn and phase deltas shared by every successful in-game operation."""
    success: Literal[True] = True
    phase: GamePhase
    currentPlayerId: Optional[str] = None
    consecutivePasses: int = 0
    bagCount: int = 0
    gameEnded: bool = False
    end: Optional[GameEndResult] = None

class JoinGameSuccess(BaseModel):
    success: Literal[True] = True
    player: PlayerState
    playerCount: int

class StartGameSuccess(TurnOutcome):
    turnOrder: List[str] = []

class SubmitWordSuccess(TurnOutcome):
    playerId: str
    score: int
    words: List[str]
    newTiles: List[Tile] = []
    rack: List[Tile] = []
    totalScore: int = 0

class PassTurnSuccess(TurnOutcome):
    playerId: str

class ExchangeTilesSuccess(TurnOutcome):
    playerId: str
    exchanged: int = 0
    newTiles: List[Tile] = []
    rack: List[Tile] = []

class DisconnectSuccess(TurnOutcome):
    playerId: str
    removed: bool = False

class EndGameSuccess(BaseModel):
    success: Literal[True] = True
    result: GameEndResult

JoinGameResult = Union[JoinGameSuccess, GameFailure]
StartGameResult = Union[StartGameSuccess, GameFailure]
SubmitWordResult = Union[SubmitWordSuccess, GameFailure]
PassTurnResult = Union[PassTurnSuccess, GameFailure]
ExchangeTilesResult = Union[ExchangeTilesSuccess, GameFailure]
DisconnectResult = Union[DisconnectSuccess, GameFailure]
EndGameResult = Union[EndGameSuccess, GameFailure]
