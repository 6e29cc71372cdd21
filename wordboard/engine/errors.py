"""
Game error taxonomy.

Every way an engine operation can be refused has a stable ``GameErrorCode``
and a human-readable message. Engine helpers raise the exceptions below; the
public ``GameEngine`` methods catch them and hand back a ``GameFailure``
result instead, so nothing here ever crosses the engine boundary as a raw
exception.

Usage:
    try:
        validate_placement(placements, board, is_first_move)
    except InvalidPlacementError as e:
        logger.debug("rejected: %s (%s)", e.message, e.rule)
"""
from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional

__all__ = [
    "ERROR_MESSAGES",
    "GameError",
    "GameErrorCode",
    "InvalidPlacementError",
    "InvalidWordError",
    "PlacementRule",
    "PreconditionError",
    "ResourceError",
]

class GameErrorCode(str, Enum):
    # Lobby
    NAME_TOO_SHORT = 'NAME_TOO_SHORT'
    NAME_TOO_LONG = 'NAME_TOO_LONG'
    NAME_TAKEN = 'NAME_TAKEN'
    GAME_FULL = 'GAME_FULL'
    GAME_ALREADY_STARTED = 'GAME_ALREADY_STARTED'
    NOT_HOST = 'NOT_HOST'
    NOT_ENOUGH_PLAYERS = 'NOT_ENOUGH_PLAYERS'
    ALREADY_JOINED = 'ALREADY_JOINED'

    # Turn
    NOT_YOUR_TURN = 'NOT_YOUR_TURN'
    GAME_NOT_STARTED = 'GAME_NOT_STARTED'

    # Tiles
    MISSING_TILE = 'MISSING_TILE'
    INVALID_TILE_INDEX = 'INVALID_TILE_INDEX'
    INSUFFICIENT_TILES_IN_BAG = 'INSUFFICIENT_TILES_IN_BAG'

    # Placement / words
    INVALID_PLACEMENT = 'INVALID_PLACEMENT'
    INVALID_WORD = 'INVALID_WORD'

    # General
    PLAYER_NOT_FOUND = 'PLAYER_NOT_FOUND'
    MUST_JOIN_FIRST = 'MUST_JOIN_FIRST'

ERROR_MESSAGES: Dict[GameErrorCode, str] = {
    GameErrorCode.NAME_TOO_SHORT: 'Name must be at least 3 characters',
    GameErrorCode.NAME_TOO_LONG: 'Name must be at most 20 characters',
    GameErrorCode.NAME_TAKEN: 'Name already taken',
    GameErrorCode.GAME_FULL: 'Game is full',
    GameErrorCode.GAME_ALREADY_STARTED: 'Game already in progress',
    GameErrorCode.NOT_HOST: 'Only host can start the game',
    GameErrorCode.NOT_ENOUGH_PLAYERS: 'Need at least 2 players',
    GameErrorCode.ALREADY_JOINED: 'You have already joined',
    GameErrorCode.NOT_YOUR_TURN: 'Not your turn',
    GameErrorCode.GAME_NOT_STARTED: 'Game not in progress',
    GameErrorCode.MISSING_TILE: "You don't have that tile",
    GameErrorCode.INVALID_TILE_INDEX: 'Invalid tile index',
    GameErrorCode.INSUFFICIENT_TILES_IN_BAG: 'Not enough tiles in bag to exchange',
    GameErrorCode.INVALID_PLACEMENT: 'Invalid placement',
    GameErrorCode.INVALID_WORD: 'Invalid word(s)',
    GameErrorCode.PLAYER_NOT_FOUND: 'Player not found',
    GameErrorCode.MUST_JOIN_FIRST: 'You must join first',
}

class PlacementRule(str, Enum):
    """Which placement rule a rejected move broke, in the order they are checked."""
    NO_TILES = 'NO_TILES'
    OUT_OF_BOUNDS = 'OUT_OF_BOUNDS'
    OCCUPIED = 'OCCUPIED'
    INVALID_LETTER = 'INVALID_LETTER'
    NOT_IN_LINE = 'NOT_IN_LINE'
    GAP = 'GAP'
    OFF_CENTER = 'OFF_CENTER'
    DISCONNECTED = 'DISCONNECTED'

class GameError(Exception):
    """Base exception for refused game operations.

    Attributes:
        code: Stable error code for the caller to branch on
        message: Human-readable description
        context: Additional structured detail
    """

    def __init__(
        self,
        code: GameErrorCode,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES[code]
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context,
        }

class PreconditionError(GameError):
    """Wrong phase, wrong turn, not the host, or not enough players."""

class ResourceError(GameError):
    """Tile not on the rack, bad rack index, or too few tiles in the bag."""

class InvalidPlacementError(GameError):
    """Placement broke one of the board geometry rules.

    Attributes:
        rule: The ``PlacementRule`` that failed
    """

    def __init__(self, rule: PlacementRule, message: str):
        super().__init__(GameErrorCode.INVALID_PLACEMENT, message, {"rule": rule.value})
        self.rule = rule

class InvalidWordError(GameError):
    """One or more formed words are not in the dictionary.

    Attributes:
        invalid_words: Every rejected word, in the order it was formed
    """

    def __init__(self, invalid_words: List[str]):
        super().__init__(GameErrorCode.INVALID_WORD, context={"invalidWords": list(invalid_words)})
        self.invalid_words = list(invalid_words)
