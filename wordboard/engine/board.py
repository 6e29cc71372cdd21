from __future__ import annotations
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Tuple

from ..schemas import Placement, Tile

BOARD_SIZE = 15
CENTER = (7, 7)

Board = List[List[Optional[Tile]]]

class PremiumSquare(str, Enum):
    TRIPLE_WORD = 'TRIPLE_WORD'
    DOUBLE_WORD = 'DOUBLE_WORD'
    TRIPLE_LETTER = 'TRIPLE_LETTER'
    DOUBLE_LETTER = 'DOUBLE_LETTER'
    NORMAL = 'NORMAL'

TRIPLE_WORD_SQUARES: FrozenSet[Tuple[int, int]] = frozenset({
    (0, 0), (0, 7), (0, 14),
    (7, 0), (7, 14),
    (14, 0), (14, 7), (14, 14),
})

# Diagonals plus the center star
DOUBLE_WORD_SQUARES: FrozenSet[Tuple[int, int]] = frozenset({
    (1, 1), (2, 2), (3, 3), (4, 4),
    (1, 13), (2, 12), (3, 11), (4, 10),
    (13, 1), (12, 2), (11, 3), (10, 4),
    (13, 13), (12, 12), (11, 11), (10, 10),
    CENTER,
})

TRIPLE_LETTER_SQUARES: FrozenSet[Tuple[int, int]] = frozenset({
    (1, 5), (1, 9),
    (5, 1), (5, 5), (5, 9), (5, 13),
    (9, 1), (9, 5), (9, 9), (9, 13),
    (13, 5), (13, 9),
})

DOUBLE_LETTER_SQUARES: FrozenSet[Tuple[int, int]] = frozenset({
    (0, 3), (0, 11),
    (2, 6), (2, 8),
    (3, 0), (3, 7), (3, 14),
    (6, 2), (6, 6), (6, 8), (6, 12),
    (7, 3), (7, 11),
    (8, 2), (8, 6), (8, 8), (8, 12),
    (11, 0), (11, 7), (11, 14),
    (12, 6), (12, 8),
    (14, 3), (14, 11),
})

def empty_board() -> Board:
    return [[None for _ in range(BOARD_SIZE)] for _ in range(BOARD_SIZE)]

def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE

def premium_category(row: int, col: int) -> PremiumSquare:
    """Premium type of a square. Coordinates are expected to be in range."""
    pos = (row, col)
    if pos in TRIPLE_WORD_SQUARES:
        return PremiumSquare.TRIPLE_WORD
    if pos in DOUBLE_WORD_SQUARES:
        return PremiumSquare.DOUBLE_WORD
    if pos in TRIPLE_LETTER_SQUARES:
        return PremiumSquare.TRIPLE_LETTER
    if pos in DOUBLE_LETTER_SQUARES:
        return PremiumSquare.DOUBLE_LETTER
    return PremiumSquare.NORMAL

def is_board_empty(board: Board) -> bool:
    return all(cell is None for row in board for cell in row)

def with_placements(board: Board, placements: Iterable[Placement]) -> Board:
    """Working copy of `board` with the placements laid down; `board` is left untouched."""
    working = [list(row) for row in board]
    for p in placements:
        working[p.row][p.col] = p.tile
    return working
