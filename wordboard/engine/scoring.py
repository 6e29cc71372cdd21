from __future__ import annotations
from typing import Sequence, Set

from ..schemas import Placement
from .board import Board, PremiumSquare, premium_category
from .tile_bag import RACK_SIZE
from .words import Cell, Span, word_spans

BINGO_BONUS = 50

LETTER_MULTIPLIERS = {
    PremiumSquare.DOUBLE_LETTER: 2,
    PremiumSquare.TRIPLE_LETTER: 3,
}
WORD_MULTIPLIERS = {
    PremiumSquare.DOUBLE_WORD: 2,
    PremiumSquare.TRIPLE_WORD: 3,
}

def score_word(span: Span, board: Board, new_cells: Set[Cell]) -> int:
    # single tiles are not words
    if len(span) <= 1:
        return 0
    total = 0
    word_mult = 1
    for r, c in span:
        tile = board[r][c]
        letter_score = 0 if tile.isBlank else tile.points
        if (r, c) in new_cells:
            premium = premium_category(r, c)
            letter_score *= LETTER_MULTIPLIERS.get(premium, 1)
            word_mult *= WORD_MULTIPLIERS.get(premium, 1)
        total += letter_score
    return total * word_mult

def calculate_score(placements: Sequence[Placement], board: Board) -> int:
    """Points earned by a move.

    ``board`` is a working copy that already holds the placements. Premiums
    count only under tiles placed this turn: letter premiums multiply that
    tile, word premiums multiply every word the tile belongs to. Using the
    whole rack in one move adds ``BINGO_BONUS``.
    """
    new_cells = {(p.row, p.col) for p in placements}
    total = sum(score_word(span, board, new_cells) for span in word_spans(placements, board))
    if len(placements) == RACK_SIZE:
        total += BINGO_BONUS
    return total
