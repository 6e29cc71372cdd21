from __future__ import annotations
from typing import Container, List, Sequence, Tuple

from ..schemas import Placement
from .board import Board, in_bounds

Cell = Tuple[int, int]
Span = List[Cell]

HORIZONTAL = (0, 1)
VERTICAL = (1, 0)

def move_direction(placements: Sequence[Placement], board: Board) -> Tuple[int, int]:
    """Axis the move is laid along, as a (dr, dc) step.

    A lone tile has no axis of its own; it takes the axis of whichever
    neighbours it touches, preferring horizontal.
    """
    if len({p.row for p in placements}) == 1 and len(placements) > 1:
        return HORIZONTAL
    if len({p.col for p in placements}) == 1 and len(placements) > 1:
        return VERTICAL
    p = placements[0]
    if _occupied(board, p.row, p.col - 1) or _occupied(board, p.row, p.col + 1):
        return HORIZONTAL
    if _occupied(board, p.row - 1, p.col) or _occupied(board, p.row + 1, p.col):
        return VERTICAL
    return HORIZONTAL

def _occupied(board: Board, r: int, c: int) -> bool:
    return in_bounds(r, c) and board[r][c] is not None

def walk(board: Board, row: int, col: int, dr: int, dc: int) -> Span:
    """Contiguous run of occupied cells through (row, col) along (dr, dc)."""
    while _occupied(board, row - dr, col - dc):
        row, col = row - dr, col - dc
    span: Span = []
    while _occupied(board, row, col):
        span.append((row, col))
        row, col = row + dr, col + dc
    return span

def word_spans(placements: Sequence[Placement], board: Board) -> List[Span]:
    """Cells of every word the move forms: the primary word first, then cross words in placement order.

    ``board`` must already contain the placements. Cross words shorter than
    two letters are left out; the primary word is always present.
    """
    dr, dc = move_direction(placements, board)
    first = min(placements, key=lambda p: (p.row, p.col))
    spans = [walk(board, first.row, first.col, dr, dc)]
    for p in placements:
        cross = walk(board, p.row, p.col, dc, dr)
        if len(cross) > 1:
            spans.append(cross)
    return spans

def spell(span: Span, board: Board) -> str:
    return ''.join(board[r][c].letter for r, c in span)

def extract_words(placements: Sequence[Placement], board: Board) -> List[str]:
    """Words formed by a validated move, read off a working copy that already holds it."""
    return [spell(span, board) for span in word_spans(placements, board)]

def find_invalid_words(words: Sequence[str], dictionary: Container[str]) -> List[str]:
    return [w for w in words if w.upper() not in dictionary]
