from __future__ import annotations
import re
from typing import List, Sequence, Set, Tuple

from ..schemas import Placement
from .board import BOARD_SIZE, CENTER, Board, in_bounds
from .errors import InvalidPlacementError, PlacementRule

# A-Z or the blank marker, exactly one character
TILE_LETTER = re.compile(r'[A-Z_]')

def validate_placement(placements: Sequence[Placement], board: Board, is_first_move: bool) -> bool:
    """Check a candidate move against the board rules.

    Rules are applied in a fixed order and the first one broken raises
    ``InvalidPlacementError`` carrying the matching ``PlacementRule``.
    Nothing is written to ``board``; callers apply the placements only
    after this returns ``True``.
    """
    if not placements:
        raise InvalidPlacementError(PlacementRule.NO_TILES, 'No tiles placed')

    for p in placements:
        if not 0 <= p.row < BOARD_SIZE:
            raise InvalidPlacementError(PlacementRule.OUT_OF_BOUNDS, 'Invalid row')
        if not 0 <= p.col < BOARD_SIZE:
            raise InvalidPlacementError(PlacementRule.OUT_OF_BOUNDS, 'Invalid column')

    targeted: Set[Tuple[int, int]] = set()
    for p in placements:
        pos = (p.row, p.col)
        if board[p.row][p.col] is not None or pos in targeted:
            raise InvalidPlacementError(PlacementRule.OCCUPIED, 'Square already occupied')
        targeted.add(pos)

    for p in placements:
        if not TILE_LETTER.fullmatch(p.tile.letter):
            raise InvalidPlacementError(
                PlacementRule.INVALID_LETTER,
                'Invalid tile letter: Tile letter must be A-Z or _ (blank)',
            )

    same_row = all(p.row == placements[0].row for p in placements)
    same_col = all(p.col == placements[0].col for p in placements)
    if not same_row and not same_col:
        raise InvalidPlacementError(PlacementRule.NOT_IN_LINE, 'Tiles must form a single line')

    if same_row:
        row = placements[0].row
        cols = sorted(p.col for p in placements)
        cells = [(row, c) for c in range(cols[0], cols[-1] + 1)]
    else:
        col = placements[0].col
        rows = sorted(p.row for p in placements)
        cells = [(r, col) for r in range(rows[0], rows[-1] + 1)]
    for r, c in cells:
        if (r, c) not in targeted and board[r][c] is None:
            raise InvalidPlacementError(PlacementRule.GAP, 'Gap in word')

    if is_first_move:
        if CENTER not in targeted:
            raise InvalidPlacementError(PlacementRule.OFF_CENTER, 'First word must touch center')
    elif not any(_touches_existing(p, board) for p in placements):
        raise InvalidPlacementError(PlacementRule.DISCONNECTED, 'Word must connect to existing tiles')

    return True

def _touches_existing(p: Placement, board: Board) -> bool:
    neighbours: List[Tuple[int, int]] = [
        (p.row - 1, p.col), (p.row + 1, p.col), (p.row, p.col - 1), (p.row, p.col + 1),
    ]
    return any(in_bounds(r, c) and board[r][c] is not None for r, c in neighbours)
