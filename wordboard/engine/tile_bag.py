from __future__ import annotations
import random
from typing import Dict, Iterable, List, Optional

from ..schemas import BLANK, Tile

RACK_SIZE = 7

LETTER_VALUES: Dict[str, int] = {
    'A': 1, 'B': 3, 'C': 3, 'D': 2, 'E': 1, 'F': 4, 'G': 2, 'H': 4,
    'I': 1, 'J': 8, 'K': 5, 'L': 1, 'M': 3, 'N': 1, 'O': 1, 'P': 3,
    'Q': 10, 'R': 1, 'S': 1, 'T': 1, 'U': 1, 'V': 4, 'W': 4, 'X': 8,
    'Y': 4, 'Z': 10, BLANK: 0,
}

DISTRIBUTION: Dict[str, int] = {
    'A': 9, 'B': 2, 'C': 2, 'D': 4, 'E': 12, 'F': 2, 'G': 3, 'H': 2,
    'I': 9, 'J': 1, 'K': 1, 'L': 4, 'M': 2, 'N': 6, 'O': 8, 'P': 2,
    'Q': 1, 'R': 6, 'S': 4, 'T': 6, 'U': 4, 'V': 2, 'W': 2, 'X': 1,
    'Y': 2, 'Z': 1, BLANK: 2,
}

def make_tile(letter: str, is_blank: bool = False) -> Tile:
    """Tile with its official point value. Blanks are always worth 0, assigned letter or not."""
    if is_blank or letter == BLANK:
        return Tile(letter=letter, points=0, isBlank=True)
    return Tile(letter=letter, points=LETTER_VALUES[letter], isBlank=False)

def new_tile_bag(rng: Optional[random.Random] = None) -> List[Tile]:
    tiles = [make_tile(letter) for letter, count in DISTRIBUTION.items() for _ in range(count)]
    (rng or random).shuffle(tiles)
    return tiles

def draw(bag: List[Tile], n: int) -> List[Tile]:
    # takes from the front; an empty bag simply yields nothing
    count = max(0, min(n, len(bag)))
    drawn = bag[:count]
    del bag[:count]
    return drawn

def return_and_shuffle(bag: List[Tile], tiles: Iterable[Tile], rng: Optional[random.Random] = None) -> None:
    bag.extend(tiles)
    (rng or random).shuffle(bag)

def rack_points(tiles: Iterable[Tile]) -> int:
    return sum(t.points for t in tiles)
