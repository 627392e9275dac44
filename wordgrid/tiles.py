from __future__ import annotations
import random
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from .board import BLANK
from .errors import InsufficientTilesError

class LetterInfo(NamedTuple):
    count: int
    points: int

# Standard distribution: 100 tiles, two blanks worth nothing
LETTER_DISTRIBUTION: Dict[str, LetterInfo] = {
    'A': LetterInfo(9, 1), 'B': LetterInfo(2, 3), 'C': LetterInfo(2, 3),
    'D': LetterInfo(4, 2), 'E': LetterInfo(12, 1), 'F': LetterInfo(2, 4),
    'G': LetterInfo(3, 2), 'H': LetterInfo(2, 4), 'I': LetterInfo(9, 1),
    'J': LetterInfo(1, 8), 'K': LetterInfo(1, 5), 'L': LetterInfo(4, 1),
    'M': LetterInfo(2, 3), 'N': LetterInfo(6, 1), 'O': LetterInfo(8, 1),
    'P': LetterInfo(2, 3), 'Q': LetterInfo(1, 10), 'R': LetterInfo(6, 1),
    'S': LetterInfo(4, 1), 'T': LetterInfo(6, 1), 'U': LetterInfo(4, 1),
    'V': LetterInfo(2, 4), 'W': LetterInfo(2, 4), 'X': LetterInfo(1, 8),
    'Y': LetterInfo(2, 4), 'Z': LetterInfo(1, 10),
    BLANK: LetterInfo(2, 0),
}

LETTERS = [letter for letter in LETTER_DISTRIBUTION if letter != BLANK]

def letter_points(letter: str) -> int:
    if letter == BLANK:
        return 0
    info = LETTER_DISTRIBUTION.get(letter.upper())
    return info.points if info else 0

def shuffle(tiles: Sequence[str], rng: Optional[random.Random] = None) -> List[str]:
    """Fisher-Yates shuffle into a new list."""
    rng = rng or random
    shuffled = list(tiles)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled

def new_tile_bag(rng: Optional[random.Random] = None) -> List[str]:
    tiles: List[str] = []
    for letter, info in LETTER_DISTRIBUTION.items():
        tiles.extend([letter] * info.count)
    return shuffle(tiles, rng)

def draw(count: int, bag: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Take ``count`` tiles from the front of the bag.

    Asking for more than is left returns everything and an empty remainder.
    """
    count = max(0, count)
    return list(bag[:count]), list(bag[count:])

def draw_exact(count: int, bag: Sequence[str]) -> Tuple[List[str], List[str]]:
    drawn, remaining = draw(count, bag)
    if len(drawn) < count:
        raise InsufficientTilesError(count, drawn)
    return drawn, remaining

def with_random_blank(drawn: Sequence[str], chance: float, rng: Optional[random.Random] = None) -> List[str]:
    """Maybe overwrite one random slot with a blank."""
    rng = rng or random
    tiles = list(drawn)
    if tiles and rng.random() < chance:
        tiles[rng.randrange(len(tiles))] = BLANK
    return tiles
