from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

SIZE = 15
BLANK = '_'

Coord = Tuple[int, int]
BoardState = List[List[Optional[str]]]

class CellKind(str, Enum):
    PLAIN = 'plain'
    TRIPLE_WORD = 'triple_word'
    DOUBLE_WORD = 'double_word'
    TRIPLE_LETTER = 'triple_letter'
    DOUBLE_LETTER = 'double_letter'

_TRIPLE_WORD = [(0, 0), (0, 7), (0, 14), (7, 0), (7, 14), (14, 0), (14, 7), (14, 14)]
_DOUBLE_WORD = [(1, 1), (2, 2), (3, 3), (4, 4), (13, 13), (12, 12), (11, 11), (10, 10)]
_TRIPLE_LETTER = [
    (1, 5), (1, 9), (5, 1), (5, 5), (5, 9), (5, 13),
    (9, 1), (9, 5), (9, 9), (9, 13), (13, 5), (13, 9),
]
_DOUBLE_LETTER = [
    (0, 3), (0, 11), (2, 6), (2, 8), (3, 0), (3, 7), (3, 14),
    (6, 2), (6, 6), (6, 8), (6, 12), (7, 3), (7, 11),
    (8, 2), (8, 6), (8, 8), (8, 12), (11, 0), (11, 7), (11, 14),
    (12, 6), (12, 8), (14, 3), (14, 11),
]

@dataclass(frozen=True)
class SpecialCellMap:
    """Static membership of the four premium categories.

    The categories are expected to be disjoint; this is not checked.
    """

    triple_word: frozenset = field(default_factory=frozenset)
    double_word: frozenset = field(default_factory=frozenset)
    triple_letter: frozenset = field(default_factory=frozenset)
    double_letter: frozenset = field(default_factory=frozenset)

    @classmethod
    def of(
        cls,
        triple_word: Sequence[Coord] = (),
        double_word: Sequence[Coord] = (),
        triple_letter: Sequence[Coord] = (),
        double_letter: Sequence[Coord] = (),
    ) -> 'SpecialCellMap':
        return cls(
            frozenset(triple_word),
            frozenset(double_word),
            frozenset(triple_letter),
            frozenset(double_letter),
        )

    def classify(self, x: int, y: int) -> CellKind:
        pos = (x, y)
        if pos in self.triple_word:
            return CellKind.TRIPLE_WORD
        if pos in self.double_word:
            return CellKind.DOUBLE_WORD
        if pos in self.triple_letter:
            return CellKind.TRIPLE_LETTER
        if pos in self.double_letter:
            return CellKind.DOUBLE_LETTER
        return CellKind.PLAIN

STANDARD_CELLS = SpecialCellMap.of(_TRIPLE_WORD, _DOUBLE_WORD, _TRIPLE_LETTER, _DOUBLE_LETTER)

def classify(x: int, y: int, cells: SpecialCellMap = STANDARD_CELLS) -> CellKind:
    return cells.classify(x, y)

def empty_board_state() -> BoardState:
    return [[None for _ in range(SIZE)] for _ in range(SIZE)]

def in_bounds(x: int, y: int) -> bool:
    return 0 <= x < SIZE and 0 <= y < SIZE

class Board:
    """Mutable grid of optional letters.

    Coordinates are ``(x, y)`` with ``x`` the column; the grid is stored
    row-major, so ``(x, y)`` lives in ``grid[y][x]``.
    """

    def __init__(self, state: Optional[BoardState] = None):
        self._grid: BoardState = empty_board_state()
        if state:
            for y, row in enumerate(state[:SIZE]):
                for x, letter in enumerate(row[:SIZE]):
                    self._grid[y][x] = letter or None

    def get(self, x: int, y: int) -> Optional[str]:
        if not in_bounds(x, y):
            return None
        return self._grid[y][x]

    def is_occupied(self, x: int, y: int) -> bool:
        return self.get(x, y) is not None

    def set(self, x: int, y: int, letter: Optional[str]) -> None:
        if not in_bounds(x, y):
            raise IndexError(f'({x}, {y}) is off the board')
        self._grid[y][x] = letter

    def copy(self) -> 'Board':
        return Board(self._grid)

    def cells(self) -> Iterator[Tuple[int, int, str]]:
        """Yield ``(x, y, letter)`` for every occupied cell."""
        for y, row in enumerate(self._grid):
            for x, letter in enumerate(row):
                if letter is not None:
                    yield x, y, letter

    def to_state(self) -> BoardState:
        return [list(row) for row in self._grid]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._grid == other._grid

    def __repr__(self) -> str:
        return f'Board({sum(1 for _ in self.cells())} tiles)'
