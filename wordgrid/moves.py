from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from .board import Board, Coord
from .errors import GapInPlacementError, InvalidWordError, NotInLineError, UserInputError

ACROSS = (1, 0)
DOWN = (0, 1)

@dataclass(frozen=True)
class PendingTile:
    x: int
    y: int
    letter: str

@dataclass(frozen=True)
class DerivedWord:
    word: str
    positions: Tuple[Coord, ...]

def sort_tiles(tiles: Sequence[PendingTile]) -> List[PendingTile]:
    """Order by row, then column."""
    return sorted(tiles, key=lambda t: (t.y, t.x))

def placement_axis(tiles: Sequence[PendingTile]) -> Tuple[int, int]:
    """Return ACROSS or DOWN for tiles sharing a row or a column.

    A single tile shares both and is always read across, so a lone tile that
    only extends a vertical word yields a one-letter main word (which the
    lexicon then rejects) ahead of the vertical cross word.
    """
    if not tiles:
        raise UserInputError('Place at least one tile first')
    first = tiles[0]
    if all(t.y == first.y for t in tiles):
        return ACROSS
    if all(t.x == first.x for t in tiles):
        return DOWN
    raise NotInLineError()

def run_through(board: Board, x: int, y: int, axis: Tuple[int, int]) -> List[Coord]:
    """Contiguous occupied cells along ``axis`` that contain ``(x, y)``."""
    dx, dy = axis
    start_x, start_y = x, y
    while board.is_occupied(start_x - dx, start_y - dy):
        start_x, start_y = start_x - dx, start_y - dy
    positions: List[Coord] = []
    cx, cy = start_x, start_y
    while board.is_occupied(cx, cy):
        positions.append((cx, cy))
        cx, cy = cx + dx, cy + dy
    return positions

def _word_at(board: Board, positions: Sequence[Coord]) -> DerivedWord:
    letters = ''.join(board.get(x, y) or '' for x, y in positions)
    return DerivedWord(letters, tuple(positions))

def extract_words(pending: Sequence[PendingTile], board: Board) -> List[DerivedWord]:
    """Main word first, then one cross word per tile whose perpendicular run is longer than one.

    ``board`` must already hold the pending tiles.
    """
    tiles = sort_tiles(pending)
    axis = placement_axis(tiles)
    cross_axis = DOWN if axis == ACROSS else ACROSS

    first = tiles[0]
    main = run_through(board, first.x, first.y, axis)
    covered = set(main)
    if any((t.x, t.y) not in covered for t in tiles):
        raise GapInPlacementError()

    words = [_word_at(board, main)]
    for tile in tiles:
        cross = run_through(board, tile.x, tile.y, cross_axis)
        if len(cross) > 1:
            words.append(_word_at(board, cross))
    return words

def validate_words(words: Sequence[DerivedWord], is_valid_word: Callable[[str], bool]) -> None:
    """All or nothing: the first word the lexicon rejects aborts the submission."""
    for derived in words:
        if not is_valid_word(derived.word):
            raise InvalidWordError(derived.word)
