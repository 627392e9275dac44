from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .board import STANDARD_CELLS, CellKind, Coord, SpecialCellMap
from .moves import DerivedWord
from .schemas import BonusTile
from .tiles import letter_points

@dataclass(frozen=True)
class WordScore:
    word: str
    base: int
    word_multiplier: int
    bonus_multiplier: int
    total: int

@dataclass(frozen=True)
class TurnScore:
    words: List[WordScore]
    time_bonus: int
    total: int

    @property
    def bonus_used(self) -> bool:
        return any(w.bonus_multiplier > 1 for w in self.words)

def letter_score(letter: str, x: int, y: int, cells: SpecialCellMap = STANDARD_CELLS) -> int:
    points = letter_points(letter)
    kind = cells.classify(x, y)
    if kind is CellKind.TRIPLE_LETTER:
        points *= 3
    elif kind is CellKind.DOUBLE_LETTER:
        points *= 2
    return points

def word_multiplier(positions: Sequence[Coord], cells: SpecialCellMap = STANDARD_CELLS) -> int:
    multiplier = 1
    for x, y in positions:
        kind = cells.classify(x, y)
        if kind is CellKind.TRIPLE_WORD:
            multiplier *= 3
        elif kind is CellKind.DOUBLE_WORD:
            multiplier *= 2
    return multiplier

def bonus_multiplier(word: str, bonus: Optional[BonusTile]) -> int:
    """Matches the bonus letter anywhere in the word, not by position."""
    if bonus is None or bonus.multiplier == 0:
        return 1
    return bonus.multiplier if bonus.letter in word.upper() else 1

def score_word(
    derived: DerivedWord,
    bonus: Optional[BonusTile] = None,
    cells: SpecialCellMap = STANDARD_CELLS,
) -> WordScore:
    base = sum(
        letter_score(letter, x, y, cells)
        for letter, (x, y) in zip(derived.word, derived.positions)
    )
    w_mult = word_multiplier(derived.positions, cells)
    b_mult = bonus_multiplier(derived.word, bonus)
    return WordScore(derived.word, base, w_mult, b_mult, base * w_mult * b_mult)

def score_turn(
    words: Sequence[DerivedWord],
    bonus: Optional[BonusTile] = None,
    time_bonus: int = 0,
    cells: SpecialCellMap = STANDARD_CELLS,
) -> TurnScore:
    scored = [score_word(w, bonus, cells) for w in words]
    time_bonus = max(0, time_bonus)
    return TurnScore(scored, time_bonus, sum(w.total for w in scored) + time_bonus)
