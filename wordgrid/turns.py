from __future__ import annotations
import random
from typing import Optional, Sequence

from .schemas import BonusTile
from .tiles import LETTERS

# Cumulative thresholds: 15% blank bonus, 55% double, 30% triple
_BLANK_BONUS_BELOW = 0.15
_DOUBLE_BELOW = 0.70

def next_player_id(player_ids: Sequence[str], current_id: Optional[str]) -> Optional[str]:
    """Strict round-robin in join order.

    An unknown current player hands the turn to the first player.
    """
    if not player_ids:
        return None
    try:
        index = list(player_ids).index(current_id)
    except ValueError:
        index = -1
    return player_ids[(index + 1) % len(player_ids)]

def generate_bonus_tile(rng: Optional[random.Random] = None) -> BonusTile:
    rng = rng or random
    letter = rng.choice(LETTERS)
    roll = rng.random()
    if roll < _BLANK_BONUS_BELOW:
        multiplier = 0
    elif roll < _DOUBLE_BELOW:
        multiplier = 2
    else:
        multiplier = 3
    return BonusTile(letter=letter, multiplier=multiplier)
