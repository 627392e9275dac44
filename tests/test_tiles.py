"""Unit tests for wordgrid/tiles.py"""

import random
from collections import Counter

import pytest

from wordgrid.board import BLANK
from wordgrid.errors import InsufficientTilesError
from wordgrid.tiles import (
    LETTER_DISTRIBUTION,
    LETTERS,
    draw,
    draw_exact,
    letter_points,
    new_tile_bag,
    shuffle,
    with_random_blank,
)


def test_bag_has_standard_distribution():
    bag = new_tile_bag(random.Random(1))
    assert len(bag) == 100
    counts = Counter(bag)
    assert counts['E'] == 12
    assert counts[BLANK] == 2
    assert counts == Counter({letter: info.count for letter, info in LETTER_DISTRIBUTION.items()})


def test_shuffle_keeps_multiset_and_input():
    tiles = list('AABBCCDD')
    shuffled = shuffle(tiles, random.Random(3))
    assert sorted(shuffled) == sorted(tiles)
    assert tiles == list('AABBCCDD')


def test_letter_points():
    assert letter_points('Q') == 10
    assert letter_points('a') == 1
    assert letter_points(BLANK) == 0
    assert letter_points('?') == 0


def test_letters_exclude_blank():
    assert len(LETTERS) == 26
    assert BLANK not in LETTERS


class TestDraw:
    def test_draw_reconstitutes_bag(self):
        bag = new_tile_bag(random.Random(5))
        drawn, remaining = draw(7, bag)
        assert len(drawn) == 7
        assert drawn + remaining == bag

    def test_draw_past_end_is_silent(self):
        drawn, remaining = draw(5, ['A', 'B'])
        assert drawn == ['A', 'B']
        assert remaining == []

    def test_draw_exact_raises_with_partial_draw(self):
        with pytest.raises(InsufficientTilesError) as info:
            draw_exact(3, ['X'])
        assert info.value.drawn == ['X']
        assert info.value.requested == 3

    def test_draw_exact(self):
        assert draw_exact(2, ['A', 'B', 'C']) == (['A', 'B'], ['C'])


class TestRandomBlank:
    def test_zero_chance_leaves_tiles(self):
        assert with_random_blank(['A', 'B'], 0.0, random.Random(1)) == ['A', 'B']

    def test_certain_chance_swaps_one_tile(self):
        tiles = with_random_blank(['A', 'B', 'C'], 1.0, random.Random(1))
        assert tiles.count(BLANK) == 1
        assert len(tiles) == 3

    def test_empty_draw(self):
        assert with_random_blank([], 1.0, random.Random(1)) == []
