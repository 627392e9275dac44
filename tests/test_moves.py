"""Unit tests for wordgrid/moves.py"""

import pytest

from wordgrid.board import Board
from wordgrid.errors import GapInPlacementError, InvalidWordError, NotInLineError, UserInputError
from wordgrid.moves import (
    ACROSS,
    DOWN,
    DerivedWord,
    PendingTile,
    extract_words,
    placement_axis,
    sort_tiles,
    validate_words,
)


def lay(board: Board, tiles):
    for tile in tiles:
        board.set(tile.x, tile.y, tile.letter)
    return board


def test_sort_tiles_by_row_then_column():
    tiles = [PendingTile(3, 1, 'C'), PendingTile(1, 1, 'A'), PendingTile(0, 2, 'Z')]
    assert [t.letter for t in sort_tiles(tiles)] == ['A', 'C', 'Z']


class TestPlacementAxis:
    def test_row(self):
        assert placement_axis([PendingTile(1, 4, 'A'), PendingTile(2, 4, 'B')]) == ACROSS

    def test_column(self):
        assert placement_axis([PendingTile(1, 4, 'A'), PendingTile(1, 5, 'B')]) == DOWN

    def test_single_tile_reads_across(self):
        assert placement_axis([PendingTile(1, 4, 'A')]) == ACROSS

    def test_not_collinear(self):
        with pytest.raises(NotInLineError):
            placement_axis([PendingTile(0, 0, 'A'), PendingTile(1, 1, 'B')])

    def test_empty(self):
        with pytest.raises(UserInputError):
            placement_axis([])


class TestExtractWords:
    def test_main_word_on_empty_board(self):
        pending = [PendingTile(7, 7, 'C'), PendingTile(8, 7, 'A'), PendingTile(9, 7, 'T')]
        words = extract_words(pending, lay(Board(), pending))
        assert words == [DerivedWord('CAT', ((7, 7), (8, 7), (9, 7)))]

    def test_main_word_extends_through_existing_tiles(self):
        board = Board()
        board.set(7, 7, 'C')
        board.set(8, 7, 'A')
        pending = [PendingTile(9, 7, 'T'), PendingTile(10, 7, 'S')]
        words = extract_words(pending, lay(board, pending))
        assert [w.word for w in words] == ['CATS']

    def test_vertical_main_word(self):
        pending = [PendingTile(2, 3, 'T'), PendingTile(2, 2, 'A')]
        words = extract_words(pending, lay(Board(), pending))
        assert words[0].word == 'AT'
        assert words[0].positions == ((2, 2), (2, 3))

    def test_cross_words_follow_main_word(self):
        board = Board()
        # existing DOG down column 5, rows 0..2
        for y, letter in enumerate('DOG'):
            board.set(5, y, letter)
        pending = [PendingTile(4, 3, 'T'), PendingTile(5, 3, 'S')]
        words = extract_words(pending, lay(board, pending))
        assert [w.word for w in words] == ['TS', 'DOGS']

    def test_single_tile_has_no_one_letter_cross_word(self):
        board = Board()
        board.set(0, 0, 'A')
        pending = [PendingTile(1, 0, 'T')]
        words = extract_words(pending, lay(board, pending))
        assert [w.word for w in words] == ['AT']

    def test_lone_tile_under_vertical_word_reads_across_first(self):
        board = Board()
        board.set(0, 0, 'D')
        board.set(0, 1, 'O')
        pending = [PendingTile(0, 2, 'G')]
        words = extract_words(pending, lay(board, pending))
        assert [w.word for w in words] == ['G', 'DOG']
        with pytest.raises(InvalidWordError) as info:
            validate_words(words, lambda w: w in {'DOG', 'GO'})
        assert info.value.word == 'G'

    def test_gap_rejected(self):
        pending = [PendingTile(0, 0, 'C'), PendingTile(2, 0, 'T')]
        with pytest.raises(GapInPlacementError):
            extract_words(pending, lay(Board(), pending))

    def test_non_collinear_leaves_board_alone(self):
        board = Board()
        pending = [PendingTile(0, 0, 'A'), PendingTile(1, 1, 'B')]
        lay(board, pending)
        before = board.to_state()
        with pytest.raises(NotInLineError):
            extract_words(pending, board)
        assert board.to_state() == before


def test_validate_words_is_all_or_nothing():
    words = [DerivedWord('CAT', ()), DerivedWord('ZZZQ', ())]
    with pytest.raises(InvalidWordError) as info:
        validate_words(words, lambda w: w == 'CAT')
    assert info.value.word == 'ZZZQ'
    validate_words(words[:1], lambda w: w == 'CAT')
