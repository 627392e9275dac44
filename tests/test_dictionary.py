"""Unit tests for wordgrid/dictionary.py"""

import asyncio

import pytest
import requests

from wordgrid.dictionary import COMMON_WORDS, MAX_LOAD_ATTEMPTS, Lexicon, parse_word_list
from wordgrid.errors import LexiconNotLoadedError


def test_parse_word_list():
    assert parse_word_list('cat\n  Dog \n\nZA\n') == {'CAT', 'DOG', 'ZA'}


def test_lookups_blocked_until_loaded():
    lexicon = Lexicon(source_url=None)
    assert not lexicon.loaded
    with pytest.raises(LexiconNotLoadedError):
        lexicon.is_valid_word('CAT')
    assert not lexicon.word_exists('CAT')


def test_from_words_is_ready_and_case_insensitive():
    lexicon = Lexicon.from_words(['cat'])
    assert lexicon.loaded
    assert lexicon.is_valid_word('Cat')
    assert not lexicon.is_valid_word('')
    assert not lexicon.is_valid_word('DOG')


def test_full_list_merged_with_seed():
    lexicon = Lexicon(source_url='http://words.invalid/list.txt')
    lexicon._fetch = lambda url: 'zebra\nquartz\n'
    assert asyncio.run(lexicon.load())
    assert lexicon.full_list_loaded
    assert lexicon.is_valid_word('ZEBRA')
    assert lexicon.is_valid_word('SCRABBLE')
    assert len(lexicon) == len(COMMON_WORDS) + 2


def test_fetch_failure_falls_back_to_common_words():
    lexicon = Lexicon(source_url='http://words.invalid/list.txt')

    def fail(url):
        raise requests.ConnectionError('offline')

    lexicon._fetch = fail
    for _ in range(MAX_LOAD_ATTEMPTS):
        assert asyncio.run(lexicon.load())
    assert lexicon.load_attempts == MAX_LOAD_ATTEMPTS
    assert not lexicon.full_list_loaded
    assert lexicon.is_valid_word('CAT')
    assert not lexicon.is_valid_word('ZEBRA')


def test_no_url_keeps_seed_only():
    lexicon = Lexicon(['fox'], source_url=None)
    asyncio.run(lexicon.load())
    assert lexicon.is_valid_word('FOX')
    assert not lexicon.is_valid_word('CAT')
