from __future__ import annotations
import asyncio
import logging
from typing import Iterable, Optional, Set

import requests

from .config import Config
from .errors import LexiconNotLoadedError

logger = logging.getLogger(__name__)

MAX_LOAD_ATTEMPTS = 3

# Always available, so basic play works even when the full list can't be fetched
COMMON_WORDS = {
    'BLOG', 'FOX', 'DOOR', 'DOORS', 'CAT', 'DOG', 'HOUSE', 'COMPUTER', 'GAME',
    'PLAY', 'WORD', 'SCRABBLE', 'TILE', 'SCORE', 'BONUS', 'BOARD', 'PLAYER',
    'TURN', 'LETTER', 'POINT',
}

def parse_word_list(text: str) -> Set[str]:
    return {line.strip().upper() for line in text.splitlines() if line.strip()}

class Lexicon:
    """Word list the engine validates against.

    Nothing validates until ``load`` has run; before that every lookup raises
    ``LexiconNotLoadedError`` rather than quietly rejecting the word.
    """

    def __init__(self, words: Optional[Iterable[str]] = None, source_url: Optional[str] = Config.DICTIONARY_URL,
                 timeout: float = Config.DICTIONARY_TIMEOUT_SEC):
        self.source_url = source_url
        self.timeout = timeout
        self.load_attempts = 0
        self.full_list_loaded = False
        self._seed: Set[str] = {w.upper() for w in (words or COMMON_WORDS)}
        self._words: Optional[Set[str]] = None
        self._loading = False

    @classmethod
    def from_words(cls, words: Iterable[str]) -> 'Lexicon':
        """A lexicon that is ready immediately and never fetches."""
        lexicon = cls(words, source_url=None)
        lexicon._words = set(lexicon._seed)
        return lexicon

    @property
    def loaded(self) -> bool:
        return self._words is not None

    def __len__(self) -> int:
        return len(self._words or ())

    async def load(self) -> bool:
        if self._loading:
            return False
        if self.full_list_loaded or (self.loaded and not self.source_url):
            return True

        self._loading = True
        self.load_attempts += 1
        try:
            self._words = set(self._seed)
            logger.info('Basic dictionary loaded with %d words', len(self._words))
            if self.source_url:
                await self._load_full_list()
            return True
        finally:
            self._loading = False

    async def _load_full_list(self):
        try:
            text = await asyncio.to_thread(self._fetch, self.source_url)
        except requests.RequestException as exc:
            if self.load_attempts >= MAX_LOAD_ATTEMPTS:
                logger.error('Unable to load full dictionary, using basic word list: %s', exc)
            else:
                logger.warning('Failed to load full dictionary, falling back to common words: %s', exc)
            return
        self._words = self._seed | parse_word_list(text)
        self.full_list_loaded = True
        logger.info('Full dictionary loaded with %d words', len(self._words))

    def _fetch(self, url: str) -> str:
        response = requests.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.text

    def is_valid_word(self, word: str) -> bool:
        if self._words is None:
            raise LexiconNotLoadedError()
        if not word:
            return False
        is_valid = word.upper() in self._words
        logger.debug('Checking word: %s, valid: %s', word.upper(), is_valid)
        return is_valid

    def word_exists(self, word: str) -> bool:
        """Like ``is_valid_word`` but never raises."""
        if self._words is None or not word:
            return False
        return word.upper() in self._words
