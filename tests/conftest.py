"""
Shared fixtures. Async scenarios are driven with ``asyncio.run`` so every test
owns its event loop.
"""

import asyncio
import random
from typing import Callable, List, Tuple

import pytest

from wordgrid.dictionary import Lexicon
from wordgrid.managers.session import GameSession
from wordgrid.store.memory import InMemoryStore

TEST_WORDS = ['CAT', 'CATS', 'AT', 'TA', 'DOG', 'DOGS', 'GO', 'TO', 'ZA']


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class Notices:
    def __init__(self) -> None:
        self.received: List[Tuple[str, str]] = []

    def __call__(self, kind: str, message: str) -> None:
        self.received.append((kind, message))

    def kinds(self) -> List[str]:
        return [kind for kind, _ in self.received]


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def lexicon() -> Lexicon:
    return Lexicon.from_words(TEST_WORDS)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_session(store, lexicon, clock) -> Callable[..., GameSession]:
    """Sessions sharing one store, lexicon and clock, as clients of the same game would."""

    def factory(seed: int = 7, **kwargs) -> GameSession:
        kwargs.setdefault('clock', clock)
        return GameSession(store, lexicon, rng=random.Random(seed), **kwargs)

    return factory


@pytest.fixture
def make_notices() -> Callable[[], Notices]:
    return Notices
