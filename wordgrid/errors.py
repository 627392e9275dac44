from __future__ import annotations
from typing import List, Optional

class WordGridError(Exception):
    """Base class for every error the engine raises on purpose."""

# --- User input (rejected locally, nothing mutated) ---
class UserInputError(WordGridError):
    pass

class NotYourTurnError(UserInputError):
    def __init__(self, message: str = "It's not your turn") -> None:
        super().__init__(message)

class NotInLineError(UserInputError):
    def __init__(self, message: str = 'Tiles must be placed in a straight line') -> None:
        super().__init__(message)

class GapInPlacementError(UserInputError):
    def __init__(self, message: str = 'Tiles must form one continuous word') -> None:
        super().__init__(message)

# --- Word validation ---
class InvalidWordError(WordGridError):
    def __init__(self, word: str) -> None:
        super().__init__(f'"{word}" is not a valid word')
        self.word = word

class LexiconNotLoadedError(WordGridError):
    def __init__(self, message: str = 'Dictionary not loaded. Please wait...') -> None:
        super().__init__(message)

# --- Join-time limits ---
class ResourceExhaustionError(WordGridError):
    pass

class NameTakenError(ResourceExhaustionError):
    def __init__(self, name: str) -> None:
        super().__init__(
            f'A player named "{name}" is already in this game. Please choose a different name.'
        )
        self.name = name

class GameFullError(ResourceExhaustionError):
    def __init__(self, message: str = 'Game is full') -> None:
        super().__init__(message)

class InsufficientTilesError(WordGridError):
    """The bag ran out before ``requested`` tiles could be drawn."""

    def __init__(self, requested: int, drawn: List[str]) -> None:
        super().__init__(f'Requested {requested} tiles but only {len(drawn)} left in the bag')
        self.requested = requested
        self.drawn = drawn

# --- Store ---
class StoreError(WordGridError):
    code = 'store_error'

class DuplicateKeyError(StoreError):
    code = 'duplicate_key'

class RecordNotFoundError(StoreError):
    code = 'not_found'

STORE_ERRORS = {cls.code: cls for cls in (StoreError, DuplicateKeyError, RecordNotFoundError)}

def store_error_from_code(code: Optional[str], message: str) -> StoreError:
    """Rebuild a store error received over the wire."""
    return STORE_ERRORS.get(code or '', StoreError)(message)

class PersistenceError(WordGridError):
    """The writes backing a submitted turn failed."""
