from __future__ import annotations
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence

from ..schemas import (
    ChangeEvent,
    FeedStatus,
    GameRecord,
    LivePlacementRecord,
    PlayerRecord,
    Table,
)

OnChange = Callable[[ChangeEvent], Awaitable[None]]
OnStatus = Callable[[FeedStatus, Optional[Exception]], Awaitable[None]]

class Subscription(Protocol):
    table: Table
    game_id: str

    async def unsubscribe(self) -> None:
        """Stop delivering changes to this subscription."""
        ...

class Store(Protocol):
    """Authoritative record store shared by every client of a game.

    Each write stamps the record with a store-wide increasing revision.
    """

    async def get_game(self, game_id: str) -> Optional[GameRecord]:
        """Get game by ID, if record exists."""
        ...

    async def insert_game(self, game: GameRecord) -> GameRecord:
        """Store a new game and return the stored row."""
        ...

    async def update_game(self, game_id: str, **fields) -> GameRecord:
        """Overwrite the given columns of an existing game."""
        ...

    async def list_players(self, game_id: str) -> List[PlayerRecord]:
        """Players of a game ordered by join order."""
        ...

    async def insert_player(self, player: PlayerRecord) -> PlayerRecord:
        """Add a player; names are unique within a game."""
        ...

    async def update_player(self, player_id: str, **fields) -> PlayerRecord:
        """Overwrite the given columns of an existing player."""
        ...

    async def list_placements(self, game_id: str) -> List[LivePlacementRecord]:
        """Every live placement of a game."""
        ...

    async def upsert_placements(self, placements: Sequence[LivePlacementRecord]) -> None:
        """Insert or replace rows keyed by (game, player, x, y)."""
        ...

    async def delete_placements(self, game_id: str, player_id: Optional[str] = None) -> int:
        """Remove the live placements of one player, or of the whole game."""
        ...

    async def subscribe(
        self, table: Table, game_id: str, on_change: OnChange, on_status: OnStatus
    ) -> Subscription:
        """Deliver every change of ``table`` scoped to ``game_id``."""
        ...
