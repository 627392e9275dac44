from __future__ import annotations
import logging
from typing import Dict, Iterable, Tuple

from ..errors import StoreError
from ..moves import PendingTile
from ..schemas import LivePlacementRecord
from ..store.base import Store

logger = logging.getLogger(__name__)

class LivePlacementPublisher:
    """Mirrors one player's unsubmitted tiles so the other clients can draw them.

    Purely advisory: store failures are logged and never reach the caller.
    """

    def __init__(self, store: Store, game_id: str, player_id: str):
        self.store = store
        self.game_id = game_id
        self.player_id = player_id

    def records(self, pending: Iterable[PendingTile]) -> list[LivePlacementRecord]:
        # one row per cell; a later tile on the same cell wins
        unique: Dict[Tuple[int, int], LivePlacementRecord] = {}
        for tile in pending:
            unique[(tile.x, tile.y)] = LivePlacementRecord(
                game_id=self.game_id, player_id=self.player_id,
                x=tile.x, y=tile.y, letter=tile.letter,
            )
        return list(unique.values())

    async def publish(self, pending: Iterable[PendingTile]) -> None:
        """Replace everything previously published for this player."""
        rows = self.records(pending)
        try:
            await self.store.delete_placements(self.game_id, self.player_id)
            if rows:
                await self.store.upsert_placements(rows)
        except StoreError as exc:
            logger.warning('Failed to update live placements for %s: %s', self.player_id, exc)

    async def retract(self) -> None:
        try:
            await self.store.delete_placements(self.game_id, self.player_id)
        except StoreError as exc:
            logger.warning('Failed to clear live placements for %s: %s', self.player_id, exc)
        else:
            logger.debug('Cleared live placements for %s', self.player_id)
