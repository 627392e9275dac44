from __future__ import annotations
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import DuplicateKeyError, RecordNotFoundError
from ..schemas import (
    ChangeEvent,
    ChangeKind,
    FeedStatus,
    GameRecord,
    LivePlacementRecord,
    PlayerRecord,
    Table,
)
from .base import OnChange, OnStatus

logger = logging.getLogger(__name__)

PlacementKey = Tuple[str, str, int, int]

class MemorySubscription:
    def __init__(self, store: 'InMemoryStore', table: Table, game_id: str,
                 on_change: OnChange, on_status: OnStatus):
        self.table = table
        self.game_id = game_id
        self.on_change = on_change
        self.on_status = on_status
        self._store = store

    async def unsubscribe(self) -> None:
        self._store._drop(self)

    def matches(self, event: ChangeEvent) -> bool:
        return self.table == event.table and self.game_id == event.game_id

class InMemoryStore:
    """In-process store with a change feed.

    Subscribers are awaited in turn right after each write; one that raises
    is logged and skipped.
    """

    def __init__(self) -> None:
        self._games: Dict[str, GameRecord] = {}
        self._players: Dict[str, PlayerRecord] = {}
        self._placements: Dict[PlacementKey, LivePlacementRecord] = {}
        self._revision = 0
        self._subscriptions: List[MemorySubscription] = []
        self._watchers: List[OnChange] = []

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    # --- games ---
    async def get_game(self, game_id: str) -> Optional[GameRecord]:
        game = self._games.get(game_id)
        return game.model_copy(deep=True) if game else None

    async def insert_game(self, game: GameRecord) -> GameRecord:
        if game.id in self._games:
            raise DuplicateKeyError(f'Game {game.id} already exists')
        stored = game.model_copy(deep=True, update={'revision': self._bump()})
        self._games[stored.id] = stored
        await self._publish('games', 'insert', stored.id, stored)
        return stored.model_copy(deep=True)

    async def update_game(self, game_id: str, **fields) -> GameRecord:
        current = self._games.get(game_id)
        if current is None:
            raise RecordNotFoundError(f'Game {game_id} not found')
        stored = GameRecord.model_validate(
            {**current.model_dump(), **fields, 'id': game_id, 'revision': self._bump()}
        )
        self._games[game_id] = stored
        await self._publish('games', 'update', game_id, stored)
        return stored.model_copy(deep=True)

    # --- players ---
    async def list_players(self, game_id: str) -> List[PlayerRecord]:
        players = [p for p in self._players.values() if p.game_id == game_id]
        return [p.model_copy(deep=True) for p in sorted(players, key=lambda p: p.order_num)]

    async def insert_player(self, player: PlayerRecord) -> PlayerRecord:
        if player.id in self._players:
            raise DuplicateKeyError(f'Player {player.id} already exists')
        if any(p.game_id == player.game_id and p.name == player.name for p in self._players.values()):
            raise DuplicateKeyError(f'players_game_id_name_key: {player.name}')
        stored = player.model_copy(deep=True, update={'revision': self._bump()})
        self._players[stored.id] = stored
        await self._publish('players', 'insert', stored.game_id, stored)
        return stored.model_copy(deep=True)

    async def update_player(self, player_id: str, **fields) -> PlayerRecord:
        current = self._players.get(player_id)
        if current is None:
            raise RecordNotFoundError(f'Player {player_id} not found')
        stored = PlayerRecord.model_validate(
            {**current.model_dump(), **fields, 'id': player_id, 'revision': self._bump()}
        )
        self._players[player_id] = stored
        await self._publish('players', 'update', stored.game_id, stored)
        return stored.model_copy(deep=True)

    # --- live placements ---
    async def list_placements(self, game_id: str) -> List[LivePlacementRecord]:
        return [p.model_copy() for p in self._placements.values() if p.game_id == game_id]

    async def upsert_placements(self, placements: Sequence[LivePlacementRecord]) -> None:
        written = []
        for placement in placements:
            kind: ChangeKind = 'update' if placement.key in self._placements else 'insert'
            self._placements[placement.key] = placement.model_copy()
            written.append((kind, placement))
        if not written:
            return
        self._bump()
        for kind, placement in written:
            await self._publish('live_placements', kind, placement.game_id, placement)

    async def delete_placements(self, game_id: str, player_id: Optional[str] = None) -> int:
        doomed = [
            key for key, p in self._placements.items()
            if p.game_id == game_id and (player_id is None or p.player_id == player_id)
        ]
        removed = [self._placements.pop(key) for key in doomed]
        if removed:
            self._bump()
            for placement in removed:
                await self._publish('live_placements', 'delete', game_id, placement)
        return len(removed)

    # --- change feed ---
    async def subscribe(self, table: Table, game_id: str,
                        on_change: OnChange, on_status: OnStatus) -> MemorySubscription:
        sub = MemorySubscription(self, table, game_id, on_change, on_status)
        self._subscriptions.append(sub)
        await on_status('subscribed', None)
        return sub

    def watch(self, on_change: OnChange) -> None:
        """Receive every change of every game (used by the server relay)."""
        self._watchers.append(on_change)

    async def close_feeds(self, status: FeedStatus = 'closed', error: Optional[Exception] = None) -> None:
        """Drop every subscription, telling each subscriber why."""
        subs, self._subscriptions = self._subscriptions, []
        for sub in subs:
            await sub.on_status(status, error)

    def _drop(self, sub: MemorySubscription) -> None:
        if sub in self._subscriptions:
            self._subscriptions.remove(sub)

    def _bump(self) -> int:
        self._revision += 1
        return self._revision

    async def _publish(self, table: Table, kind: ChangeKind, game_id: str, row) -> None:
        event = ChangeEvent(
            table=table, kind=kind, game_id=game_id,
            row=row.model_dump(mode='json'), revision=self._revision,
        )
        targets = [s.on_change for s in list(self._subscriptions) if s.matches(event)]
        for handler in targets + list(self._watchers):
            try:
                await handler(event)
            except Exception:
                logger.exception('Change feed delivery failed for %s/%s', table, game_id)
