from __future__ import annotations
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from ..config import Config
from ..errors import StoreError
from ..replica import FeedEvent, GameChanged, PlacementsChanged, PlayersChanged
from ..schemas import ChangeEvent, ConnectionStatus, FeedStatus, GameRecord
from ..store.base import Store, Subscription

logger = logging.getLogger(__name__)

class SessionConnection:
    """Change-feed subscriptions and reconnect loop for one joined game.

    ``open`` installs the game, players and live-placement subscriptions plus
    a polling task that retries while the link is down; ``close`` tears all
    of it down. Every delivery is handed to ``on_event`` as a typed feed event.
    """

    def __init__(self, store: Store, on_event: Callable[[FeedEvent], Awaitable[None]],
                 poll_interval: float = Config.RECONNECT_INTERVAL_SEC,
                 on_status_change: Optional[Callable[[ConnectionStatus], None]] = None):
        self.store = store
        self.poll_interval = poll_interval
        self.game_id: Optional[str] = None
        self.status: ConnectionStatus = 'connected'
        self._on_event = on_event
        self._on_status_change = on_status_change
        self._subscriptions: List[Subscription] = []
        self._poll_task: Optional[asyncio.Task] = None

    @property
    def is_open(self) -> bool:
        return self.game_id is not None

    async def open(self, game_id: str):
        if self.is_open:
            await self.close()
        logger.info('Setting up subscriptions for game %s', game_id)
        self.game_id = game_id
        await self._subscribe()
        self._poll_task = asyncio.get_running_loop().create_task(self._poll())

    async def close(self):
        if self._poll_task and not self._poll_task.done():
            self._poll_task.cancel()
        self._poll_task = None
        await self._unsubscribe()
        self.game_id = None

    async def reconnect(self) -> bool:
        """Reload the authoritative snapshot and re-install the subscriptions."""
        game_id = self.game_id
        if not game_id:
            return False
        logger.info('Attempting to reconnect to game %s', game_id)
        try:
            game = await self.store.get_game(game_id)
            players = await self.store.list_players(game_id)
        except StoreError as exc:
            logger.error('Failed to reconnect: %s', exc)
            self.mark_disconnected()
            return False
        if game is None:
            logger.error('Failed to fetch game %s', game_id)
            return False

        await self._on_event(GameChanged(game, game.revision))
        players_revision = max([p.revision for p in players], default=game.revision)
        await self._on_event(PlayersChanged(players, players_revision))
        await self._subscribe()
        self._set_status('connected')
        logger.info('Successfully reconnected to game %s', game_id)
        return True

    def mark_disconnected(self):
        self._set_status('disconnected')

    def _set_status(self, status: ConnectionStatus):
        if status == self.status:
            return
        self.status = status
        if self._on_status_change:
            self._on_status_change(status)

    async def _subscribe(self):
        await self._unsubscribe()
        game_id = self.game_id
        self._subscriptions = [
            await self.store.subscribe('games', game_id, self._on_game_change, self._on_game_status),
            await self.store.subscribe('players', game_id, self._on_players_change, self._log_status('players')),
            await self.store.subscribe('live_placements', game_id, self._on_placements_change,
                                       self._log_status('live placements')),
        ]

    async def _unsubscribe(self):
        subs, self._subscriptions = self._subscriptions, []
        for sub in subs:
            try:
                await sub.unsubscribe()
            except StoreError as exc:
                logger.warning('Failed to unsubscribe from %s: %s', sub.table, exc)

    async def _poll(self):
        try:
            while True:
                await asyncio.sleep(self.poll_interval)
                if self.status == 'disconnected' and self.game_id:
                    await self.reconnect()
        except asyncio.CancelledError:
            return

    # --- feed callbacks ---
    async def _on_game_change(self, event: ChangeEvent):
        if event.kind == 'delete' or not event.row:
            logger.warning('Game %s was removed from the store', event.game_id)
            return
        logger.debug('Received game update at revision %s', event.revision)
        self._set_status('connected')
        await self._on_event(GameChanged(GameRecord.model_validate(event.row), event.revision))

    async def _on_players_change(self, event: ChangeEvent):
        try:
            players = await self.store.list_players(event.game_id)
        except StoreError as exc:
            logger.warning('Failed to refresh players: %s', exc)
            return
        await self._on_event(PlayersChanged(players, event.revision))

    async def _on_placements_change(self, event: ChangeEvent):
        try:
            placements = await self.store.list_placements(event.game_id)
        except StoreError as exc:
            logger.warning('Failed to refresh live placements: %s', exc)
            return
        await self._on_event(PlacementsChanged(placements, event.revision))

    async def _on_game_status(self, status: FeedStatus, error: Optional[Exception]):
        if status == 'subscribed':
            logger.debug('Subscribed to game channel')
            self._set_status('connected')
        else:
            logger.error('Game channel %s: %s', status, error)
            self._set_status('disconnected')

    def _log_status(self, channel: str):
        async def on_status(status: FeedStatus, error: Optional[Exception]):
            if status == 'subscribed':
                logger.debug('Subscribed to %s channel', channel)
            else:
                logger.error('%s channel %s: %s', channel.capitalize(), status, error)
        return on_status
