from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import socketio
from socketio import exceptions as sio_errors
from pydantic_core import to_jsonable_python

from ..config import Config
from ..errors import StoreError, store_error_from_code
from ..schemas import ChangeEvent, GameRecord, LivePlacementRecord, PlayerRecord, Table
from .base import OnChange, OnStatus

logger = logging.getLogger(__name__)

class RemoteSubscription:
    def __init__(self, store: 'RemoteStore', table: Table, game_id: str,
                 on_change: OnChange, on_status: OnStatus):
        self.table = table
        self.game_id = game_id
        self.on_change = on_change
        self.on_status = on_status
        self._store = store

    @property
    def key(self) -> Tuple[str, str]:
        return (self.table, self.game_id)

    async def unsubscribe(self) -> None:
        await self._store._drop(self)

class RemoteStore:
    """Store client over Socket.IO: calls are acknowledged events, feed rows
    arrive as ``feed:change`` for the rooms this client joined.
    """

    def __init__(self, url: str = Config.SERVER_URL, *, client: Optional[socketio.AsyncClient] = None,
                 timeout: float = Config.STORE_CALL_TIMEOUT_SEC):
        self.url = url
        self.timeout = timeout
        self._sio = client or socketio.AsyncClient(reconnection=True)
        self._subscriptions: List[RemoteSubscription] = []
        self._sio.on('feed:change', self._on_feed_change)
        self._sio.on('disconnect', self._on_disconnect)

    @property
    def connected(self) -> bool:
        return self._sio.connected

    async def connect(self) -> None:
        try:
            await self._sio.connect(self.url)
        except sio_errors.ConnectionError as exc:
            raise StoreError(f'Could not reach store at {self.url}: {exc}') from exc

    async def close(self) -> None:
        await self._sio.disconnect()

    # --- games ---
    async def get_game(self, game_id: str) -> Optional[GameRecord]:
        data = await self._call('store:get_game', {'game_id': game_id})
        return GameRecord.model_validate(data) if data else None

    async def insert_game(self, game: GameRecord) -> GameRecord:
        data = await self._call('store:insert_game', {'game': game.model_dump(mode='json')})
        return GameRecord.model_validate(data)

    async def update_game(self, game_id: str, **fields) -> GameRecord:
        data = await self._call('store:update_game', {'game_id': game_id, 'fields': to_jsonable_python(fields)})
        return GameRecord.model_validate(data)

    # --- players ---
    async def list_players(self, game_id: str) -> List[PlayerRecord]:
        data = await self._call('store:list_players', {'game_id': game_id})
        return [PlayerRecord.model_validate(row) for row in data or []]

    async def insert_player(self, player: PlayerRecord) -> PlayerRecord:
        data = await self._call('store:insert_player', {'player': player.model_dump(mode='json')})
        return PlayerRecord.model_validate(data)

    async def update_player(self, player_id: str, **fields) -> PlayerRecord:
        data = await self._call('store:update_player', {'player_id': player_id, 'fields': to_jsonable_python(fields)})
        return PlayerRecord.model_validate(data)

    # --- live placements ---
    async def list_placements(self, game_id: str) -> List[LivePlacementRecord]:
        data = await self._call('store:list_placements', {'game_id': game_id})
        return [LivePlacementRecord.model_validate(row) for row in data or []]

    async def upsert_placements(self, placements: Sequence[LivePlacementRecord]) -> None:
        await self._call('store:upsert_placements', {
            'placements': [p.model_dump(mode='json') for p in placements],
        })

    async def delete_placements(self, game_id: str, player_id: Optional[str] = None) -> int:
        data = await self._call('store:delete_placements', {'game_id': game_id, 'player_id': player_id})
        return int(data or 0)

    # --- change feed ---
    async def subscribe(self, table: Table, game_id: str,
                        on_change: OnChange, on_status: OnStatus) -> RemoteSubscription:
        sub = RemoteSubscription(self, table, game_id, on_change, on_status)
        self._subscriptions.append(sub)
        try:
            await self._call('feed:subscribe', {'table': table, 'game_id': game_id})
        except StoreError as exc:
            logger.warning('Subscribing to %s/%s failed: %s', table, game_id, exc)
            await on_status('error', exc)
        else:
            await on_status('subscribed', None)
        return sub

    async def _drop(self, sub: RemoteSubscription) -> None:
        if sub not in self._subscriptions:
            return
        self._subscriptions.remove(sub)
        still_wanted = any(s.key == sub.key for s in self._subscriptions)
        if still_wanted or not self._sio.connected:
            return
        try:
            await self._call('feed:unsubscribe', {'table': sub.table, 'game_id': sub.game_id})
        except StoreError as exc:
            logger.warning('Unsubscribing from %s/%s failed: %s', sub.table, sub.game_id, exc)

    async def _on_feed_change(self, data: Dict[str, Any]) -> None:
        event = ChangeEvent.model_validate(data)
        for sub in [s for s in self._subscriptions if s.key == (event.table, event.game_id)]:
            await sub.on_change(event)

    async def _on_disconnect(self, *args) -> None:
        logger.info('Store connection lost')
        for sub in list(self._subscriptions):
            await sub.on_status('closed', None)

    async def _call(self, event: str, payload: Dict[str, Any]) -> Any:
        try:
            response = await self._sio.call(event, payload, timeout=self.timeout)
        except sio_errors.SocketIOError as exc:
            raise StoreError(f'{event} failed: {exc}') from exc
        if not isinstance(response, dict):
            raise StoreError(f'{event} returned a malformed response')
        if not response.get('ok'):
            raise store_error_from_code(response.get('error'), response.get('message') or event)
        return response.get('data')
