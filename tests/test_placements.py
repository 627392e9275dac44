"""Unit tests for wordgrid/managers/placements.py"""

import asyncio

from wordgrid.errors import StoreError
from wordgrid.managers.placements import LivePlacementPublisher
from wordgrid.moves import PendingTile
from wordgrid.schemas import LivePlacementRecord
from wordgrid.store.memory import InMemoryStore


class BrokenStore(InMemoryStore):
    async def delete_placements(self, game_id, player_id=None):
        raise StoreError('store offline')


def test_replacing_three_with_two_leaves_two_rows(store):
    publisher = LivePlacementPublisher(store, 'g', 'p')

    async def scenario():
        await publisher.publish([PendingTile(0, 0, 'C'), PendingTile(1, 0, 'A'), PendingTile(2, 0, 'T')])
        await publisher.publish([PendingTile(0, 0, 'A'), PendingTile(1, 0, 'T')])
        return await store.list_placements('g')

    rows = asyncio.run(scenario())
    assert sorted((r.x, r.letter) for r in rows) == [(0, 'A'), (1, 'T')]


def test_other_players_rows_untouched(store):
    theirs = LivePlacementRecord(game_id='g', player_id='q', x=5, y=5, letter='Z')

    async def scenario():
        await store.upsert_placements([theirs])
        publisher = LivePlacementPublisher(store, 'g', 'p')
        await publisher.publish([PendingTile(0, 0, 'C')])
        await publisher.retract()
        return await store.list_placements('g')

    assert asyncio.run(scenario()) == [theirs]


def test_duplicate_cells_collapse():
    publisher = LivePlacementPublisher(InMemoryStore(), 'g', 'p')
    rows = publisher.records([PendingTile(0, 0, 'C'), PendingTile(0, 0, 'D')])
    assert [r.letter for r in rows] == ['D']


def test_store_failures_are_swallowed():
    publisher = LivePlacementPublisher(BrokenStore(), 'g', 'p')

    async def scenario():
        await publisher.publish([PendingTile(0, 0, 'C')])
        await publisher.retract()

    asyncio.run(scenario())
