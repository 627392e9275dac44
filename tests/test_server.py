"""Tests for the store server in wordgrid/main.py"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from wordgrid import main
from wordgrid.dictionary import Lexicon
from wordgrid.schemas import GameRecord, PlayerRecord
from wordgrid.store.memory import InMemoryStore


@pytest.fixture
def server_store(monkeypatch) -> InMemoryStore:
    store = InMemoryStore()
    monkeypatch.setattr(main, 'store', store)
    monkeypatch.setattr(main, 'lexicon', Lexicon.from_words(['CAT']))
    return store


@pytest.fixture
def client(server_store) -> TestClient:
    return TestClient(main.app)


def test_validate_word(client):
    response = client.get('/dict/validate', params={'word': 'cat'})
    assert response.status_code == 200
    assert response.json() == {'word': 'CAT', 'valid': True}
    assert client.get('/dict/validate', params={'word': 'zzz'}).json()['valid'] is False


def test_game_snapshot(client, server_store):
    game = asyncio.run(server_store.insert_game(GameRecord()))
    asyncio.run(server_store.insert_player(PlayerRecord(game_id=game.id, name='ann', order_num=1)))
    body = client.get(f'/games/{game.id}').json()
    assert body['game']['id'] == game.id
    assert [p['name'] for p in body['players']] == ['ann']


def test_missing_game_is_404(client):
    assert client.get('/games/nope').status_code == 404


class TestStoreEvents:
    def test_insert_then_get(self, server_store):
        game = GameRecord().model_dump(mode='json')
        inserted = asyncio.run(main.store_insert_game('sid', {'game': game}))
        assert inserted['ok']
        fetched = asyncio.run(main.store_get_game('sid', {'game_id': game['id']}))
        assert fetched == {'ok': True, 'data': inserted['data']}

    def test_update_fields_from_json(self, server_store):
        game = asyncio.run(server_store.insert_game(GameRecord()))
        reply = asyncio.run(main.store_update_game('sid', {
            'game_id': game.id,
            'fields': {'status': 'active', 'last_played_positions': [{'x': 1, 'y': 1}]},
        }))
        assert reply['ok']
        assert reply['data']['status'] == 'active'

    def test_store_errors_carry_their_code(self, server_store):
        reply = asyncio.run(main.store_update_player('sid', {'player_id': 'nope', 'fields': {'score': 1}}))
        assert reply['ok'] is False
        assert reply['error'] == 'not_found'

    def test_duplicate_name(self, server_store):
        player = {'game_id': 'g', 'name': 'ann', 'order_num': 1}
        assert asyncio.run(main.store_insert_player('sid', {'player': player}))['ok']
        reply = asyncio.run(main.store_insert_player('sid', {'player': player}))
        assert reply['error'] == 'duplicate_key'

    def test_malformed_request(self, server_store):
        reply = asyncio.run(main.store_insert_game('sid', {}))
        assert reply['ok'] is False
        assert reply['error'] == 'store_error'

    def test_placements(self, server_store):
        row = {'game_id': 'g', 'player_id': 'p', 'x': 0, 'y': 0, 'letter': 'A'}
        assert asyncio.run(main.store_upsert_placements('sid', {'placements': [row]}))['ok']
        listed = asyncio.run(main.store_list_placements('sid', {'game_id': 'g'}))
        assert listed['data'] == [row]
        deleted = asyncio.run(main.store_delete_placements('sid', {'game_id': 'g', 'player_id': 'p'}))
        assert deleted == {'ok': True, 'data': 1}


def test_changes_relayed_to_feed_room(monkeypatch):
    emitted = []

    async def fake_emit(event, data=None, room=None, **kwargs):
        emitted.append((event, room, data))

    monkeypatch.setattr(main.sio, 'emit', fake_emit)
    store = InMemoryStore()
    store.watch(main.relay)
    game = asyncio.run(store.insert_game(GameRecord()))
    assert emitted[0][0] == 'feed:change'
    assert emitted[0][1] == f'feed:games:{game.id}'
    assert emitted[0][2]['kind'] == 'insert'
