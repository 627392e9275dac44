from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict

import socketio
import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from pydantic_core import to_jsonable_python

from .config import Config
from .dictionary import Lexicon
from .errors import StoreError
from .schemas import ChangeEvent, GameRecord, GameSnapshot, LivePlacementRecord, PlayerRecord
from .store.memory import InMemoryStore

logger = logging.getLogger(__name__)

store = InMemoryStore()
lexicon = Lexicon()

@asynccontextmanager
async def lifespan(_: FastAPI):
    logging.basicConfig(
        level=Config.LOG_LEVEL,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    await lexicon.load()
    logger.info('Store server ready (%d words)', len(lexicon))
    yield
    await store.close_feeds()

# Socket.IO server (ASGI)
sio = socketio.AsyncServer(async_mode='asgi', cors_allowed_origins='*')
app = FastAPI(title="WordGrid Store Server", version="0.1.0", lifespan=lifespan)

# Mount Socket.IO ASGI application
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)

# CORS for REST
app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

def feed_room(table: str, game_id: str) -> str:
    return f'feed:{table}:{game_id}'

async def relay(event: ChangeEvent):
    await sio.emit('feed:change', event.model_dump(mode='json'), room=feed_room(event.table, event.game_id))

store.watch(relay)

# REST Endpoints
@app.get('/dict/validate')
async def validate_word(word: str):
    return { 'word': word.upper(), 'valid': lexicon.word_exists(word) }

@app.get('/games/{game_id}', response_model=GameSnapshot)
async def get_game(game_id: str):
    game = await store.get_game(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail='Game not found')
    return GameSnapshot(game=game, players=await store.list_players(game_id))

# Socket.IO Events
async def reply(call: Callable[[], Awaitable[Any]]) -> Dict[str, Any]:
    """Run one store call and shape the acknowledgement."""
    try:
        data = await call()
    except StoreError as exc:
        logger.warning('Store call failed: %s', exc)
        return { 'ok': False, 'error': exc.code, 'message': str(exc) }
    except (ValidationError, KeyError, TypeError) as exc:
        logger.warning('Malformed store call: %s', exc)
        return { 'ok': False, 'error': StoreError.code, 'message': f'Malformed request: {exc}' }
    return { 'ok': True, 'data': to_jsonable_python(data) }

@sio.event
async def connect(sid, environ, auth=None):
    logger.debug('Client %s connected', sid)

@sio.event
async def disconnect(sid, *args):
    logger.debug('Client %s disconnected', sid)

@sio.on('store:get_game')
async def store_get_game(sid, payload):
    return await reply(lambda: store.get_game(payload['game_id']))

@sio.on('store:insert_game')
async def store_insert_game(sid, payload):
    return await reply(lambda: store.insert_game(GameRecord.model_validate(payload['game'])))

@sio.on('store:update_game')
async def store_update_game(sid, payload):
    return await reply(lambda: store.update_game(payload['game_id'], **payload.get('fields', {})))

@sio.on('store:list_players')
async def store_list_players(sid, payload):
    return await reply(lambda: store.list_players(payload['game_id']))

@sio.on('store:insert_player')
async def store_insert_player(sid, payload):
    return await reply(lambda: store.insert_player(PlayerRecord.model_validate(payload['player'])))

@sio.on('store:update_player')
async def store_update_player(sid, payload):
    return await reply(lambda: store.update_player(payload['player_id'], **payload.get('fields', {})))

@sio.on('store:list_placements')
async def store_list_placements(sid, payload):
    return await reply(lambda: store.list_placements(payload['game_id']))

@sio.on('store:upsert_placements')
async def store_upsert_placements(sid, payload):
    return await reply(lambda: store.upsert_placements(
        [LivePlacementRecord.model_validate(row) for row in payload['placements']]
    ))

@sio.on('store:delete_placements')
async def store_delete_placements(sid, payload):
    return await reply(lambda: store.delete_placements(payload['game_id'], payload.get('player_id')))

@sio.on('feed:subscribe')
async def feed_subscribe(sid, payload):
    room = feed_room(payload['table'], payload['game_id'])
    await sio.enter_room(sid, room)
    logger.debug('Client %s subscribed to %s', sid, room)
    return { 'ok': True, 'data': None }

@sio.on('feed:unsubscribe')
async def feed_unsubscribe(sid, payload):
    await sio.leave_room(sid, feed_room(payload['table'], payload['game_id']))
    return { 'ok': True, 'data': None }

# Export ASGI app for uvicorn
application = asgi_app

def run():
    uvicorn.run('wordgrid.main:application', host=Config.HOST, port=Config.PORT)

if __name__ == '__main__':
    run()
