from __future__ import annotations
import logging
from typing import Any, Dict

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from .config import get_settings
from .dictionary import DictionaryService
from .managers.game import GameManager
from .schemas import ExchangeTilesRequest, JoinGameRequest, SubmitWordRequest

SERVER_VERSION = "1.0.0"

settings = get_settings()
logging.basicConfig(level=settings.log_level,
                    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Socket.IO server (ASGI)
sio = socketio.AsyncServer(async_mode='asgi', cors_allowed_origins=settings.cors_origins)
app = FastAPI(title="Wordboard Server", version=SERVER_VERSION)

# Mount Socket.IO ASGI application
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)

# CORS for REST
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

dictionary = DictionaryService.load(settings.dictionary_path)
games = GameManager(sio, dictionary)

# REST Endpoints
@app.get('/api/status')
async def status() -> Dict[str, Any]:
    return { **games.status(settings.default_game_id), 'serverVersion': SERVER_VERSION }

@app.get('/api/dictionary/check/{word}')
async def check_word(word: str) -> Dict[str, Any]:
    return { 'word': word.upper(), 'valid': dictionary.is_valid(word) }

# Socket.IO Events
@sio.event
async def connect(sid, environ, auth=None):
    logger.info("New connection: %s", sid)
    await sio.save_session(sid, {})

@sio.event
async def disconnect(sid):
    await games.disconnect(sid)

async def _bad_payload(sid, exc: ValidationError):
    logger.debug("Malformed payload from %s: %s", sid, exc)
    await sio.emit('error', { 'message': 'Malformed request', 'code': 'BAD_REQUEST' }, to=sid)

@sio.on('joinGame')
async def join_game(sid, payload):
    try:
        req = JoinGameRequest.model_validate(payload)
    except ValidationError as exc:
        await _bad_payload(sid, exc)
        return
    game_id = req.gameId or settings.default_game_id
    result = await games.join_game(sid, game_id, req.playerName)
    if result.success:
        await sio.save_session(sid, { 'game_id': game_id, 'name': result.player.name })

@sio.on('startGame')
async def start_game(sid, payload=None):
    await games.start_game(sid)

@sio.on('submitWord')
async def submit_word(sid, payload):
    try:
        req = SubmitWordRequest.model_validate(payload)
    except ValidationError as exc:
        await _bad_payload(sid, exc)
        return
    await games.submit_word(sid, req.placements)

@sio.on('passTurn')
async def pass_turn(sid, payload=None):
    await games.pass_turn(sid)

@sio.on('exchangeTiles')
async def exchange_tiles(sid, payload):
    try:
        req = ExchangeTilesRequest.model_validate(payload)
    except ValidationError as exc:
        await _bad_payload(sid, exc)
        return
    await games.exchange_tiles(sid, req.tileIndices)

# Export ASGI app for uvicorn
application = asgi_app

def run() -> None:
    # Same as: uvicorn wordboard.main:application --host 0.0.0.0 --port 3000
    import uvicorn

    uvicorn.run(application, host=settings.host, port=settings.port, log_level=settings.log_level.lower())

if __name__ == '__main__':
    run()
