"""REST service exposing per-guild Hokm games to chat front ends."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Awaitable, Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from engine.events import LoggingListener
from engine.rules_schema import HokmConfig, load_config
from engine.service import GameView, HokmService
from engine.state import InvalidPlay, InvalidStateError, NotYourTurn
from engine.store import GameAlreadyRunning, GameNotFound

logger = logging.getLogger(__name__)

CONFIG_ENV = "HOKM_CONFIG"


class StartRequest(BaseModel):
    order: List[str]
    bots: List[str] = []
    config: Optional[HokmConfig] = None


class HokmRequest(BaseModel):
    suit: str
    player_id: Optional[str] = None


class CardPayload(BaseModel):
    suit: str
    rank: Union[int, str]


class PlayRequest(BaseModel):
    player_id: str
    card: CardPayload


def default_config() -> HokmConfig:
    path = os.environ.get(CONFIG_ENV)
    if path:
        logger.info("Loading Hokm config from %s", path)
        return load_config(path)
    return HokmConfig()


service = HokmService(listener=LoggingListener(), default_config=default_config())


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await service.shutdown()


app = FastAPI(title="Hokm Game Service", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def bad_payload(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected payload for %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


async def run_action(action: Awaitable[GameView]) -> Dict[str, object]:
    try:
        view = await action
    except GameNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (NotYourTurn, InvalidStateError, GameAlreadyRunning) as exc:
        logger.info("Rejected action: %s", exc)
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except (InvalidPlay, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"state": asdict(view)}


@app.post("/games/{guild_id}/start")
async def start_game(guild_id: str, request: StartRequest) -> Dict[str, object]:
    return await run_action(
        service.start_game(guild_id, request.order, bots=request.bots, config=request.config)
    )


@app.post("/games/{guild_id}/hokm")
async def choose_hokm(guild_id: str, request: HokmRequest) -> Dict[str, object]:
    return await run_action(service.choose_hokm(guild_id, request.suit, player_id=request.player_id))


@app.post("/games/{guild_id}/play")
async def play_card(guild_id: str, request: PlayRequest) -> Dict[str, object]:
    card = {"suit": request.card.suit, "rank": request.card.rank}
    return await run_action(service.play_card(guild_id, request.player_id, card))


@app.post("/games/{guild_id}/next-hand")
async def next_hand(guild_id: str) -> Dict[str, object]:
    return await run_action(service.start_next_hand(guild_id))


@app.get("/games/{guild_id}")
async def get_game(guild_id: str, player_id: Optional[str] = None) -> Dict[str, object]:
    try:
        view = service.get_view(guild_id, player_id)
    except GameNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"state": asdict(view)}


@app.delete("/games/{guild_id}")
async def cancel_game(guild_id: str) -> Dict[str, object]:
    try:
        await service.cancel_game(guild_id)
    except GameNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"cancelled": guild_id}
