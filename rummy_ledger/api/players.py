"""Saved player endpoints"""
from fastapi import APIRouter, BackgroundTasks

from rummy_ledger import state
from rummy_ledger.api.common import http_error
from rummy_ledger.errors import GameError
from rummy_ledger.services import game_service


router = APIRouter(prefix="/players", tags=["players"])


@router.get("")
async def list_saved_players():
    return {"players": [p.model_dump(by_alias=True) for p in state.SAVED_PLAYERS.list()]}


@router.post("")
async def add_saved_player(payload: dict, background_tasks: BackgroundTasks):
    try:
        player = state.SAVED_PLAYERS.add(payload.get("name"))
    except GameError as exc:
        raise http_error(exc) from exc
    background_tasks.add_task(game_service.persist)
    return {"success": True, "player": player.model_dump(by_alias=True), "message": "Player added successfully"}


@router.put("/{player_id}")
async def rename_saved_player(player_id: str, payload: dict, background_tasks: BackgroundTasks):
    try:
        player = state.SAVED_PLAYERS.rename(player_id, payload.get("name"))
    except GameError as exc:
        raise http_error(exc) from exc
    background_tasks.add_task(game_service.persist)
    return {"success": True, "player": player.model_dump(by_alias=True), "message": "Player updated successfully"}


@router.delete("/{player_id}")
async def delete_saved_player(player_id: str, background_tasks: BackgroundTasks):
    try:
        state.SAVED_PLAYERS.delete(player_id)
    except GameError as exc:
        raise http_error(exc) from exc
    background_tasks.add_task(game_service.persist)
    return {"success": True, "message": "Player deleted successfully"}
