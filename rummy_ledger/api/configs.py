"""
Rule preset endpoints
"""
from fastapi import APIRouter, BackgroundTasks

from rummy_ledger import state
from rummy_ledger.api.common import http_error
from rummy_ledger.errors import GameError
from rummy_ledger.services import game_service


router = APIRouter(prefix="/configs", tags=["configs"])


def _dump(config) -> dict:
    return config.model_dump(by_alias=True)


@router.get("")
async def list_configs():
    """All presets and the selected one"""
    return {
        "configs": [_dump(c) for c in state.CATALOGUE.list()],
        "selectedConfigId": state.CATALOGUE.selected.id
    }


@router.post("")
async def create_config(request: dict, background_tasks: BackgroundTasks):
    """
    Create a preset

    Request:
        {
            "name": "Friday Night",
            "firstDropPenalty": 20,
            "middleDropPenalty": 40,
            "fullCountPenalty": 80,
            "maxScore": 201
        }
    """
    try:
        config = state.CATALOGUE.add(request)
    except GameError as exc:
        raise http_error(exc) from exc
    background_tasks.add_task(game_service.persist)
    return {"success": True, "config": _dump(config), "message": "Config created successfully"}


@router.put("/{config_id}")
async def update_config(config_id: str, request: dict, background_tasks: BackgroundTasks):
    """Update a preset (a running game keeps its own copy)"""
    try:
        config = state.CATALOGUE.update(config_id, request)
    except GameError as exc:
        raise http_error(exc) from exc
    background_tasks.add_task(game_service.persist)
    return {"success": True, "config": _dump(config), "message": "Config updated successfully"}


@router.delete("/{config_id}")
async def delete_config(config_id: str, background_tasks: BackgroundTasks):
    try:
        state.CATALOGUE.delete(config_id)
    except GameError as exc:
        raise http_error(exc) from exc
    background_tasks.add_task(game_service.persist)
    return {"success": True, "message": "Config deleted successfully"}


@router.post("/{config_id}/select")
async def select_config(config_id: str, background_tasks: BackgroundTasks):
    """Make a preset the default for new games"""
    try:
        state.CATALOGUE.select(config_id)
    except GameError as exc:
        raise http_error(exc) from exc
    background_tasks.add_task(game_service.persist)
    return {"success": True, "selectedConfigId": config_id, "message": "Default config updated"}
