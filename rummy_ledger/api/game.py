"""
Game command endpoints

Every command returns the updated game snapshot. Rejected commands return
400 / 404 / 409 and leave the game unchanged. The game is persisted in the
background after each successful command.
"""
import logging
from fastapi import APIRouter, BackgroundTasks, HTTPException

from rummy_ledger.api.common import game_snapshot, http_error
from rummy_ledger.core import session as session_core
from rummy_ledger.errors import GameError, StorageError
from rummy_ledger.services import game_service, storage


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/game", tags=["game"])


def _require_dict(request: dict, key: str) -> dict:
    value = request.get(key)
    if not isinstance(value, dict):
        raise HTTPException(status_code=400, detail=f"{key} must be an object of playerId -> score")
    return value


def _done(background_tasks: BackgroundTasks, message: str) -> dict:
    background_tasks.add_task(game_service.persist)
    return {
        "success": True,
        "message": message,
        "game": game_snapshot()
    }


@router.get("")
async def get_game():
    """Current game snapshot"""
    return game_snapshot()


@router.post("/start")
async def start_game(request: dict, background_tasks: BackgroundTasks):
    """
    Start a new game

    Request:
        {
            "players": [{"name": "Asha"}, {"savedPlayerId": "player-..."}],
            "configId": "standard"   # optional, default: selected preset
        }
    """
    players = request.get("players")
    if not isinstance(players, list):
        raise HTTPException(status_code=400, detail="players must be a list")
    entries = [{"name": p} if isinstance(p, str) else p for p in players]
    if not all(isinstance(e, dict) for e in entries):
        raise HTTPException(status_code=400, detail="players must be names or player objects")
    config_id = request.get("configId") or request.get("config_id")

    try:
        session = game_service.start_game(entries, config_id)
    except GameError as exc:
        raise http_error(exc) from exc

    return _done(background_tasks, f"Game started with {len(session.players)} players")


@router.post("/rounds")
async def submit_round(request: dict, background_tasks: BackgroundTasks):
    """
    Submit the next round

    Request:
        {
            "scores": {"<playerId>": 40, ...},
            "drops": {"<playerId>": "FIRST_DROP"}   # optional
        }
    """
    scores = _require_dict(request, "scores")
    drops = request.get("drops") or None

    try:
        session = game_service.apply(session_core.submit_round, scores, drops)
    except GameError as exc:
        raise http_error(exc) from exc

    return _done(background_tasks, f"Round {session.current_round} scores submitted!")


@router.put("/rounds/{round_number}")
async def edit_round(round_number: int, request: dict, background_tasks: BackgroundTasks):
    """
    Correct a past round

    Request:
        {"scores": {"<playerId>": 40, ...}}   # same players as the original round
    """
    scores = _require_dict(request, "scores")

    try:
        game_service.apply(session_core.edit_round, round_number, scores)
    except GameError as exc:
        raise http_error(exc) from exc

    return _done(background_tasks, f"Round {round_number} updated successfully")


@router.post("/players")
async def add_player(request: dict, background_tasks: BackgroundTasks):
    """
    Add a player mid-game

    Request:
        {"name": "Ravi"}  or  {"savedPlayerId": "player-..."}
    """
    saved_player_id = request.get("savedPlayerId") or request.get("saved_player_id")
    name = request.get("name")

    try:
        session = game_service.add_player(name=name, saved_player_id=saved_player_id)
    except GameError as exc:
        raise http_error(exc) from exc

    newcomer = session.players[-1]
    return _done(background_tasks, f"{newcomer.name} added to game with score {newcomer.total_score}")


@router.delete("/players/{player_id}")
async def remove_player(player_id: str, background_tasks: BackgroundTasks):
    """Remove a player from the game (history is kept)"""
    try:
        game_service.apply(session_core.remove_player, player_id)
    except GameError as exc:
        raise http_error(exc) from exc

    return _done(background_tasks, "Player removed from game")


@router.post("/players/{player_id}/re-entry")
async def re_enter(player_id: str, background_tasks: BackgroundTasks):
    """Let an eliminated player back in"""
    try:
        game_service.apply(session_core.re_enter, player_id)
    except GameError as exc:
        raise http_error(exc) from exc

    return _done(background_tasks, "Player re-entered the game")


@router.put("/players/{player_id}/score")
async def set_player_score(player_id: str, request: dict, background_tasks: BackgroundTasks):
    """
    Overwrite a player's total (maintenance only, undone by the next recomputation)

    Request:
        {"score": 120}
    """
    try:
        game_service.apply(session_core.set_player_score, player_id, request.get("score"))
    except GameError as exc:
        raise http_error(exc) from exc

    return _done(background_tasks, "Player score updated")


@router.post("/pause")
async def pause_game(background_tasks: BackgroundTasks):
    try:
        game_service.apply(session_core.pause_game)
    except GameError as exc:
        raise http_error(exc) from exc
    return _done(background_tasks, "Game paused")


@router.post("/resume")
async def resume_game(background_tasks: BackgroundTasks):
    try:
        game_service.apply(session_core.resume_game)
    except GameError as exc:
        raise http_error(exc) from exc
    return _done(background_tasks, "Game resumed")


@router.post("/end")
async def end_game(background_tasks: BackgroundTasks):
    """End the game; rounds stay viewable"""
    try:
        game_service.apply(session_core.end_game)
    except GameError as exc:
        raise http_error(exc) from exc
    return _done(background_tasks, "Game ended")


@router.post("/reset")
async def reset_game():
    """Discard the current game and its backup"""
    game_service.reset()
    return {
        "success": True,
        "message": "Game reset",
        "game": game_snapshot()
    }


@router.get("/export")
async def export_game():
    """Current game as a JSON document"""
    return {"data": storage.export_game(game_service.current_game())}


@router.post("/import")
async def import_game(request: dict, background_tasks: BackgroundTasks):
    """
    Replace the current game with an exported one

    Request:
        {"data": "<exported JSON text>"}
    """
    data = request.get("data")
    if not isinstance(data, str):
        raise HTTPException(status_code=400, detail="data must be the exported game text")

    try:
        game_service.import_game(data)
    except StorageError as exc:
        logger.error(f"❌ Import failed: {exc.message}")
        raise HTTPException(status_code=400, detail=exc.message) from exc

    return _done(background_tasks, "Game imported")
