"""
Health check and system status endpoints
"""
from fastapi import APIRouter
from rummy_ledger import state


router = APIRouter(tags=["health"])


@router.get("/")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "message": "Rummy Ledger - Scoring Engine",
        "version": "1.0.0",
        "game_status": state.GAME.status.value,
        "current_round": state.GAME.current_round,
        "persistence_error": state.LAST_PERSIST_ERROR
    }
