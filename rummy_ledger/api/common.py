"""
Shared helpers for API routers
"""
from fastapi import HTTPException

from rummy_ledger import state
from rummy_ledger.errors import (
    GameError, ValidationError, EligibilityError, NotFoundError, SessionStateError
)


STATUS_CODES = {
    ValidationError: 400,
    NotFoundError: 404,
    EligibilityError: 409,
    SessionStateError: 409,
}


def http_error(exc: GameError) -> HTTPException:
    """Map a rejected command to an HTTP error"""
    status_code = STATUS_CODES.get(type(exc), 500)
    return HTTPException(
        status_code=status_code,
        detail={"error": type(exc).__name__, "message": exc.message}
    )


def game_snapshot() -> dict:
    """Current game in its camelCase wire form, plus its status"""
    snapshot = state.GAME.model_dump(mode="json", by_alias=True)
    snapshot["status"] = state.GAME.status.value
    return snapshot
