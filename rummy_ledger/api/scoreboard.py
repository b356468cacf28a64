"""
Scoreboard and round history endpoints
"""
from fastapi import APIRouter

from rummy_ledger import state
from rummy_ledger.core.eligibility import compulsory_players, can_re_enter
from rummy_ledger.core.ledger import round_history
from rummy_ledger.core.registry import standings


router = APIRouter(prefix="/scoreboard", tags=["scoreboard"])


@router.get("")
async def get_scoreboard():
    """
    Ranked standings of the current game

    Lowest total leads. Also lists who is in compulsory (cannot drop) and
    which eliminated players may still re-enter.
    """
    game = state.GAME
    config = game.config

    return {
        "gameId": game.game_id,
        "status": game.status.value,
        "currentRound": game.current_round,
        "maxScore": config.max_score,
        "compulsoryThreshold": config.compulsory_threshold,
        "compulsory": [p.id for p in compulsory_players(game.players, config)],
        "canReEnter": [
            p.id for p in game.players
            if can_re_enter(p, game.players, game.rounds, config)
        ],
        "standings": standings(game.players)
    }


@router.get("/rounds")
async def get_rounds():
    """Round-by-round scores (only the players present in each round)"""
    return {
        "gameId": state.GAME.game_id,
        "rounds": round_history(state.GAME.rounds, state.GAME.players)
    }
