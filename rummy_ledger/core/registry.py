"""
Player registry - read access to the roster and current standings
"""
from typing import Any, List, Optional

from rummy_ledger.errors import NotFoundError, ValidationError
from rummy_ledger.models import GameConfig, Player
from rummy_ledger.core.ledger import coerce_score


def active_players(players: List[Player]) -> List[Player]:
    """Players still part of the game (eliminated ones included)"""
    return [p for p in players if p.is_active]


def contenders(players: List[Player]) -> List[Player]:
    """Players who take part in the next round"""
    return [p for p in players if p.is_active and not p.is_eliminated]


def eliminated_players(players: List[Player]) -> List[Player]:
    return [p for p in players if p.is_eliminated]


def find_player(players: List[Player], player_id: str) -> Optional[Player]:
    for player in players:
        if player.id == player_id:
            return player
    return None


def get_player(players: List[Player], player_id: str) -> Player:
    """Like find_player, but an unknown id is an error"""
    player = find_player(players, player_id)
    if player is None:
        raise NotFoundError(f"Player {player_id} not found")
    return player


def starting_score(players: List[Player]) -> int:
    """
    Score handed to a player joining or re-joining mid-game

    The newcomer starts level with the highest (worst) total among the
    players still in contention, so joining late never pays off.
    """
    return max((p.total_score for p in contenders(players)), default=0)


def clean_player_name(name: Any) -> str:
    """Trimmed display name; anything but a non-blank string is rejected"""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Please enter a player name")
    return name.strip()


def set_player_score(
    players: List[Player],
    player_id: str,
    score: Any,
    config: GameConfig,
    current_round: int = 0
) -> List[Player]:
    """
    Set a player's absolute score (registry maintenance only)

    Not part of the round flow: the next recomputation replaces the value
    with whatever the ledger says. A score at or above max_score eliminates
    the player in current_round.

    Returns:
        New player list
    """
    score = coerce_score(player_id, score)
    player = get_player(players, player_id)

    eliminated = score >= config.max_score
    if not eliminated:
        eliminated_at = None
    elif player.is_eliminated and player.eliminated_at is not None:
        eliminated_at = player.eliminated_at
    else:
        eliminated_at = current_round

    return [
        p.model_copy(update={
            "total_score": score,
            "is_eliminated": eliminated,
            "eliminated_at": eliminated_at,
        }) if p.id == player_id else p
        for p in players
    ]


def standings(players: List[Player]) -> List[dict]:
    """
    Rank players by total score (ascending, lowest score leads)

    Returns:
        List of player dicts with a 1-based "rank" key
    """
    ordered = sorted(players, key=lambda p: (p.total_score, p.name.lower()))

    results = []
    for idx, player in enumerate(ordered):
        entry = player.model_dump(by_alias=True)
        entry["rank"] = idx + 1
        results.append(entry)

    return results
