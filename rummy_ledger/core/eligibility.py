"""
Eligibility rules for roster changes

Predicates are pure and evaluated against the registry as it is before the
command runs. Each has a check_* companion that raises EligibilityError with
the reason shown to the user.
"""
from typing import List

from rummy_ledger.errors import EligibilityError
from rummy_ledger.models import GameConfig, GameRound, Player
from rummy_ledger.core.registry import active_players, contenders


def compulsory_players(players: List[Player], config: GameConfig) -> List[Player]:
    """Players too close to elimination to afford a first drop"""
    threshold = config.compulsory_threshold
    return [p for p in contenders(players) if p.total_score >= threshold]


def is_any_player_compulsory(players: List[Player], config: GameConfig) -> bool:
    return len(compulsory_players(players, config)) > 0


def rounds_since_elimination(player: Player, rounds: List[GameRound]) -> int:
    if player.eliminated_at is None:
        return 0
    return sum(1 for r in rounds if r.round_number > player.eliminated_at)


def can_re_enter(player: Player, players: List[Player], rounds: List[GameRound], config: GameConfig) -> bool:
    """
    Re-entry is a same-round grace window: once another round has been
    recorded after the elimination, it is final.
    """
    if not player.is_eliminated:
        return False
    if is_any_player_compulsory(players, config):
        return False
    return rounds_since_elimination(player, rounds) == 0


def name_taken(players: List[Player], name: str) -> bool:
    """Case-insensitive clash with an active player's name"""
    wanted = name.strip().lower()
    return any(p.name.strip().lower() == wanted for p in active_players(players))


def can_add_player(players: List[Player], config: GameConfig, max_players: int, name: str) -> bool:
    if is_any_player_compulsory(players, config):
        return False
    if len(active_players(players)) >= max_players:
        return False
    return not name_taken(players, name)


def check_not_compulsory(players: List[Player], config: GameConfig, action: str) -> None:
    if is_any_player_compulsory(players, config):
        raise EligibilityError(
            f"{action}. A player with score >= {config.compulsory_threshold} is in compulsory (cannot drop)"
        )


def check_can_re_enter(player: Player, players: List[Player], rounds: List[GameRound], config: GameConfig) -> None:
    """Raise EligibilityError unless can_re_enter holds"""
    if not player.is_eliminated:
        raise EligibilityError(f"Player {player.name} is not eliminated")

    check_not_compulsory(players, config, "Re-entry not allowed")

    if rounds_since_elimination(player, rounds) > 0:
        raise EligibilityError("Re-entry not allowed. Another round has been played since elimination")


def check_can_add_player(players: List[Player], config: GameConfig, max_players: int, name: str) -> None:
    """Raise EligibilityError unless can_add_player holds"""
    check_not_compulsory(players, config, "Cannot add player")

    if len(active_players(players)) >= max_players:
        raise EligibilityError(f"Maximum {max_players} players allowed")

    if name_taken(players, name):
        raise EligibilityError("A player with this name is already in the game")
