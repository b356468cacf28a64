"""
Scoring recomputation engine

Rebuilds every player's derived state by replaying the whole ledger:

  total_score(p)  = Σ round.scores.get(p, 0)  over rounds in round order
  games_played(p) = number of rounds replayed (rounds since game start)
  eliminated      = first round where total_score >= max_score

Rules:
  - Derived state is never patched incrementally; every ledger change replays
    from round 1
  - Identity, is_active and re_entry_count survive a replay unchanged
  - A re-entry recorded after round N is re-applied once round N has been
    replayed, provided the player is eliminated at that point
  - The function is pure: same inputs, same output, inputs untouched
"""
from collections import defaultdict
from typing import Dict, Iterable, List

from rummy_ledger.models import GameConfig, GameRound, Player, ReEntry


def reset_player(player: Player) -> Player:
    """Player with all round-derived fields cleared"""
    return player.model_copy(update={
        "total_score": 0,
        "games_played": 0,
        "is_eliminated": False,
        "eliminated_at": None,
    })


def apply_round(player: Player, game_round: GameRound, config: GameConfig) -> Player:
    """
    Add one round to a player's running state

    Absent players contribute 0 but still count the round as played.
    """
    total = player.total_score + game_round.scores.get(player.id, 0)
    update = {
        "total_score": total,
        "games_played": player.games_played + 1,
    }
    if total >= config.max_score and not player.is_eliminated:
        update["is_eliminated"] = True
        update["eliminated_at"] = game_round.round_number
    return player.model_copy(update=update)


def apply_re_entry(player: Player, re_entry: ReEntry) -> Player:
    """Bring an eliminated player back at the recorded starting score"""
    if not player.is_eliminated:
        return player
    return player.model_copy(update={
        "total_score": re_entry.starting_score,
        "is_eliminated": False,
        "eliminated_at": None,
    })


def recompute(
    rounds: List[GameRound],
    players: List[Player],
    config: GameConfig,
    re_entries: Iterable[ReEntry] = ()
) -> List[Player]:
    """
    Replay the ledger and return a fresh player registry

    Args:
        rounds: Round ledger (any order; sorted by round number here)
        players: Current registry (only identity fields are kept)
        config: Rule set with the elimination threshold
        re_entries: Re-entries to re-apply during the replay

    Returns:
        New list of players, same order as the input
    """
    by_round: Dict[int, List[ReEntry]] = defaultdict(list)
    for re_entry in re_entries:
        by_round[re_entry.after_round].append(re_entry)

    replayed = [reset_player(p) for p in players]

    for game_round in sorted(rounds, key=lambda r: r.round_number):
        replayed = [apply_round(p, game_round, config) for p in replayed]

        for re_entry in by_round.get(game_round.round_number, []):
            replayed = [
                apply_re_entry(p, re_entry) if p.id == re_entry.player_id else p
                for p in replayed
            ]

    return replayed

