"""
Round ledger - validation, appending and editing of rounds

All functions return new lists; the rounds passed in are never modified.
"""
import re
import time
from typing import Any, Dict, Iterable, List, Optional

from rummy_ledger.errors import NotFoundError, ValidationError
from rummy_ledger.models import GameConfig, GameRound, Player, RoundAction


INTEGER_RE = re.compile(r"-?\d+")


def penalty_for(action_type: str, config: GameConfig) -> int:
    """Fixed score for a drop / full-count action"""
    if action_type == "FIRST_DROP":
        return config.first_drop_penalty
    elif action_type == "MIDDLE_DROP":
        return config.middle_drop_penalty
    elif action_type == "FULL_COUNT":
        return config.full_count_penalty
    raise ValidationError(f"Unknown action type: {action_type}")


def coerce_score(player_id: str, value: Any) -> int:
    """
    Turn one submitted score into an int

    Accepts ints and strings holding a base-10 integer (form input).
    Floats are accepted only when integral.

    Raises:
        ValidationError: If the value is missing, non-numeric or negative
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"Missing or invalid score for player {player_id}")

    if isinstance(value, int):
        score = value
    elif isinstance(value, float) and value.is_integer():
        score = int(value)
    elif isinstance(value, str) and INTEGER_RE.fullmatch(value.strip()):
        score = int(value.strip())
    else:
        raise ValidationError(f"Score for player {player_id} is not a number: {value!r}")

    if score < 0:
        raise ValidationError(f"Score for player {player_id} cannot be negative: {score}")

    return score


def validate_scores(scores: Dict[str, Any], expected_ids: Iterable[str]) -> Dict[str, int]:
    """
    Validate a round's score map against the players expected in it

    Rules:
    - Key set must equal expected_ids exactly
    - Every score is a non-negative integer
    - At most one player scores 0 (only the round winner)

    Returns:
        Score map with int values, in expected_ids order
    """
    expected = list(expected_ids)

    missing = [pid for pid in expected if pid not in scores]
    if missing:
        raise ValidationError(f"Please enter scores for all players (missing: {', '.join(missing)})")

    unexpected = [pid for pid in scores if pid not in expected]
    if unexpected:
        raise ValidationError(f"Scores given for players not in this round: {', '.join(unexpected)}")

    clean = {pid: coerce_score(pid, scores[pid]) for pid in expected}

    zero_count = sum(1 for score in clean.values() if score == 0)
    if zero_count > 1:
        raise ValidationError("Only one player can have 0 score per round")

    return clean


def resolve_drops(
    scores: Dict[str, Any],
    drops: Optional[Dict[str, str]],
    config: GameConfig
) -> Dict[str, Any]:
    """
    Fill in scores for players who took a drop / full count

    A drop without an explicit score gets the configured penalty. An explicit
    score that disagrees with the penalty is rejected.
    """
    if not drops:
        return dict(scores)
    if not isinstance(drops, dict):
        raise ValidationError("Drops must map player ids to action types")

    resolved = dict(scores)
    for player_id, action_type in drops.items():
        if action_type == "NORMAL":
            continue
        penalty = penalty_for(action_type, config)
        given = resolved.get(player_id)
        if given is None or (isinstance(given, str) and not given.strip()):
            resolved[player_id] = penalty
        elif coerce_score(player_id, given) != penalty:
            raise ValidationError(
                f"Score {given} for player {player_id} does not match {action_type} penalty {penalty}"
            )

    return resolved


def append_round(
    rounds: List[GameRound],
    scores: Dict[str, Any],
    expected_ids: Iterable[str],
    round_number: int,
    drops: Optional[Dict[str, str]] = None,
    config: Optional[GameConfig] = None
) -> List[GameRound]:
    """
    Append a new round to the ledger

    Args:
        rounds: Current ledger
        scores: player_id -> score for this round
        expected_ids: Ids of the active, non-eliminated players
        round_number: Number for the new round (current round + 1)
        drops: Optional player_id -> action type for drop shortcuts
        config: Rule set, required when drops are given

    Returns:
        New ledger with the round appended
    """
    if any(r.round_number >= round_number for r in rounds):
        raise ValidationError(f"Round number {round_number} is already used")

    if not isinstance(scores, dict):
        raise ValidationError("Scores must map player ids to scores")
    if drops and config is None:
        raise ValidationError("Drop actions need a game config")

    raw = resolve_drops(scores, drops, config) if drops else dict(scores)
    clean = validate_scores(raw, expected_ids)

    now = time.time()
    actions = [
        RoundAction(
            player_id=pid,
            action_type=(drops or {}).get(pid, "NORMAL"),
            score=score,
            timestamp=now
        )
        for pid, score in clean.items()
    ]

    new_round = GameRound(
        round_number=round_number,
        scores=clean,
        timestamp=now,
        actions=actions
    )
    return [r.model_copy(deep=True) for r in rounds] + [new_round]


def find_round(rounds: List[GameRound], round_number: int) -> GameRound:
    for r in rounds:
        if r.round_number == round_number:
            return r
    raise NotFoundError(f"Round {round_number} not found")


def edit_round(rounds: List[GameRound], round_number: int, new_scores: Dict[str, Any]) -> List[GameRound]:
    """
    Replace the scores of a past round

    The edited round keeps its participants: the new map must cover exactly
    the players who were in the original round. Actions stay as submitted.

    Returns:
        New ledger with the round replaced
    """
    original = find_round(rounds, round_number)
    clean = validate_scores(new_scores, original.scores.keys())

    edited = []
    for r in rounds:
        if r.round_number == round_number:
            edited.append(r.model_copy(update={"scores": clean, "timestamp": time.time()}, deep=True))
        else:
            edited.append(r.model_copy(deep=True))
    return edited


def backfill_player(rounds: List[GameRound], player_id: str, first_round_score: int) -> List[GameRound]:
    """
    Give a mid-game joiner an entry in every existing round

    Every round gets 0 for the player, except the first round of the ledger,
    which carries the joiner's starting score so that a full replay
    reproduces it.
    """
    ordered = sorted((r.model_copy(deep=True) for r in rounds), key=lambda r: r.round_number)
    for r in ordered:
        r.scores.setdefault(player_id, 0)
    if ordered:
        ordered[0].scores[player_id] = first_round_score
    return ordered


def round_history(rounds: List[GameRound], players: List[Player]) -> List[dict]:
    """
    Round-by-round view of the ledger (only players present in each round)
    """
    names = {p.id: p.name for p in players}

    history = []
    for r in sorted(rounds, key=lambda r: r.round_number):
        history.append({
            "roundNumber": r.round_number,
            "timestamp": r.timestamp,
            "scores": [
                {
                    "playerId": pid,
                    "name": names.get(pid, pid),
                    "score": score,
                }
                for pid, score in r.scores.items()
            ],
            "winner": next((names.get(pid, pid) for pid, score in r.scores.items() if score == 0), None),
        })
    return history
