"""
Game session commands

Each command is a pure function (session, payload) -> new session. Guards run
first; on failure a GameError is raised and the given session is untouched.
Any change to the ledger is followed by a full recomputation of the registry.

States: not_started -> active <-> paused -> ended
"""
import time
import uuid
import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from rummy_ledger.errors import EligibilityError, SessionStateError, ValidationError
from rummy_ledger.models import GameConfig, GameSession, GameStatus, Player, ReEntry
from rummy_ledger.core import ledger
from rummy_ledger.core import registry
from rummy_ledger.core.eligibility import check_can_add_player, check_can_re_enter
from rummy_ledger.core.scoring import recompute


logger = logging.getLogger(__name__)

MIN_PLAYERS = 2
MAX_PLAYERS = 9

IN_PROGRESS = (GameStatus.ACTIVE, GameStatus.PAUSED)


def new_player_id() -> str:
    return f"player-{uuid.uuid4().hex[:12]}"


def require_status(session: GameSession, allowed: Iterable[GameStatus], action: str) -> None:
    """Raise SessionStateError if the session is not in one of the allowed states"""
    allowed = tuple(allowed)
    if session.status not in allowed:
        expected = " or ".join(s.value for s in allowed)
        raise SessionStateError(
            f"Cannot {action}: game is {session.status.value} (must be {expected})"
        )


def _build_roster(entries: List[Union[str, Dict[str, Any]]]) -> List[Player]:
    players = []
    seen_names = set()
    seen_ids = set()

    for entry in entries:
        if isinstance(entry, str):
            entry = {"name": entry}
        if not isinstance(entry, dict):
            raise ValidationError(f"Invalid player entry: {entry!r}")
        name = registry.clean_player_name(entry.get("name"))
        if name.lower() in seen_names:
            raise ValidationError(f"Player name {name} is used twice")

        player_id = entry.get("id") or new_player_id()
        if not isinstance(player_id, str):
            raise ValidationError(f"Invalid player id: {player_id!r}")
        if player_id in seen_ids:
            raise ValidationError(f"Player id {player_id} is used twice")

        seen_names.add(name.lower())
        seen_ids.add(player_id)
        players.append(Player(id=player_id, name=name))

    return players


def start_new_game(
    entries: List[Union[str, Dict[str, Any]]],
    config: GameConfig,
    min_players: int = MIN_PLAYERS,
    max_players: int = MAX_PLAYERS
) -> GameSession:
    """
    Start a fresh game: new roster, empty ledger, round 0

    Args:
        entries: Player names, or {"id", "name"} dicts for saved players
        config: Rule set for this game
        min_players: Smallest allowed roster
        max_players: Largest allowed roster

    Returns:
        New active GameSession
    """
    if len(entries) < min_players:
        raise ValidationError(f"Minimum {min_players} players required")
    if len(entries) > max_players:
        raise ValidationError(f"Maximum {max_players} players allowed")

    players = _build_roster(entries)
    session = GameSession(
        game_id=uuid.uuid4().hex,
        is_active=True,
        started_at=time.time(),
        current_round=0,
        players=players,
        rounds=[],
        config=config,
        is_paused=False,
        re_entries=[]
    )
    logger.info(f"✅ Game {session.game_id} started with {len(players)} players ({config.name})")
    return session


def submit_round(
    session: GameSession,
    scores: Dict[str, Any],
    drops: Optional[Dict[str, str]] = None
) -> GameSession:
    """
    Record the next round and recompute standings

    Scores must cover exactly the active, non-eliminated players.
    """
    require_status(session, [GameStatus.ACTIVE], "submit a round")

    expected_ids = [p.id for p in registry.contenders(session.players)]
    if not expected_ids:
        raise ValidationError("No players left to score")

    round_number = session.current_round + 1
    rounds = ledger.append_round(
        session.rounds, scores, expected_ids, round_number,
        drops=drops, config=session.config
    )
    players = recompute(rounds, session.players, session.config, session.re_entries)

    for player in players:
        if player.eliminated_at == round_number:
            logger.info(f"💥 {player.name} eliminated in round {round_number} with {player.total_score}")

    return session.model_copy(update={
        "rounds": rounds,
        "players": players,
        "current_round": round_number,
    })


def edit_round(session: GameSession, round_number: int, scores: Dict[str, Any]) -> GameSession:
    """Correct a past round and replay the whole ledger"""
    require_status(session, IN_PROGRESS, "edit a round")

    rounds = ledger.edit_round(session.rounds, round_number, scores)
    players = recompute(rounds, session.players, session.config, session.re_entries)

    logger.info(f"✏️ Round {round_number} of game {session.game_id} edited")
    return session.model_copy(update={"rounds": rounds, "players": players})


def remove_player(session: GameSession, player_id: str) -> GameSession:
    """Soft-remove a player; their rounds stay in the ledger"""
    require_status(session, IN_PROGRESS, "remove a player")
    registry.get_player(session.players, player_id)

    players = [
        p.model_copy(update={"is_active": False}) if p.id == player_id else p
        for p in session.players
    ]
    return session.model_copy(update={"players": players})


def re_enter(session: GameSession, player_id: str) -> GameSession:
    """
    Bring an eliminated player back at the field's highest active score

    The round data is not touched; the re-entry is recorded so that later
    replays keep it.
    """
    require_status(session, IN_PROGRESS, "re-enter a player")
    player = registry.get_player(session.players, player_id)
    check_can_re_enter(player, session.players, session.rounds, session.config)

    score = registry.starting_score(session.players)
    re_entry = ReEntry(
        player_id=player_id,
        after_round=session.current_round,
        starting_score=score,
        timestamp=time.time()
    )

    players = [
        p.model_copy(update={
            "total_score": score,
            "is_eliminated": False,
            "is_active": True,
            "eliminated_at": None,
            "re_entry_count": p.re_entry_count + 1,
        }) if p.id == player_id else p
        for p in session.players
    ]

    logger.info(f"🔁 {player.name} re-entered game {session.game_id} with score {score}")
    return session.model_copy(update={
        "players": players,
        "re_entries": list(session.re_entries) + [re_entry],
    })


def add_player(
    session: GameSession,
    name: str,
    player_id: Optional[str] = None,
    max_players: int = MAX_PLAYERS
) -> GameSession:
    """
    Add a player mid-game at the field's highest active score

    With rounds already played, the starting score is written into the first
    round of the ledger (and 0 into every later round) so a full replay
    reproduces it.

    Args:
        session: Current session
        name: Display name
        player_id: Id of a saved player (a fresh id is generated if omitted)
        max_players: Largest allowed number of active players
    """
    require_status(session, IN_PROGRESS, "add a player")

    name = registry.clean_player_name(name)
    if player_id and registry.find_player(session.players, player_id):
        raise EligibilityError("Player is already in the game")

    check_can_add_player(session.players, session.config, max_players, name)

    score = registry.starting_score(session.players)
    newcomer = Player(id=player_id or new_player_id(), name=name, total_score=score)
    players = list(session.players) + [newcomer]

    if session.rounds:
        rounds = ledger.backfill_player(session.rounds, newcomer.id, score)
        players = recompute(rounds, players, session.config, session.re_entries)
    else:
        rounds = session.rounds

    logger.info(f"➕ {name} joined game {session.game_id} with score {score}")
    return session.model_copy(update={"players": players, "rounds": rounds})


def set_player_score(session: GameSession, player_id: str, score: Any) -> GameSession:
    """Registry maintenance: overwrite a player's total (not part of round flow)"""
    require_status(session, IN_PROGRESS, "set a player score")
    players = registry.set_player_score(
        session.players, player_id, score, session.config, current_round=session.current_round
    )
    logger.warning(f"⚠️ Score of player {player_id} set to {score} outside the round flow")
    return session.model_copy(update={"players": players})


def pause_game(session: GameSession) -> GameSession:
    require_status(session, [GameStatus.ACTIVE], "pause")
    return session.model_copy(update={"is_paused": True})


def resume_game(session: GameSession) -> GameSession:
    require_status(session, [GameStatus.PAUSED], "resume")
    return session.model_copy(update={"is_paused": False})


def end_game(session: GameSession) -> GameSession:
    """Close the game; the ledger stays readable but frozen"""
    require_status(session, IN_PROGRESS, "end the game")
    logger.info(f"🛑 Game {session.game_id} ended after {session.current_round} rounds")
    return session.model_copy(update={"is_active": False, "is_paused": False})


def reset_game() -> GameSession:
    """Empty, not-started session"""
    return GameSession()
