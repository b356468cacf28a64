"""
Game service - owner of the authoritative session

Commands are applied one at a time behind a single lock: validation,
mutation and recomputation finish before the next command is accepted.
Persistence happens afterwards and outside the lock; a failed save is logged
and reported but never rolls back the in-memory game.
"""
import threading
import logging
from typing import Any, Callable, Dict, List, Optional

from rummy_ledger import state
from rummy_ledger.core import session as session_core
from rummy_ledger.core.registry import clean_player_name, find_player
from rummy_ledger.errors import GameError, StorageError, ValidationError
from rummy_ledger.models import GameSession
from rummy_ledger.services import storage
from rummy_ledger.services.config_catalogue import ConfigCatalogue
from rummy_ledger.services.saved_players import SavedPlayerRoster


logger = logging.getLogger(__name__)

_lock = threading.Lock()


def current_game() -> GameSession:
    return state.GAME


def apply(command: Callable[..., GameSession], *args, **kwargs) -> GameSession:
    """
    Run a session command against the current game and commit the result

    Raises:
        GameError: Whatever the command rejected with; the game is unchanged
    """
    with _lock:
        try:
            updated = command(state.GAME, *args, **kwargs)
        except GameError as e:
            logger.warning(f"❌ {command.__name__} rejected: {e.message}")
            raise
        state.GAME = updated
    logger.info(f"✅ {command.__name__} applied | round {updated.current_round} | {updated.status.value}")
    return updated


def _resolve_entry(entry: Dict[str, Any], new_saved: List[Dict[str, str]]) -> Dict[str, str]:
    if not isinstance(entry, dict):
        raise ValidationError(f"Invalid player entry: {entry!r}")

    saved_id = entry.get("savedPlayerId") or entry.get("saved_player_id")
    if saved_id:
        saved = state.SAVED_PLAYERS.get(saved_id)
        return {"id": saved.id, "name": saved.name}

    name = clean_player_name(entry.get("name"))
    saved = state.SAVED_PLAYERS.find_by_name(name)
    if saved:
        return {"id": saved.id, "name": saved.name}

    resolved = {"id": session_core.new_player_id(), "name": name}
    new_saved.append(resolved)
    return resolved


def _game_player_id(saved_id: str) -> str:
    """
    Id to use in the running game for a saved player

    A saved player who was removed from this game comes back under a
    fresh id; their old entry stays in the ledger history.
    """
    player = find_player(state.GAME.players, saved_id)
    if player is not None and not player.is_active:
        return session_core.new_player_id()
    return saved_id


def start_game(entries: List[Dict[str, Any]], config_id: Optional[str] = None) -> GameSession:
    """
    Start a new game from saved players and/or new names

    New names are added to the saved roster once the game has started, and
    every saved player in the game gets one more game counted.
    """
    config = state.CATALOGUE.get(config_id) if config_id else state.CATALOGUE.selected
    new_saved: List[Dict[str, str]] = []
    roster = [_resolve_entry(entry, new_saved) for entry in entries]

    with _lock:
        session = session_core.start_new_game(
            roster,
            config,
            min_players=state.SETTINGS.min_players,
            max_players=state.SETTINGS.max_players
        )
        state.GAME = session

    for entry in new_saved:
        state.SAVED_PLAYERS.add(entry["name"], player_id=entry["id"])
    for player in session.players:
        state.SAVED_PLAYERS.mark_used(player.id)

    return session


def add_player(name: Optional[str] = None, saved_player_id: Optional[str] = None) -> GameSession:
    """Add a new or saved player to the running game"""
    if saved_player_id:
        saved = state.SAVED_PLAYERS.get(saved_player_id)
        return apply(
            session_core.add_player, saved.name,
            player_id=_game_player_id(saved.id), max_players=state.SETTINGS.max_players
        )

    name = clean_player_name(name)
    existing = state.SAVED_PLAYERS.find_by_name(name)
    player_id = _game_player_id(existing.id) if existing else session_core.new_player_id()
    session = apply(
        session_core.add_player, name,
        player_id=player_id, max_players=state.SETTINGS.max_players
    )
    if existing is None:
        state.SAVED_PLAYERS.add(name, player_id=player_id)
    return session


def reset() -> GameSession:
    """Drop the current game and its backup"""
    with _lock:
        state.GAME = session_core.reset_game()
    try:
        storage.clear_game(state.STORE)
    except StorageError as e:
        state.LAST_PERSIST_ERROR = e.message
        logger.error(f"❌ Failed to clear game backup: {e.message}")
    return state.GAME


def import_game(text: str) -> GameSession:
    """Replace the current game with an exported one"""
    session = storage.import_game(text)
    with _lock:
        state.GAME = session
    logger.info(f"📥 Imported game {session.game_id} ({session.current_round} rounds)")
    return session


def persist() -> None:
    """Save game, configs and saved players; failures are recorded, not raised"""
    with _lock:
        game_blob = storage.serialize_session(state.GAME)
    try:
        state.STORE.save(storage.GAME_BACKUP_KEY, game_blob)
        state.STORE.save(storage.CONFIGS_KEY, state.CATALOGUE.to_blob())
        state.STORE.save(storage.SAVED_PLAYERS_KEY, state.SAVED_PLAYERS.to_blob())
        state.LAST_PERSIST_ERROR = None
    except StorageError as e:
        state.LAST_PERSIST_ERROR = e.message
        logger.error(f"❌ Failed to persist game: {e.message}")


def restore() -> None:
    """Load whatever was persisted; unreadable blobs are logged and skipped"""
    try:
        game = storage.load_game(state.STORE)
        if game is not None:
            state.GAME = game
            logger.info(f"✅ Restored game {game.game_id} at round {game.current_round}")
    except StorageError as e:
        logger.error(f"❌ Could not restore game: {e.message}")

    try:
        configs = state.STORE.load(storage.CONFIGS_KEY)
        if configs:
            state.CATALOGUE = ConfigCatalogue.from_blob(configs)
        players = state.STORE.load(storage.SAVED_PLAYERS_KEY)
        if players:
            state.SAVED_PLAYERS = SavedPlayerRoster.from_blob(players)
    except (StorageError, ValueError) as e:
        logger.error(f"❌ Could not restore configs or saved players: {e}")
