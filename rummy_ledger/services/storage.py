"""
Persistence for sessions, configs and saved players

A store is a durable key -> blob mapping with save / load / clear. Blobs are
JSON-compatible trees (the camelCase form of the models). No versioning or
migration is applied when loading.
"""
import json
import shutil
import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from rummy_ledger.errors import StorageError
from rummy_ledger.models import GameSession


logger = logging.getLogger(__name__)

GAME_BACKUP_KEY = "rummy_game_backup"
CONFIGS_KEY = "rummy_configs"
SAVED_PLAYERS_KEY = "rummy_saved_players"


class BlobStore:
    """Key -> JSON blob store interface"""

    def save(self, key: str, blob: Any) -> None:
        raise NotImplementedError

    def load(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def clear(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(BlobStore):
    """In-process store (tests, and runs without a storage directory)"""

    def __init__(self):
        self._blobs: Dict[str, str] = {}

    def save(self, key: str, blob: Any) -> None:
        self._blobs[key] = json.dumps(blob)

    def load(self, key: str) -> Optional[Any]:
        raw = self._blobs.get(key)
        return json.loads(raw) if raw is not None else None

    def clear(self, key: str) -> None:
        self._blobs.pop(key, None)


class JsonFileStore(BlobStore):
    """One <key>.json file per key under a directory"""

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def save(self, key: str, blob: Any) -> None:
        """
        Write a blob atomically using a temporary file

        Raises:
            StorageError: If the file cannot be written
        """
        path = self._path(key)
        tmp_path = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode='w',
                encoding='utf-8',
                delete=False,
                suffix='.json',
                dir=path.parent  # Same filesystem for atomic move
            ) as tmp:
                tmp_path = Path(tmp.name)
                json.dump(blob, tmp)
            shutil.move(str(tmp_path), str(path))
            logger.debug(f"Saved {key} to {path}")
        except (OSError, TypeError, ValueError) as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise StorageError(f"Could not save {key}: {e}") from e

    def load(self, key: str) -> Optional[Any]:
        """
        Read a blob, or None if the key was never saved

        Raises:
            StorageError: If the file exists but cannot be read or parsed
        """
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Could not load {key}: {e}") from e

    def clear(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not clear {key}: {e}") from e


def serialize_session(session: GameSession) -> Dict[str, Any]:
    return session.model_dump(mode="json", by_alias=True)


def deserialize_session(blob: Any) -> GameSession:
    """
    Rebuild a session from its stored form

    Raises:
        StorageError: If the blob is not a valid session record
    """
    try:
        return GameSession.model_validate(blob)
    except PydanticValidationError as e:
        raise StorageError(f"Stored game is not a valid session: {e.error_count()} problem(s)") from e


def save_game(store: BlobStore, session: GameSession) -> None:
    store.save(GAME_BACKUP_KEY, serialize_session(session))


def load_game(store: BlobStore) -> Optional[GameSession]:
    blob = store.load(GAME_BACKUP_KEY)
    if blob is None:
        return None
    return deserialize_session(blob)


def clear_game(store: BlobStore) -> None:
    store.clear(GAME_BACKUP_KEY)


def export_game(session: GameSession) -> str:
    """Pretty-printed JSON document of a game"""
    return json.dumps(serialize_session(session), indent=2)


def import_game(text: str) -> GameSession:
    """
    Parse a game exported with export_game

    Raises:
        StorageError: If the text is not JSON or not a valid session
    """
    try:
        blob = json.loads(text)
    except ValueError as e:
        raise StorageError(f"Error parsing game data: {e}") from e
    return deserialize_session(blob)
