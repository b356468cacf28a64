"""
Global application state
Shared resources accessible across all modules
"""
from typing import Optional

from rummy_ledger.models import GameSession, Settings
from rummy_ledger.services.config_catalogue import ConfigCatalogue
from rummy_ledger.services.saved_players import SavedPlayerRoster
from rummy_ledger.services.storage import BlobStore, MemoryStore

# Loaded from config/rummy.yaml at startup
SETTINGS: Settings = Settings()

# The authoritative game. Only game_service replaces it.
GAME: GameSession = GameSession()

# Rule presets and the selected one
CATALOGUE: ConfigCatalogue = ConfigCatalogue(SETTINGS.presets, SETTINGS.default_config_id)

# Player identities reused across games
SAVED_PLAYERS: SavedPlayerRoster = SavedPlayerRoster()

# Durable store (JsonFileStore once the app has started)
STORE: BlobStore = MemoryStore()

# Last persistence failure, reported by the health endpoint
LAST_PERSIST_ERROR: Optional[str] = None
