"""
Shared fixtures
"""
import pytest

from rummy_ledger import state
from rummy_ledger.core import session as session_core
from rummy_ledger.models import GameConfig, GameSession, Settings
from rummy_ledger.services.config_catalogue import ConfigCatalogue
from rummy_ledger.services.saved_players import SavedPlayerRoster
from rummy_ledger.services.storage import MemoryStore


@pytest.fixture
def config():
    """Standard rules: drops 20/40, full count 80, out at 250"""
    return GameConfig(
        id="standard",
        name="Standard Rules",
        first_drop_penalty=20,
        middle_drop_penalty=40,
        full_count_penalty=80,
        max_score=250,
        is_default=True,
    )


@pytest.fixture
def game(config):
    """Active game with P1, P2, P3 at 0"""
    return session_core.start_new_game(
        [{"id": "P1", "name": "Asha"}, {"id": "P2", "name": "Bala"}, {"id": "P3", "name": "Chitra"}],
        config
    )


@pytest.fixture
def fresh_state(config):
    """Reset global state to an empty game with an in-memory store"""
    state.SETTINGS = Settings(presets=[config])
    state.GAME = GameSession()
    state.CATALOGUE = ConfigCatalogue([config], "standard")
    state.SAVED_PLAYERS = SavedPlayerRoster()
    state.STORE = MemoryStore()
    state.LAST_PERSIST_ERROR = None
    yield state
    state.GAME = GameSession()
