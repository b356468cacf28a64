"""
Data models for the game ledger

Field names are snake_case in Python and camelCase on the wire / in storage.
Models accept either spelling on input.
"""
from enum import Enum
from typing import List, Dict, Optional, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


ActionType = Literal["NORMAL", "FIRST_DROP", "MIDDLE_DROP", "FULL_COUNT"]


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GameConfig(CamelModel):
    """Named rule set. Frozen: a session keeps its own copy."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    name: str
    first_drop_penalty: int = Field(gt=0)
    middle_drop_penalty: int = Field(gt=0)
    full_count_penalty: int = Field(gt=0)
    max_score: int = Field(gt=0)     # elimination threshold
    is_default: bool = False

    @property
    def compulsory_threshold(self) -> int:
        """Score at which a player can no longer afford a first drop"""
        return self.max_score - self.first_drop_penalty


class Player(CamelModel):
    """Registry entry for one participant of a game"""
    id: str
    name: str
    total_score: int = Field(0, ge=0)
    is_active: bool = True            # False = removed from the game
    is_eliminated: bool = False
    games_played: int = Field(0, ge=0)
    eliminated_at: Optional[int] = None  # round number of elimination
    re_entry_count: int = Field(0, ge=0)


class RoundAction(CamelModel):
    """What one player did in a round"""
    player_id: str
    action_type: ActionType = "NORMAL"
    score: int = Field(ge=0)
    timestamp: float


class GameRound(CamelModel):
    """One round of the ledger. The score keys are the round's participants."""
    round_number: int = Field(ge=1)
    scores: Dict[str, int] = {}
    timestamp: float
    actions: List[RoundAction] = []


class ReEntry(CamelModel):
    """Re-entry granted to a player after a given round"""
    player_id: str
    after_round: int = Field(ge=0)
    starting_score: int = Field(ge=0)
    timestamp: float


class GameStatus(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    PAUSED = "paused"
    ENDED = "ended"


STANDARD_CONFIG = GameConfig(
    id="standard",
    name="Standard Rules",
    first_drop_penalty=20,
    middle_drop_penalty=40,
    full_count_penalty=80,
    max_score=250,
    is_default=True,
)


class GameSession(CamelModel):
    """Whole state of one game: roster, ledger and rules"""
    game_id: str = ""
    is_active: bool = False
    started_at: Optional[float] = None
    current_round: int = 0
    players: List[Player] = []
    rounds: List[GameRound] = []
    config: GameConfig = STANDARD_CONFIG
    is_paused: bool = False
    re_entries: List[ReEntry] = []

    @property
    def status(self) -> GameStatus:
        if self.is_active:
            return GameStatus.PAUSED if self.is_paused else GameStatus.ACTIVE
        if self.started_at is None:
            return GameStatus.NOT_STARTED
        return GameStatus.ENDED


class SavedPlayer(CamelModel):
    """Player identity kept across games"""
    id: str
    name: str
    games_played: int = Field(0, ge=0)
    last_used: float = 0.0


class Settings(BaseModel):
    """Application settings loaded from config/rummy.yaml"""
    min_players: int = Field(2, ge=1)
    max_players: int = Field(9, ge=1)
    storage_dir: str = "data"
    default_config_id: str = "standard"
    presets: List[GameConfig] = [STANDARD_CONFIG]
