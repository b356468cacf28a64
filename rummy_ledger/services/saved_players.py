"""Saved player roster - identities reused across games"""
import time
import uuid
import logging
from typing import Any, Dict, List

from rummy_ledger.errors import NotFoundError, ValidationError
from rummy_ledger.models import SavedPlayer
from rummy_ledger.core.registry import clean_player_name


logger = logging.getLogger(__name__)


class SavedPlayerRoster:

    def __init__(self, players: List[SavedPlayer] = None):
        self.players: List[SavedPlayer] = list(players or [])

    def list(self) -> List[SavedPlayer]:
        """Most recently used first"""
        return sorted(self.players, key=lambda p: -p.last_used)

    def get(self, player_id: str) -> SavedPlayer:
        for player in self.players:
            if player.id == player_id:
                return player
        raise NotFoundError(f"Saved player {player_id} not found")

    def find_by_name(self, name: str):
        wanted = name.strip().lower()
        return next((p for p in self.players if p.name.lower() == wanted), None)

    def add(self, name: str, player_id: str = None) -> SavedPlayer:
        clean_name = clean_player_name(name)
        if self.find_by_name(clean_name):
            raise ValidationError("Player name already exists")

        player = SavedPlayer(
            id=player_id or f"player-{uuid.uuid4().hex[:12]}",
            name=clean_name,
            games_played=0,
            last_used=time.time()
        )
        self.players.append(player)
        logger.info(f"✅ Saved player {clean_name} added")
        return player

    def rename(self, player_id: str, name: str) -> SavedPlayer:
        clean_name = clean_player_name(name)
        existing = self.find_by_name(clean_name)
        if existing and existing.id != player_id:
            raise ValidationError("Player name already exists")

        updated = self.get(player_id).model_copy(update={"name": clean_name})
        self.players = [updated if p.id == player_id else p for p in self.players]
        return updated

    def delete(self, player_id: str) -> None:
        self.get(player_id)
        self.players = [p for p in self.players if p.id != player_id]

    def mark_used(self, player_id: str) -> SavedPlayer:
        """Count one more game for a saved player"""
        player = self.get(player_id)
        updated = player.model_copy(update={
            "games_played": player.games_played + 1,
            "last_used": time.time(),
        })
        self.players = [updated if p.id == player_id else p for p in self.players]
        return updated

    def to_blob(self) -> List[Dict[str, Any]]:
        return [p.model_dump(mode="json", by_alias=True) for p in self.players]

    @classmethod
    def from_blob(cls, blob: List[Dict[str, Any]]) -> "SavedPlayerRoster":
        return cls([SavedPlayer.model_validate(p) for p in blob or []])
