"""
Catalogue of named rule presets

Default presets (is_default) can be edited but not deleted.
"""
import time
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from rummy_ledger.errors import EligibilityError, NotFoundError, ValidationError
from rummy_ledger.models import GameConfig


logger = logging.getLogger(__name__)


def _field_names(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map camelCase keys to field names"""
    alias_to_name = {field.alias: name for name, field in GameConfig.model_fields.items() if field.alias}
    return {alias_to_name.get(k, k): v for k, v in data.items()}


def build_config(data: Dict[str, Any], config_id: Optional[str] = None) -> GameConfig:
    """
    Validate a preset payload into a GameConfig

    Raises:
        ValidationError: If a field is missing or not a positive integer
    """
    payload = _field_names(data)
    if config_id is not None:
        payload["id"] = config_id
    if not payload.get("id"):
        payload["id"] = f"config_{int(time.time() * 1000)}"
    if not str(payload.get("name", "")).strip():
        raise ValidationError("Please enter a config name")
    try:
        return GameConfig.model_validate(payload)
    except PydanticValidationError as e:
        fields = ", ".join(str(err["loc"][-1]) for err in e.errors())
        raise ValidationError(f"Invalid config fields: {fields}") from e


class ConfigCatalogue:
    """Rule presets plus the currently selected one"""

    def __init__(self, configs: List[GameConfig], selected_id: str = "standard"):
        self.configs: List[GameConfig] = list(configs)
        self.selected_id = selected_id

    def list(self) -> List[GameConfig]:
        return list(self.configs)

    def get(self, config_id: str) -> GameConfig:
        for config in self.configs:
            if config.id == config_id:
                return config
        raise NotFoundError(f"Config {config_id} not found")

    @property
    def selected(self) -> GameConfig:
        """Selected preset, falling back to the first one"""
        for config in self.configs:
            if config.id == self.selected_id:
                return config
        if not self.configs:
            raise NotFoundError("No rule presets configured")
        return self.configs[0]

    def add(self, data: Dict[str, Any]) -> GameConfig:
        config = build_config({**data, "is_default": False})
        if any(c.id == config.id for c in self.configs):
            raise ValidationError(f"Config {config.id} already exists")
        self.configs.append(config)
        logger.info(f"✅ Config {config.id} ({config.name}) created")
        return config

    def update(self, config_id: str, data: Dict[str, Any]) -> GameConfig:
        current = self.get(config_id)
        merged = {**current.model_dump(), **_field_names(data), "is_default": current.is_default}
        config = build_config(merged, config_id=config_id)
        self.configs = [config if c.id == config_id else c for c in self.configs]
        logger.info(f"✅ Config {config_id} updated")
        return config

    def delete(self, config_id: str) -> None:
        config = self.get(config_id)
        if config.is_default:
            raise EligibilityError("Cannot delete default configs")
        self.configs = [c for c in self.configs if c.id != config_id]
        if self.selected_id == config_id:
            self.selected_id = "standard"
        logger.info(f"🗑️ Config {config_id} deleted")

    def select(self, config_id: str) -> GameConfig:
        config = self.get(config_id)
        self.selected_id = config_id
        return config

    def to_blob(self) -> Dict[str, Any]:
        return {
            "configs": [c.model_dump(mode="json", by_alias=True) for c in self.configs],
            "selectedConfigId": self.selected_id,
        }

    @classmethod
    def from_blob(cls, blob: Dict[str, Any]) -> "ConfigCatalogue":
        configs = [GameConfig.model_validate(c) for c in blob.get("configs", [])]
        return cls(configs, blob.get("selectedConfigId", "standard"))
