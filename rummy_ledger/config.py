"""
Settings loader
"""
import os
import logging
from pathlib import Path

import yaml

from rummy_ledger.models import Settings


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/rummy.yaml"


def get_config_path() -> str:
    """Config path, overridable with the RUMMY_CONFIG environment variable"""
    return os.environ.get("RUMMY_CONFIG", DEFAULT_CONFIG_PATH)


def load_settings(config_path: str = None) -> Settings:
    """
    Load settings from YAML file
    
    Args:
        config_path: Path to config file (default: RUMMY_CONFIG or config/rummy.yaml)
        
    Returns:
        Settings object
        
    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If min_players is greater than max_players
    """
    path = Path(config_path or get_config_path())
    
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    
    settings = Settings(**data)
    
    if settings.min_players > settings.max_players:
        raise ValueError(
            f"min_players ({settings.min_players}) cannot exceed max_players ({settings.max_players})"
        )
    
    logger.info(f"✅ Loaded settings from {path} with {len(settings.presets)} rule presets")
    return settings
