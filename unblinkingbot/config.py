"""
Bot configuration: JSON bot config plus environment secrets.
"""

import os
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

BOT_DIR = Path(__file__).parent.parent
REQUIRED_ENV_VARS = ["SLACK_BOT_TOKEN", "SLACK_APP_TOKEN"]


class ConfigError(Exception):
    """Configuration is missing or invalid."""
    pass


@dataclass
class BotConfig:
    """Settings read from a bot config JSON file."""
    name: str = "unblinkingbot"
    env_file: Optional[str] = None
    data_dir: Optional[Path] = None
    upload_workers: int = 5
    snapshot_timeout: float = 10.0

    @classmethod
    def from_dict(cls, data: dict, base_dir: Path = BOT_DIR) -> "BotConfig":
        data_dir = data.get("data_dir")
        upload_workers = int(data.get("upload_workers", 5))
        if upload_workers < 1:
            raise ConfigError(f"upload_workers must be at least 1, got {upload_workers}")
        return cls(
            name=data.get("name", "unblinkingbot"),
            env_file=data.get("env_file"),
            data_dir=base_dir / data_dir if data_dir else None,
            upload_workers=upload_workers,
            snapshot_timeout=float(data.get("snapshot_timeout", 10.0)),
        )


def load_bot_config(path: Optional[str], base_dir: Path = BOT_DIR) -> BotConfig:
    """Load a bot config file relative to base_dir, or the defaults."""
    if not path:
        return BotConfig()

    config_path = base_dir / path
    try:
        with open(config_path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read bot config {config_path}: {e}") from e

    config = BotConfig.from_dict(data, base_dir)
    logger.info(f"Loaded bot config: {config.name}")
    return config


def load_environment(env_file: Optional[str] = None, base_dir: Path = BOT_DIR) -> None:
    """
    Load environment variables and check the required ones.

    Raises:
        ConfigError: If a required variable is missing
    """
    env_path = base_dir / (env_file or ".env")
    load_dotenv(env_path)

    missing = [var for var in REQUIRED_ENV_VARS if not os.getenv(var)]
    if missing:
        raise ConfigError(
            f"Missing required environment variables: {', '.join(missing)}"
        )
