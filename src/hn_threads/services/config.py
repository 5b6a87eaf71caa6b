"""
Loads and handles config from config.yml
Any key can be overridden by an environment variable of the same name (.env is honoured)
"""
import logging
import os
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class Config(BaseModel):
    # Upstream API
    HN_BASE_URL: str = "https://hacker-news.firebaseio.com/v0"
    REQUEST_TIMEOUT: float = 30.0
    MAX_CONCURRENCY: Optional[int] = Field(default=None, gt=0)  # None = unbounded

    # Aggregation
    TOP_STORIES_LIMIT: int = 200

    # Output
    OUTPUT_DIR: str = "output"
    LOG_LEVEL: str = "INFO"


def _get_config_path() -> Optional[str]:
    """Find resources/config.yml, or None when the project ships without one."""
    if os.path.exists("resources/config.yml"):
        return "resources/config.yml"

    # src/hn_threads/services -> project root
    project_root = os.path.dirname(os.path.dirname(os.path.dirname(
        os.path.dirname(os.path.abspath(__file__)))))
    config_path = os.path.join(project_root, "resources", "config.yml")
    if os.path.exists(config_path):
        return config_path

    return None


def _optional_int(value: Any) -> Optional[int]:
    if value is None or str(value).strip().lower() in ("", "none", "0"):
        return None
    return int(value)


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from config.yml, then apply environment overrides."""
    load_dotenv()

    config_path = path or _get_config_path()
    data: Dict[str, Any] = {}

    if config_path:
        with open(config_path, "r", encoding="utf-8") as file:
            loaded = yaml.safe_load(file) or {}
        # Empty keys ("REQUEST_TIMEOUT:") fall back to defaults
        data = {k: v for k, v in loaded.items() if v is not None}
        logger.debug(f"Loaded config from {config_path}")
    else:
        logger.debug("No config.yml found, using defaults")

    for key in Config.model_fields:
        if key in os.environ:
            data[key] = os.environ[key]

    defaults = Config()

    return Config(
        HN_BASE_URL=data.get("HN_BASE_URL", defaults.HN_BASE_URL),
        REQUEST_TIMEOUT=float(data.get("REQUEST_TIMEOUT", defaults.REQUEST_TIMEOUT)),
        MAX_CONCURRENCY=_optional_int(data.get("MAX_CONCURRENCY")),
        TOP_STORIES_LIMIT=int(data.get("TOP_STORIES_LIMIT", defaults.TOP_STORIES_LIMIT)),
        OUTPUT_DIR=data.get("OUTPUT_DIR", defaults.OUTPUT_DIR),
        LOG_LEVEL=str(data.get("LOG_LEVEL", defaults.LOG_LEVEL)).upper(),
    )
