"""
Runtime configuration for the Heavy Lifter service.

Settings come from environment variables (prefixed ``HEAVYLIFTER_``), with an
optional ``.env`` file in the project root loaded first. Every value has a
default so the service starts with no configuration at all.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "HEAVYLIFTER_"
PROJECT_ROOT = Path(__file__).resolve().parent.parent

CONFIDENCE_MODES = ("random", "signals")
LOG_FORMATS = ("text", "json")


def _env(name: str, default: str) -> str:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


def _env_float(name: str, default: float) -> float:
    raw = _env(name, "")
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid %s%s=%r, using %s", ENV_PREFIX, name, raw, default)
        return default
    if value < 0:
        logger.warning("Negative %s%s=%r, using %s", ENV_PREFIX, name, raw, default)
        return default
    return value


def _env_int(name: str, default: int) -> int:
    raw = _env(name, "")
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid %s%s=%r, using %s", ENV_PREFIX, name, raw, default)
        return default
    if value < 0:
        logger.warning("Negative %s%s=%r, using %s", ENV_PREFIX, name, raw, default)
        return default
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Service settings. Durations are in seconds; 0 disables a limit or delay."""

    host: str = "0.0.0.0"
    port: int = 5001
    debug: bool = False
    secret_key: Optional[str] = None

    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"

    # Conversation store eviction
    conversation_ttl: float = 3600.0
    max_conversations: int = 1000

    # Requirement extraction
    confidence_mode: str = "random"  # "random" or "signals"

    # Simulated latency
    analysis_delay: float = 0.5
    generation_delay: float = 0.0
    build_step_delay: float = 1.0

    # Finished builds are pruned after this long
    build_ttl: float = 3600.0

    # Base URL used by the terminal client
    api_url: str = "http://localhost:5001"

    def __post_init__(self):
        if self.confidence_mode not in CONFIDENCE_MODES:
            logger.warning("Unknown confidence mode %r, using 'random'", self.confidence_mode)
            self.confidence_mode = "random"
        if self.log_format not in LOG_FORMATS:
            self.log_format = "text"
        self.log_level = self.log_level.upper()

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Settings":
        """Build settings from the environment, reading ``.env`` if present."""
        dotenv_path = env_file or PROJECT_ROOT / ".env"
        if dotenv_path.exists():
            load_dotenv(dotenv_path, override=False)

        return cls(
            host=_env("HOST", cls.host),
            port=_env_int("PORT", cls.port),
            debug=_env_bool("DEBUG", cls.debug),
            secret_key=_env("SECRET_KEY", "") or None,
            log_level=_env("LOG_LEVEL", cls.log_level),
            log_format=_env("LOG_FORMAT", cls.log_format),
            conversation_ttl=_env_float("CONVERSATION_TTL", cls.conversation_ttl),
            max_conversations=_env_int("MAX_CONVERSATIONS", cls.max_conversations),
            confidence_mode=_env("CONFIDENCE_MODE", cls.confidence_mode),
            analysis_delay=_env_float("ANALYSIS_DELAY", cls.analysis_delay),
            generation_delay=_env_float("GENERATION_DELAY", cls.generation_delay),
            build_step_delay=_env_float("BUILD_STEP_DELAY", cls.build_step_delay),
            build_ttl=_env_float("BUILD_TTL", cls.build_ttl),
            api_url=_env("API_URL", cls.api_url).rstrip("/"),
        )
