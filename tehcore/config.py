"""Bot configuration — explicit option model and environment loading.

``BotOptions`` enumerates every recognised setting with its default.  Unknown
keys are rejected so a misspelt option never silently falls back to a
default.  ``BotOptions.from_env`` and ``load_token`` read the environment via
``python-dotenv`` for applications that configure the bot through ``.env``.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import os
from typing import Any, Dict, List, Optional

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# ── core ─────────────────────────────────────────────────────────────────────
from tehcore.logger import TehLogger

logger = TehLogger.get_logger()

ENV_PREFIX = "TEH_"
TOKEN_ENV = "BOT_TOKEN"
DEFAULT_API_URL = "https://api.telegram.org"


class BotOptions(BaseModel):
    """Recognised dispatcher/client options.

    Durations are in seconds.  ``polling_timeout`` is the long-poll timeout
    sent to ``getUpdates``; ``request_timeout`` bounds every HTTP request.
    """

    polling: bool = False
    polling_interval: float = Field(1.0, ge=0)
    polling_timeout: int = Field(30, ge=0)
    polling_limit: int = Field(100, ge=1, le=100)
    webhook: bool = False
    webhook_host: str = "0.0.0.0"
    webhook_port: int = Field(3000, ge=0, le=65535)
    webhook_path: str = "/webhook"
    request_timeout: float = Field(30.0, gt=0)
    max_connections: int = Field(40, ge=1, le=100)
    allowed_updates: List[str] = Field(default_factory=list)
    base_api_url: str = DEFAULT_API_URL

    model_config = {"extra": "forbid", "frozen": True}

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, **overrides: Any) -> "BotOptions":
        """Build options from ``<prefix><FIELD>`` environment variables.

        ``.env`` is loaded first.  ``allowed_updates`` is a comma-separated
        list.  Keyword *overrides* win over the environment.
        """
        load_dotenv()
        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            raw = os.environ.get(f"{prefix}{name.upper()}")
            if raw is None:
                continue
            if name == "allowed_updates":
                values[name] = _parse_list(raw)
            else:
                values[name] = raw
        values.update(overrides)
        options = cls.model_validate(values)
        logger.debug("Options loaded from environment", extra={"options": options.model_dump()})
        return options


# ── Helper functions (private) ───────────────────────────────────────────────


def _parse_list(raw: str) -> list[str]:
    """Split a comma-separated string, dropping empty items."""
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_token(env_var: str = TOKEN_ENV) -> Optional[str]:
    """Return the bot token from the environment (after loading ``.env``)."""
    load_dotenv()
    token = os.environ.get(env_var) or None
    if token is None:
        logger.warning("Bot token is NOT set", extra={"env_var": env_var})
    return token
