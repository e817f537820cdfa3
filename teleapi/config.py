"""Environment-driven settings for applications built on teleapi.

Loads ``TELEAPI_TOKEN`` (falling back to ``BOT_TOKEN``),
``TELEAPI_TIMEOUT`` and ``TELEAPI_LOG_LEVEL`` from the environment via
``python-dotenv``.  The client itself never reads the environment; only
:meth:`teleapi.client.TeleAPI.from_env` and the command line do.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import os
from typing import Mapping, Optional

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    """Resolved runtime settings."""

    bot_token: str = ""
    timeout: Optional[float] = None
    log_level: str = "WARNING"

    model_config = {"frozen": True}


# ── Helper functions (private) ───────────────────────────────────────────────


def _parse_timeout(raw: str | None) -> float | None:
    """Parse a positive number of seconds; blank or invalid means no timeout."""
    if not raw or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


# ── Public API ───────────────────────────────────────────────────────────────


def load_settings(environ: Mapping[str, str] | None = None, dotenv: bool = True) -> Settings:
    """Build :class:`Settings` from *environ* (``os.environ`` by default).

    When *dotenv* is true the nearest ``.env`` file above the working
    directory is loaded first; variables already present in the environment
    are not overridden.
    """
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))
    env = os.environ if environ is None else environ
    return Settings(
        bot_token=env.get("TELEAPI_TOKEN") or env.get("BOT_TOKEN") or "",
        timeout=_parse_timeout(env.get("TELEAPI_TIMEOUT")),
        log_level=(env.get("TELEAPI_LOG_LEVEL") or "WARNING").upper(),
    )
