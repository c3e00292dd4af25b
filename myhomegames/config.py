"""Environment-driven configuration for the MyHomeGames server."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from dotenv import load_dotenv


def _clean_text(value: Optional[str]) -> str:
    """Return ``value`` stripped of surrounding whitespace."""

    if value is None:
        return ""
    return value.strip()


def _path_from(env_value: Optional[str], default: str | Path) -> Path:
    """Resolve a filesystem path using an environment override when provided."""

    text = _clean_text(env_value)
    candidate = Path(text) if text else Path(default)
    return candidate.expanduser()


def _coerce_positive_int(value: Optional[str], default: int) -> int:
    text = _clean_text(value)
    if not text:
        return default
    try:
        numeric = int(float(text))
    except (TypeError, ValueError):
        return default
    return numeric if numeric > 0 else default


def default_metadata_path() -> Path:
    home = os.environ.get("HOME") or os.environ.get("USERPROFILE") or ""
    return Path(home) / "Library" / "Application Support" / "MyHomeGames"


def load_config(environ: Optional[Mapping[str, str]] = None, *, use_dotenv: bool = True) -> Dict:
    """Build the Flask config mapping from the process environment.

    ``.env`` in the working directory is applied first (without overriding
    variables that are already set) unless ``use_dotenv`` is false.
    """

    if use_dotenv and environ is None:
        load_dotenv()
    env = os.environ if environ is None else environ

    return {
        "METADATA_PATH": str(_path_from(env.get("METADATA_PATH"), default_metadata_path())),
        "API_TOKEN": _clean_text(env.get("API_TOKEN")),
        "BIND": _clean_text(env.get("BIND")) or "127.0.0.1",
        "PORT": _coerce_positive_int(env.get("PORT"), 4000),
        "IGDB_CLIENT_ID": _clean_text(env.get("IGDB_CLIENT_ID")),
        "IGDB_CLIENT_SECRET": _clean_text(env.get("IGDB_CLIENT_SECRET")),
        "TWITCH_CLIENT_ID": _clean_text(env.get("TWITCH_CLIENT_ID")),
        "TWITCH_CLIENT_SECRET": _clean_text(env.get("TWITCH_CLIENT_SECRET")),
        "API_BASE": _clean_text(env.get("API_BASE")),
        "LOG_FILE": _clean_text(env.get("LOG_FILE")),
        "LOG_LEVEL": _clean_text(env.get("LOG_LEVEL")).upper() or "INFO",
    }


def validate_environment(config: Mapping) -> List[str]:
    """Return configuration errors; an empty list means the config is usable.

    Twitch OAuth needs its client id, secret and ``API_BASE`` together. IGDB
    needs both credentials or neither.
    """

    errors: List[str] = []

    twitch = {
        "TWITCH_CLIENT_ID": bool(config.get("TWITCH_CLIENT_ID")),
        "TWITCH_CLIENT_SECRET": bool(config.get("TWITCH_CLIENT_SECRET")),
        "API_BASE": bool(config.get("API_BASE")),
    }
    if any(twitch.values()):
        for name, present in twitch.items():
            if not present:
                errors.append(f"{name} is required when using Twitch OAuth")

    if bool(config.get("IGDB_CLIENT_ID")) != bool(config.get("IGDB_CLIENT_SECRET")):
        errors.append(
            "Both IGDB_CLIENT_ID and IGDB_CLIENT_SECRET must be set together, or both omitted"
        )

    return errors
