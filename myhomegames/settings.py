import logging
from typing import Dict
from pathlib import Path

from .storage import read_json, write_json

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {"language": "en"}


def load_settings(settings_file: Path) -> Dict:
    settings = dict(DEFAULT_SETTINGS)
    if not settings_file.exists():
        return settings
    data = read_json(settings_file, None)
    if isinstance(data, dict):
        settings.update(data)
    elif data is not None:
        logger.error("Ignoring %s: expected an object", settings_file.name)
    return settings


def save_settings(settings_file: Path, settings: dict) -> None:
    write_json(settings_file, settings)
