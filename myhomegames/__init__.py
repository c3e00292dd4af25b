import logging
import logging.config
import os
from pathlib import Path
from typing import Optional

from flask import Flask

from .config import load_config
from .igdb import IGDBClient
from .routes import register_blueprints
from .storage import MetadataLayout
from .store import AppState
from .twitch import TwitchClient

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Auth-Token",
}


def configure_logging(app: Flask) -> None:
    level = app.config.get("LOG_LEVEL") or "INFO"
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": level,
            "stream": "ext://sys.stdout",
        },
    }
    log_file = app.config.get("LOG_FILE")
    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "standard",
            "level": logging.DEBUG,
            "filename": os.fspath(log_file),
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
        }

    for handler in list(app.logger.handlers):
        app.logger.removeHandler(handler)

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": handlers,
        "root": {"level": level, "handlers": list(handlers)},
    })


def ensure_root(metadata_path: str) -> None:
    os.makedirs(os.path.join(metadata_path, "metadata"), exist_ok=True)


def create_app(metadata_path: Optional[str] = None, **overrides) -> Flask:
    """Build the API app.

    ``overrides`` are applied on top of the environment-derived config, which
    is how tests inject a token and credentials without touching os.environ.
    """
    app = Flask(__name__)
    app.config.update(load_config(use_dotenv=not overrides.get("TESTING", False)))
    app.config.update(overrides)
    if metadata_path is not None:
        app.config["METADATA_PATH"] = os.fspath(metadata_path)
    app.json.sort_keys = False

    if not app.config.get("TESTING"):
        configure_logging(app)

    layout = MetadataLayout(Path(app.config["METADATA_PATH"]))
    app.extensions["myhomegames"] = AppState.create(layout)
    app.extensions["igdb"] = IGDBClient(app.config["IGDB_CLIENT_ID"], app.config["IGDB_CLIENT_SECRET"])
    app.extensions["twitch"] = TwitchClient(
        app.config["TWITCH_CLIENT_ID"], app.config["TWITCH_CLIENT_SECRET"], app.config["API_BASE"],
    )

    @app.after_request
    def _cors(response):
        for key, value in CORS_HEADERS.items():
            response.headers.setdefault(key, value)
        return response

    register_blueprints(app)

    state = app.extensions["myhomegames"]
    logger.info("Loaded %d games and %d collections from %s",
                len(state.games), len(state.collections.all()), layout.root)
    if not app.config.get("API_TOKEN") and not app.config.get("TWITCH_CLIENT_ID"):
        logger.warning(
            "No authentication configured. Set either API_TOKEN (for dev) or "
            "TWITCH_CLIENT_ID/TWITCH_CLIENT_SECRET (for production)."
        )
    return app
