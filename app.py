#!/usr/bin/env python3
import logging
import sys

from myhomegames import create_app, ensure_root
from myhomegames.config import load_config, validate_environment

logger = logging.getLogger("myhomegames")


def _resolve_metadata_path(config: dict) -> str:
    if len(sys.argv) >= 2:
        return sys.argv[1]
    return config["METADATA_PATH"]


if __name__ == "__main__":
    config = load_config()
    errors = validate_environment(config)
    metadata_path = _resolve_metadata_path(config)
    ensure_root(metadata_path)
    app = create_app(metadata_path)
    if errors:
        logger.error("Environment configuration errors:")
        for error in errors:
            logger.error("  - %s", error)
        logger.error("Please configure your .env file with the required variables.")
        raise SystemExit(1)
    logger.info("MyHomeGames server listening on %s:%s", app.config["BIND"], app.config["PORT"])
    app.run(host=app.config["BIND"], port=app.config["PORT"], debug=False)
