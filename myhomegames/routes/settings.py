from flask import Blueprint, jsonify, request

from ..api_utils import BadRequestError, StorageError, handle_api_errors
from ..auth import require_token
from ..settings import load_settings, save_settings
from ..store import app_state

bp = Blueprint("settings", __name__)


@bp.get("/settings")
@handle_api_errors
@require_token
def get_settings():
    return jsonify(load_settings(app_state().layout.settings_file))


@bp.put("/settings")
@handle_api_errors
@require_token
def put_settings():
    updates = request.get_json(silent=True)
    if not isinstance(updates, dict):
        raise BadRequestError("Settings must be a JSON object")

    settings_file = app_state().layout.settings_file
    settings = load_settings(settings_file)
    settings.update(updates)
    try:
        save_settings(settings_file, settings)
    except StorageError as e:
        raise StorageError("Failed to save settings") from e
    return jsonify({"status": "success", "settings": settings})
