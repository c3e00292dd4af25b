"""Twitch OAuth handshake for multi-user deployments."""
from __future__ import annotations

from urllib.parse import urlencode

from flask import Blueprint, current_app, jsonify, redirect, request

from ..api_utils import APIError, StorageError, UnauthorizedError, handle_api_errors
from ..auth import extract_token, token_store
from ..twitch import TwitchError, token_record

bp = Blueprint("auth", __name__)


def _twitch():
    return current_app.extensions["twitch"]


def _frontend_url() -> str:
    origin = request.headers.get("Origin")
    if origin:
        return origin
    return _twitch().api_base.replace(":4000", ":5173")


def _back_to_frontend(**params):
    return redirect(f"{_frontend_url()}?{urlencode(params)}")


@bp.get("/auth/twitch")
@handle_api_errors
def twitch_login():
    client = _twitch()
    if not client.configured:
        raise APIError("Twitch client ID not configured", status_code=500)
    return jsonify(client.authorize_url())


@bp.get("/auth/twitch/callback")
def twitch_callback():
    error = request.args.get("error")
    if error:
        return _back_to_frontend(auth_error=error)
    code = request.args.get("code")
    if not code:
        return _back_to_frontend(auth_error="no_code")

    client = _twitch()
    try:
        token_data = client.exchange_code(code)
        user = client.user_info(token_data.get("access_token") or "")
        record = token_record(token_data, user)
        token_store().put(record["userId"], record)
    except (TwitchError, StorageError) as e:
        current_app.logger.error("Twitch auth error: %s", e)
        return _back_to_frontend(auth_error=str(e))

    current_app.logger.info("Stored Twitch token for user %s", record["userId"])
    return _back_to_frontend(twitch_token=record["accessToken"], user_id=record["userId"])


@bp.get("/auth/me")
@handle_api_errors
def me():
    token = extract_token()
    if not token:
        raise UnauthorizedError()

    api_token = current_app.config.get("API_TOKEN")
    if api_token and token == api_token:
        return jsonify({"userId": "dev", "userName": "Development User", "userImage": None, "isDev": True})

    client = _twitch()
    try:
        client.validate(token)
        user = client.user_info(token)
    except TwitchError as e:
        current_app.logger.warning("Auth validation error: %s", e)
        raise UnauthorizedError("Invalid token") from e

    return jsonify({
        "userId": user.get("id"),
        "userName": user.get("display_name") or user.get("login"),
        "userImage": user.get("profile_image_url"),
        "isDev": False,
    })


@bp.post("/auth/logout")
def logout():
    # tokens live on the client; nothing to clear here
    return jsonify({"status": "success"})
