"""Twitch OAuth calls used by the multi-user login flow."""
from __future__ import annotations

import logging
import secrets
import time
from typing import Any, Dict
from urllib.parse import urlencode

import requests

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://id.twitch.tv/oauth2/authorize"
TOKEN_URL = "https://id.twitch.tv/oauth2/token"
VALIDATE_URL = "https://id.twitch.tv/oauth2/validate"
USERS_URL = "https://api.twitch.tv/helix/users"
REQUEST_TIMEOUT = 15


class TwitchError(Exception):
    pass


class TwitchClient:
    def __init__(self, client_id: str, client_secret: str, api_base: str):
        self.client_id = client_id
        self.client_secret = client_secret
        self.api_base = (api_base or "http://127.0.0.1:4000").rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self.client_id)

    @property
    def redirect_uri(self) -> str:
        return f"{self.api_base}/auth/twitch/callback"

    def authorize_url(self) -> Dict[str, str]:
        state = secrets.token_urlsafe(8)
        query = urlencode({
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": "user:read:email",
            "state": state,
        })
        return {"authUrl": f"{AUTHORIZE_URL}?{query}", "state": state}

    def _json(self, resp: requests.Response, what: str) -> Any:
        if resp.status_code != 200:
            raise TwitchError(f"Failed to {what}")
        try:
            return resp.json()
        except ValueError as e:
            raise TwitchError(f"Failed to {what}: invalid JSON") from e

    def exchange_code(self, code: str) -> Dict[str, Any]:
        try:
            resp = requests.post(TOKEN_URL, data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": self.redirect_uri,
            }, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise TwitchError(str(e)) from e
        return self._json(resp, "get access token")

    def validate(self, access_token: str) -> Dict[str, Any]:
        try:
            resp = requests.get(VALIDATE_URL, headers={"Authorization": f"OAuth {access_token}"},
                                timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise TwitchError(str(e)) from e
        if resp.status_code != 200:
            raise TwitchError("Invalid token")
        return self._json(resp, "validate token")

    def user_info(self, access_token: str) -> Dict[str, Any]:
        try:
            resp = requests.get(USERS_URL, headers={
                "Authorization": f"Bearer {access_token}",
                "Client-ID": self.client_id,
            }, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise TwitchError(str(e)) from e
        payload = self._json(resp, "get user info")
        users = payload.get("data") if isinstance(payload, dict) else None
        if not users:
            raise TwitchError("No user data")
        return users[0]


def token_record(token_data: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
    """What tokens.json keeps per Twitch user."""
    expires_in = token_data.get("expires_in") or 0
    return {
        "accessToken": token_data.get("access_token"),
        "refreshToken": token_data.get("refresh_token"),
        "userId": user.get("id"),
        "userName": user.get("display_name") or user.get("login"),
        "userImage": user.get("profile_image_url"),
        "expiresAt": int(time.time() * 1000) + int(expires_in) * 1000,
    }
