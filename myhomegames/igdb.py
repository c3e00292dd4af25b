"""IGDB search client."""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import requests

logger = logging.getLogger(__name__)

TOKEN_URL = "https://id.twitch.tv/oauth2/token"
GAMES_URL = "https://api.igdb.com/v4/games"
REQUEST_TIMEOUT = 15


class IGDBError(Exception):
    pass


def _cover_url(cover: Any) -> Optional[str]:
    if not isinstance(cover, Mapping):
        return None
    url = cover.get("url")
    if not isinstance(url, str) or not url:
        return None
    url = url.replace("t_thumb", "t_cover_big")
    return f"https:{url}" if url.startswith("//") else url


def _release_year(timestamp: Any) -> Optional[int]:
    if not isinstance(timestamp, (int, float)) or isinstance(timestamp, bool):
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).year


def to_suggestion(game: Mapping[str, Any]) -> Dict[str, Any]:
    """Reduce an IGDB game payload to what the add-game search list shows."""
    return {
        "id": game.get("id"),
        "name": game.get("name"),
        "summary": game.get("summary") or "",
        "cover": _cover_url(game.get("cover")),
        "releaseDate": _release_year(game.get("first_release_date")),
    }


def _escape(query: str) -> str:
    return query.replace("\\", "\\\\").replace('"', '\\"')


class IGDBClient:
    """Searches IGDB with an app access token obtained from Twitch.

    The token is cached and refreshed one minute before it expires.
    """

    def __init__(self, client_id: str, client_secret: str):
        self.client_id = client_id
        self.client_secret = client_secret
        self._token: Optional[str] = None
        self._token_expiry = 0.0

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def access_token(self) -> str:
        if self._token and time.time() < self._token_expiry:
            return self._token
        if not self.configured:
            raise IGDBError("IGDB credentials not configured")

        try:
            resp = requests.post(
                TOKEN_URL,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "grant_type": "client_credentials",
                },
                timeout=REQUEST_TIMEOUT,
            )
            payload = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise IGDBError(str(e)) from e

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise IGDBError("Failed to get IGDB access token")
        self._token = token
        self._token_expiry = time.time() + float(payload.get("expires_in") or 0) - 60
        return token

    def search(self, query: str, limit: int = 20) -> List[Dict[str, Any]]:
        token = self.access_token()
        body = (
            f'search "{_escape(query)}"; '
            f"fields id,name,summary,cover.url,first_release_date; limit {limit};"
        )
        try:
            resp = requests.post(
                GAMES_URL,
                data=body.encode("utf-8"),
                headers={
                    "Client-ID": self.client_id,
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "text/plain",
                },
                timeout=REQUEST_TIMEOUT,
            )
            resp.raise_for_status()
            games = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("IGDB request error: %s", e)
            raise IGDBError(str(e)) from e

        if not isinstance(games, list):
            raise IGDBError("Failed to parse IGDB response")
        return [to_suggestion(g) for g in games if isinstance(g, Mapping)]
