"""Token checks for protected routes.

Two kinds of token are accepted: the single ``API_TOKEN`` configured for the
process, and Twitch access tokens recorded in ``tokens.json`` by the OAuth
callback. Stored Twitch tokens are accepted even after ``expiresAt`` because
that clock is only approximate; Twitch re-validates them on ``/auth/me``.
"""
from __future__ import annotations

import logging
from functools import wraps
from pathlib import Path
from typing import Callable, Dict, Optional

from flask import current_app, request

from .api_utils import UnauthorizedError
from .storage import read_json, write_json
from .store import app_state

logger = logging.getLogger(__name__)


class TokenStore:
    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Dict[str, dict]:
        if not self.path.exists():
            return {}
        data = read_json(self.path, {})
        return data if isinstance(data, dict) else {}

    def save(self, tokens: Dict[str, dict]) -> None:
        write_json(self.path, tokens)

    def put(self, user_id: str, record: dict) -> None:
        tokens = self.load()
        tokens[str(user_id)] = record
        self.save(tokens)

    def find(self, token: str) -> Optional[dict]:
        for record in self.load().values():
            if isinstance(record, dict) and record.get("accessToken") == token:
                return record
        return None


def extract_token() -> Optional[str]:
    return (
        request.headers.get("X-Auth-Token")
        or request.args.get("token")
        or request.headers.get("Authorization")
        or None
    )


def is_valid_token(token: Optional[str], api_token: str, tokens: TokenStore) -> bool:
    if not token:
        return False
    if api_token and token == api_token:
        return True
    return tokens.find(token) is not None


def token_store() -> TokenStore:
    return TokenStore(app_state().layout.tokens_file)


def require_token(func: Callable) -> Callable:
    """Reject the request with 401 unless it carries a valid token.

    Must sit below ``handle_api_errors`` so the UnauthorizedError is rendered.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        if not is_valid_token(extract_token(), current_app.config.get("API_TOKEN", ""), token_store()):
            raise UnauthorizedError()
        return func(*args, **kwargs)

    return wrapper
