"""Shared helpers for API routes (error handling and logging)."""
from __future__ import annotations

import json
from functools import wraps
from typing import Any, Callable, Dict, Optional

from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException


class APIError(Exception):
    """Base class for API errors that includes an HTTP status code."""

    status_code: int = 500
    message: str = "An unexpected error occurred."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}

    def to_dict(self) -> Dict[str, Any]:
        data = {"error": self.message}
        data.update(self.payload)
        return data


class BadRequestError(APIError):
    status_code = 400
    message = "Invalid request."


class UnauthorizedError(APIError):
    status_code = 401
    message = "Unauthorized"


class ForbiddenError(APIError):
    status_code = 403
    message = "Forbidden."


class NotFoundError(APIError):
    status_code = 404
    message = "Resource not found."


class ConflictError(APIError):
    status_code = 409
    message = "Conflict detected."


class StorageError(APIError):
    """Reading or writing a metadata file failed."""

    status_code = 500
    message = "Storage failure."


class UpstreamServiceError(APIError):
    # IGDB/Twitch failures have always been reported as plain 500s.
    status_code = 500
    message = "Upstream service unavailable."


def _collect_request_context() -> Dict[str, Any]:
    context: Dict[str, Any] = {
        "route": request.path,
        "endpoint": request.endpoint,
        "method": request.method,
        "view_args": dict(request.view_args or {}),
        "args": {k: v for k, v in request.args.to_dict(flat=False).items() if k != "token"},
    }
    json_payload = request.get_json(silent=True)
    if json_payload is not None:
        context["json"] = json_payload
    return context


def _serialize_context(context: Dict[str, Any]) -> str:
    try:
        return json.dumps(context, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return repr(context)


def _log_api_error(exc: Exception, *, status_code: int, handled: bool) -> None:
    context = _collect_request_context()
    context["status_code"] = status_code
    context_str = _serialize_context(context)
    if handled and status_code < 500:
        current_app.logger.warning(
            "Handled API error (%s): %s | context=%s", status_code, exc, context_str
        )
        return
    if handled:
        current_app.logger.error(
            "Handled API error (%s): %s | context=%s", status_code, exc, context_str,
            exc_info=exc,
        )
        return
    current_app.logger.exception(
        "Unhandled API error (%s): %s | context=%s", status_code, exc, context_str
    )


def handle_api_errors(func: Callable) -> Callable:
    """Decorator that centralizes API error handling and logging."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except APIError as exc:
            _log_api_error(exc, status_code=exc.status_code, handled=True)
            return jsonify(exc.to_dict()), exc.status_code
        except HTTPException as exc:
            status_code = exc.code or 500
            api_error = APIError(message=exc.description or str(exc), status_code=status_code)
            _log_api_error(exc, status_code=status_code, handled=True)
            return jsonify(api_error.to_dict()), status_code
        except Exception as exc:  # pragma: no cover - last-resort guard
            _log_api_error(exc, status_code=500, handled=False)
            return jsonify({"error": "Internal server error"}), 500

    return wrapper


__all__ = [
    "APIError",
    "BadRequestError",
    "ConflictError",
    "ForbiddenError",
    "NotFoundError",
    "StorageError",
    "UnauthorizedError",
    "UpstreamServiceError",
    "handle_api_errors",
]
