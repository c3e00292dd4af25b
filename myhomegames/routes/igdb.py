from flask import Blueprint, current_app, jsonify, request

from ..api_utils import BadRequestError, UpstreamServiceError, handle_api_errors
from ..auth import require_token
from ..igdb import IGDBError

bp = Blueprint("igdb", __name__)


@bp.get("/igdb/search")
@handle_api_errors
@require_token
def search():
    query = (request.args.get("q") or "").strip()
    if not query:
        raise BadRequestError("Missing search query")

    client = current_app.extensions["igdb"]
    try:
        games = client.search(query)
    except IGDBError as e:
        raise UpstreamServiceError("Failed to search IGDB", payload={"detail": str(e)}) from e
    return jsonify({"games": games})
