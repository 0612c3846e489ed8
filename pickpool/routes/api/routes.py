import logging
from datetime import datetime, timezone
from functools import wraps

from flask import current_app, jsonify, request

from pickpool import limiter
from pickpool.forms.picks import SubmitPicksForm
from pickpool.pool.errors import CatalogUnavailable, StoreUnavailable
from pickpool.routes.api import bp
from pickpool.utils.cache_utils import cached_query

logger = logging.getLogger(__name__)


def pool_service():
    return current_app.extensions["pool_service"]


def add_security_headers(f):
    """Add no-store caching headers to API responses"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        response = f(*args, **kwargs)
        if isinstance(response, tuple):
            body = response[0]
        else:
            body = response
        if hasattr(body, "headers"):
            body.headers["Cache-Control"] = (
                "no-store, no-cache, must-revalidate, max-age=0"
            )
        return response

    return decorated_function


def unavailable(error):
    logger.error(f"Collaborator failure on {request.path}: {error.message}")
    return (
        jsonify({"success": False, "message": "Service temporarily unavailable"}),
        503,
    )


def json_payload_problem(payload):
    """
    Shape check for JSON submissions before they reach the form.

    WTForms keeps only the first element of a list value, so a picks list
    would otherwise be silently truncated.
    """
    if not isinstance(payload, dict):
        return "Request body must be a JSON object"
    for name in ("username", "week"):
        if isinstance(payload.get(name), (list, dict)):
            return f"{name.capitalize()} must be a single value"
    picks = payload.get("picks")
    if picks is not None and not isinstance(picks, str):
        return 'Picks must be a string like "gameId-team,gameId-team"'
    return None


@bp.route("/picks", methods=["POST"])
@limiter.limit(lambda: current_app.config.get("RATELIMIT_SUBMIT", "30 per minute"))
@add_security_headers
def submit_picks():
    """Submit a batch of picks: {username, week, picks: "gameId-team,..."}"""
    if request.is_json:
        problem = json_payload_problem(request.get_json(silent=True))
        if problem:
            return jsonify({"success": False, "message": problem}), 400

    form = SubmitPicksForm()
    if not form.validate():
        return jsonify({"success": False, "message": form.error_message()}), 400

    result = pool_service().submit(form.username.data, form.week.data, form.picks.data)

    if result.success:
        status = 200
    elif isinstance(result.error, (StoreUnavailable, CatalogUnavailable)):
        status = 503
    else:
        status = 400
    return jsonify(result.to_dict()), status


@bp.route("/picks")
@add_security_headers
def list_picks():
    """Accepted submissions, optionally filtered by username and week"""
    username = request.args.get("username")
    week = request.args.get("week", type=int)

    try:
        submissions = pool_service().user_picks(username=username, week=week)
    except StoreUnavailable as e:
        return unavailable(e)

    return jsonify({"submissions": [s.to_dict() for s in submissions]})


@cached_query("standings")
def current_standings():
    return [row.to_dict() for row in pool_service().standings()]


@bp.route("/standings")
def standings():
    """Leaderboard, best first"""
    try:
        rows = current_standings()
    except (StoreUnavailable, CatalogUnavailable) as e:
        return unavailable(e)

    return jsonify({"standings": rows})


@bp.route("/games/week/<int:week>")
def week_games(week):
    """Games for a specific week"""
    try:
        games = pool_service().catalog.list_games(week)
    except CatalogUnavailable as e:
        return unavailable(e)

    return jsonify({"week": week, "games": [game.to_dict() for game in games]})


@bp.route("/games/<game_id>")
def game_detail(game_id):
    try:
        game = pool_service().catalog.get_game(game_id)
    except CatalogUnavailable as e:
        return unavailable(e)

    if game is None:
        return jsonify({"success": False, "message": f"Game {game_id} not found"}), 404
    return jsonify(game.to_dict())


@bp.route("/health")
@limiter.exempt
def health():
    """Health check endpoint - exempt from rate limiting for monitoring systems"""
    return jsonify(
        {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}
    )
