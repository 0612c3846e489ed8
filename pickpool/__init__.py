import logging
import os

from flask import Flask, jsonify, request
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFProtect

from config import config

logger = logging.getLogger(__name__)

db = SQLAlchemy()
cache = Cache()
migrate = Migrate()
csrf = CSRFProtect()


def get_real_ip():
    """
    Get the real client IP address, accounting for reverse proxies.
    Checks X-Forwarded-For, X-Real-IP, and falls back to remote_addr.
    """
    # X-Forwarded-For: client, proxy1, proxy2, ...
    if request.headers.get("X-Forwarded-For"):
        return request.headers.get("X-Forwarded-For").split(",")[0].strip()
    if request.headers.get("X-Real-IP"):
        return request.headers.get("X-Real-IP")
    return get_remote_address()


limiter = Limiter(
    key_func=get_real_ip,
    default_limits=["10000 per day", "1000 per hour"],
)


def create_app(config_name=None):
    app = Flask(__name__)

    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app.config.from_object(config[config_name]())

    # Initialize extensions
    db.init_app(app)
    cache.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    limiter.init_app(app)

    from pickpool.routes.api import bp as api_bp

    # The JSON API is called by scripts and the odds tooling, not browser forms
    csrf.exempt(api_bp)
    app.register_blueprint(api_bp, url_prefix="/api")

    register_error_handlers(app)

    from pickpool.utils.logging_config import setup_logging

    setup_logging(app)

    with app.app_context():
        db.create_all()

    app.extensions["pool_service"] = build_pool_service(app)

    if not app.config.get("TESTING", False):
        from pickpool.services.scheduler_service import scheduler_service

        scheduler_service.init_app(app)

    return app


def build_pool_service(app):
    """Pool service bound to the SQL catalog and pick store"""
    from pickpool.services.pool_service import PoolService
    from pickpool.stores.sql import SqlGameCatalog, SqlPickStore
    from pickpool.utils.cache_utils import invalidate_standings_cache

    return PoolService(
        SqlGameCatalog(),
        SqlPickStore(),
        picks_per_week=app.config["PICKS_PER_WEEK"],
        parlay_bonus=app.config["PARLAY_BONUS"],
        max_week=app.config["MAX_WEEK"],
        verify_catalog=app.config["VERIFY_PICKS_AGAINST_CATALOG"],
        on_submit=lambda submission: invalidate_standings_cache(),
    )


def register_error_handlers(app):
    """Register global error handlers"""

    @app.after_request
    def after_request(response):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({"success": False, "message": "Resource not found"}), 404

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({"success": False, "message": "Internal server error"}), 500

    @app.errorhandler(400)
    def bad_request_error(error):
        app.logger.warning(
            f"400 Bad Request: {str(error)} - Path: {request.path} - Method: {request.method}"
        )
        return jsonify({"success": False, "message": "Bad request"}), 400

    @app.errorhandler(429)
    def too_many_requests_error(error):
        return jsonify({"success": False, "message": "Too many requests"}), 429

    @app.errorhandler(503)
    def service_unavailable_error(error):
        return jsonify({"success": False, "message": "Service unavailable"}), 503


from pickpool import models  # noqa: F401, E402 - imported for model registration
