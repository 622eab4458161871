# khandeshwar_backend/__init__.py
from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import check_required_env
from .errors import register_error_handlers
from .extensions import db, jwt, limiter, migrate


# --- Config ------------------------------------------------------------------
def _get_allowed_origins() -> list[str]:
    """Allowed CORS origins from env; includes the local frontend dev servers."""
    default = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]
    # Support comma-separated list in env
    extra = os.getenv("CORS_ALLOWED_ORIGINS", "")
    extra_list = [o.strip() for o in extra.split(",") if o.strip()]
    return sorted(set(default + extra_list))


def _configure_logging(app: Flask) -> None:
    """JSON logs to stdout."""
    level = os.getenv("LOG_LEVEL", app.config.get("LOG_LEVEL", "INFO")).upper()
    app.logger.setLevel(level)
    root = logging.getLogger()
    root.setLevel(level)

    # avoid duplicate handlers in reloaders
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='{"ts":"%(asctime)s","level":"%(levelname)s","msg":"%(message)s","name":"%(name)s"}',
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)


def _configure_cors(app: Flask) -> None:
    CORS(
        app,
        resources={r"/api/*": {"origins": _get_allowed_origins()}},
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Idempotency-Key", "X-Requested-With"],
        expose_headers=["Content-Type", "Content-Disposition"],
        max_age=86400,
    )


def _configure_proxy(app: Flask) -> None:
    """Respect X-Forwarded-* from the reverse proxy."""
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)  # type: ignore


def _init_extensions(app: Flask) -> None:
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    @jwt.unauthorized_loader
    def _missing_token(reason):
        return jsonify({"success": False, "error": "Authentication required", "message": reason}), 401

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return jsonify({"success": False, "error": "Invalid token", "message": reason}), 401

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return jsonify({"success": False, "error": "Token has expired"}), 401

    @app.errorhandler(429)
    def _rate_limited(e):
        app.logger.warning("Rate limit exceeded on %s", request.path)
        return jsonify({"success": False, "error": "Too many login attempts, please try again later"}), 429


def _register_blueprints(app: Flask) -> None:
    """Register all API blueprints under /api."""
    from .routes import BLUEPRINTS

    prefix = app.config["API_PREFIX"]
    for bp in BLUEPRINTS:
        app.register_blueprint(bp, url_prefix=prefix)
        app.logger.debug("Registered blueprint %s at %s", bp.name, prefix)


def _register_cli(app: Flask) -> None:
    from .cli import register_commands

    register_commands(app)


# --- Application Factory ------------------------------------------------------
def create_app(config_object: Optional[str | Any] = None) -> Flask:
    """
    Standard Flask application factory.

    `config_object` may be:
      - a config object
      - dotted path to a config class (e.g., "khandeshwar_backend.config.ProductionConfig")
      - None (then we'll try CONFIG_CLASS env or default to config.Config)
    """
    app = Flask(__name__, instance_relative_config=True)

    if config_object is None:
        config_object = os.getenv("CONFIG_CLASS", "khandeshwar_backend.config.Config")
    if isinstance(config_object, str):
        # load "package.ClassName"
        module, _, cls = config_object.rpartition(".")
        config_object = getattr(__import__(module, fromlist=[cls]), cls)
    check_required_env(config_object)
    app.config.from_object(config_object)
    app.config.setdefault("API_PREFIX", "/api")

    # Core middleware/logging/CORS
    _configure_logging(app)
    _configure_proxy(app)
    _configure_cors(app)

    # Init extensions & blueprints
    _init_extensions(app)
    register_error_handlers(app)
    _register_blueprints(app)
    _register_cli(app)

    # --------- Health & root routes ----------
    @app.get(app.config["API_PREFIX"] + "/health")
    def health():
        return jsonify(
            {
                "status": "ok",
                "time": datetime.utcnow().isoformat() + "Z",
                "service": app.config["SERVICE_NAME"],
            }
        ), 200

    @app.get("/")
    def root():
        return jsonify({"service": app.config["SERVICE_NAME"], "message": "See /api/health"}), 200

    # Fast path for CORS preflights to anything under /api
    @app.route(app.config["API_PREFIX"] + "/<path:_any>", methods=["OPTIONS"])
    def preflight(_any: str):
        return ("", 204)

    return app
