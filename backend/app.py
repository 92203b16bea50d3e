"""Application entry point for the scoreboard user service.

``create_app`` builds the Flask app around one explicitly constructed
``UserStore``; the store lives in ``app.extensions['user_store']`` for the
lifetime of the process. Run directly to serve on $HOST:$PORT (default
0.0.0.0:8080).
"""

from __future__ import annotations

import atexit
import logging

from flask import Flask, jsonify
from flask_cors import CORS

from config import Config
from util.store import StoreError, UserStore


def _build_store(config_class) -> UserStore:
    uri = getattr(config_class, "REDIS_URI", None)
    if not uri:
        raise RuntimeError("REDIS_URI is not set in environment variables")
    try:
        return UserStore.from_uri(uri, atomic=getattr(config_class, "ATOMIC_WRITES", True))
    except ValueError as exc:
        raise RuntimeError(f"Error parsing Redis URI: {exc}") from exc


def create_app(config_class=Config, store: UserStore | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # -----------------------------------------------------------------------
    # Store (injected in tests, built from REDIS_URI otherwise)
    # -----------------------------------------------------------------------
    if store is None:
        store = _build_store(config_class)
    app.extensions["user_store"] = store

    # -----------------------------------------------------------------------
    # CORS: single fixed frontend origin
    # -----------------------------------------------------------------------
    CORS(
        app,
        resources={r"/users.*": {"origins": [app.config.get("FRONTEND_ORIGIN", "http://localhost:5173")]}},
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # -----------------------------------------------------------------------
    # Blueprints
    # -----------------------------------------------------------------------
    from routes.user_routes import bp as users_bp
    from routes.health_routes import bp as health_bp

    app.register_blueprint(users_bp)
    app.register_blueprint(health_bp)

    # -----------------------------------------------------------------------
    # Errors
    # -----------------------------------------------------------------------
    @app.errorhandler(StoreError)
    def handle_store_error(err: StoreError):
        app.logger.error("%s: %r", err.message, err.__cause__)
        return jsonify({"error": "store_error", "message": err.message}), 500

    return app


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    logging.basicConfig(level=Config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app()
    atexit.register(app.extensions["user_store"].close)

    print(f"Server is running on port {Config.PORT}...")
    app.run(host=Config.HOST, port=Config.PORT, debug=False, threaded=True)
