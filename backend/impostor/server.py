from __future__ import annotations

import logging
import os
import random
import sys
from pathlib import Path

from flask import Flask, send_from_directory
from flask.logging import default_handler
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.phases import GamePhaseMachine
from .game.store import RoomStore
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp
from .routes.words import bp as words_bp
from .realtime.handlers import register_socketio_handlers


def _configure_logging(level: str) -> None:
    pkg_logger = logging.getLogger("impostor")
    pkg_logger.setLevel(level.upper())
    if default_handler not in pkg_logger.handlers:
        pkg_logger.addHandler(default_handler)


def create_app(config_class=Config, store: RoomStore | None = None) -> tuple[Flask, SocketIO]:
    dist_dir = Path(__file__).resolve().parents[2] / "frontend" / "dist"

    static_folder = str(dist_dir) if dist_dir.exists() else None
    static_url_path = "/" if dist_dir.exists() else None

    app = Flask(
        __name__,
        static_folder=static_folder,
        static_url_path=static_url_path,
    )
    app.config.from_object(config_class)
    _configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    testing = bool(app.config.get("TESTING", False))

    env_async_mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    if env_async_mode:
        async_mode = env_async_mode
    elif testing or sys.platform.startswith("win") or sys.version_info >= (3, 13):
        # eventlet has known compatibility issues on Windows and newer Python
        async_mode = "threading"
    else:
        async_mode = "eventlet"

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=async_mode,
    )

    if store is None:
        store = RoomStore()
    machine = GamePhaseMachine(
        store,
        rng=random.Random(),
        hint_max_length=int(app.config.get("HINT_MAX_LENGTH", 50)),
    )

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")
    app.register_blueprint(words_bp, url_prefix="/api")

    sessions = register_socketio_handlers(
        socketio,
        store,
        machine,
        latency=float(app.config.get("COMMAND_LATENCY_SEC", 0.1)),
        interval=float(app.config.get("SYNC_INTERVAL_SEC", 0.5)),
        idle_ttl_sec=int(app.config.get("ROOM_IDLE_TTL_SEC", 0)),
        background=not testing,
    )

    app.extensions["impostor.store"] = store
    app.extensions["impostor.machine"] = machine
    app.extensions["impostor.sessions"] = sessions

    app.logger.info("impostor server ready (async_mode=%s)", async_mode)

    if dist_dir.exists():
        @app.get("/")
        def index():
            return send_from_directory(dist_dir, "index.html")

        @app.get("/<path:path>")
        def static_proxy(path: str):
            file_path = dist_dir / path
            if file_path.exists() and file_path.is_file():
                return send_from_directory(dist_dir, path)
            return send_from_directory(dist_dir, "index.html")

    return app, socketio
