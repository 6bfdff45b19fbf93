"""
Flask application factory and main application entry point.

This module creates and configures the Flask application instance
with WebSocket support for real-time game communication.
"""

import sys

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from loguru import logger

from .config import Config
from .gateway import SessionGateway
from .match_log import MatchLog
from .messages import Limits
from .room_registry import RoomRegistry


def configure_logging(level='INFO'):
    """Route loguru output to stderr with the server's format."""
    logger.remove()  # Remove default handler
    logger.add(
        sys.stderr,
        format="{time} | {level} | {message}",
        level=level,
        colorize=True
    )


def create_app(config=None):
    """
    Create and configure the Flask application.

    Args:
        config: Dictionary of settings applied on top of Config

    Returns:
        Tuple of the Flask application and its SocketIO instance
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    configure_logging(app.config['LOG_LEVEL'])
    logger.info("Starting number guessing game server")

    # Enable CORS for all HTTP requests
    CORS(app, origins=app.config['CORS_ORIGINS'])

    # Initialize SocketIO for WebSocket support
    # Threading mode: the gateway serializes intents with a threading lock.
    socketio = SocketIO(app, async_mode='threading',
                        cors_allowed_origins=app.config['CORS_ORIGINS'])

    from . import websocket_handlers
    registry = RoomRegistry()
    match_log = MatchLog(app.config['MATCH_LOG_PATH'], spawn=socketio.start_background_task)
    gateway = SessionGateway(
        registry,
        websocket_handlers.SocketIOTransport(socketio),
        match_log,
        Limits.from_config(app.config),
    )
    app.extensions['numguess_registry'] = registry
    app.extensions['numguess_gateway'] = gateway

    from . import routes
    app.register_blueprint(routes.bp)

    websocket_handlers.init_socketio_handlers(socketio, gateway)

    return app, socketio
