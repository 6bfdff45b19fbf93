"""
WebSocket event handlers for real-time game communication.

This module binds the Socket.IO events of the game protocol to the
SessionGateway.  It holds no game state of its own.
"""

from flask import request
from loguru import logger

from .messages import INTENTS, Disconnect


class SocketIOTransport(object):
    """Delivers gateway output through a Flask-SocketIO server."""

    def __init__(self, socketio, namespace='/'):
        self.socketio = socketio
        self.namespace = namespace

    def emit_to(self, sid, event, data):
        self.socketio.emit(event, data, to=sid, namespace=self.namespace)

    def emit_to_room(self, room_id, event, data):
        self.socketio.emit(event, data, to=room_id, namespace=self.namespace)

    def join(self, sid, room_id):
        self.socketio.server.enter_room(sid, room_id, namespace=self.namespace)

    def leave(self, sid, room_id):
        self.socketio.server.leave_room(sid, room_id, namespace=self.namespace)


def _make_handler(gateway, name):
    def handler(data=None):
        gateway.dispatch(name, request.sid, data)
    handler.__name__ = f"handle_{name}"
    return handler


def init_socketio_handlers(socketio, gateway):
    """Initialize WebSocket event handlers."""

    @socketio.on('connect')
    def handle_connect(auth=None):
        """Handle WebSocket connection."""
        logger.info(f"Client connected: {request.sid}")

    @socketio.on('disconnect')
    def handle_disconnect(reason=None):
        """Handle WebSocket disconnection."""
        logger.info(f"Client disconnected: {request.sid}")
        gateway.dispatch(Disconnect.name, request.sid)

    for name in INTENTS:
        if name == Disconnect.name:
            continue
        socketio.on_event(name, _make_handler(gateway, name))
