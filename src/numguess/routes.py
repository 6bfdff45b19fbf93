"""
HTTP routes.

Everything game-related happens over Socket.IO; these endpoints are for
health checks and for peeking at a room before joining it.
"""

from flask import Blueprint, current_app, jsonify

bp = Blueprint('main', __name__)


@bp.route('/health')
def health():
    """Liveness check with the number of live rooms."""
    registry = current_app.extensions['numguess_registry']
    return jsonify({'success': True, 'data': {'rooms': len(registry)}}), 200


@bp.route('/api/rooms/<room_id>')
def get_room(room_id):
    """Get the public view of a room.

    Secrets stay hidden here even after the game; only room members see them.
    """
    registry = current_app.extensions['numguess_registry']
    room = registry.get(room_id)
    if room is None:
        return jsonify({'success': False, 'error': 'Room not found'}), 404
    return jsonify({'success': True, 'data': room.to_dict(reveal_secrets=False, include_digests=False)}), 200
