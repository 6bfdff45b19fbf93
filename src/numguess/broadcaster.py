"""
Fan-out of room snapshots and private events.

Everything that leaves the server about a room goes through sanitize(), which
strips commitments always and raw secrets until the game is over.
"""

from .messages import Event, GameOver, UpdateRoomState
from .room import Room


def sanitize(room: Room) -> dict:
    """Return the view of ``room`` that clients are allowed to see."""
    return room.to_dict(reveal_secrets=room.is_finished, include_digests=False)


class Broadcaster(object):
    """Sends events through a transport.

    The transport needs two methods: ``emit_to_room(room_id, event, data)``
    and ``emit_to(sid, event, data)``.
    """

    def __init__(self, transport):
        self.transport = transport

    def send(self, sid: str, event: Event):
        """Send an event to one connection only."""
        self.transport.emit_to(sid, event.name, event.payload())

    def publish(self, room_id: str, event: Event):
        """Send an event to every connection in a room."""
        self.transport.emit_to_room(room_id, event.name, event.payload())

    def room_state(self, room: Room):
        if room.is_finished:
            self.game_over(room)
            return
        self.publish(room.id, UpdateRoomState(sanitize(room)))

    def game_over(self, room: Room):
        self.publish(room.id, GameOver(sanitize(room)))
