import pytest

from numguess.gateway import SessionGateway
from numguess.messages import Limits
from numguess.room_registry import RoomRegistry


class FakeTransport(object):
    """Records everything the gateway sends."""

    def __init__(self):
        self.sent = []  # (target, event, data); target is ('sid', x) or ('room', x)
        self.rooms = {}  # room_id -> set of sids

    def emit_to(self, sid, event, data):
        self.sent.append((('sid', sid), event, data))

    def emit_to_room(self, room_id, event, data):
        self.sent.append((('room', room_id), event, data))

    def join(self, sid, room_id):
        self.rooms.setdefault(room_id, set()).add(sid)

    def leave(self, sid, room_id):
        self.rooms.get(room_id, set()).discard(sid)

    def received_by(self, sid, event=None):
        """Payloads a connection would have seen, private and broadcast."""
        out = []
        for (kind, target), name, data in self.sent:
            if kind == 'sid' and target != sid:
                continue
            if kind == 'room' and sid not in self.rooms.get(target, set()):
                continue
            if event is None or name == event:
                out.append(data)
        return out

    def events(self):
        return [name for _, name, _ in self.sent]

    def clear(self):
        self.sent = []


class RecordingMatchLog(object):
    def __init__(self):
        self.recorded = []

    def record(self, room):
        self.recorded.append(room.to_dict(reveal_secrets=True, include_digests=True))


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def match_log():
    return RecordingMatchLog()


@pytest.fixture
def registry():
    return RoomRegistry(rng=None)


@pytest.fixture
def gateway(registry, transport, match_log):
    return SessionGateway(registry, transport, match_log, Limits(min_digits=2, max_digits=8))
