"""
Append-only log of finished matches.

Each finished room is written as one JSON line.  Writes run as detached
background tasks; a failed write is reported in the server log and otherwise
ignored.
"""

import json
from datetime import datetime, timezone
from typing import Callable, Optional

from loguru import logger

from .room import Room


def _run_inline(func, *args):
    func(*args)


class MatchLog(object):
    """Write-only JSONL sink for finished rooms.

    Parameters
    ----------
    path : str
        File to append to
    spawn : callable, optional
        ``spawn(func, *args)`` starts ``func`` in the background.  The app
        passes ``socketio.start_background_task``; defaults to running inline.
    """

    def __init__(self, path: str, spawn: Optional[Callable] = None):
        self.path = path
        self.spawn = spawn or _run_inline

    def record(self, room: Room):
        """Snapshot ``room`` now and hand the write to the background."""
        entry = room.to_dict(reveal_secrets=True, include_digests=True)
        entry['loggedAt'] = datetime.now(timezone.utc).isoformat()
        line = json.dumps(entry, ensure_ascii=False) + '\n'
        try:
            self.spawn(self._append, room.id, line)
        except Exception:
            logger.exception(f"Could not schedule match log write for room {room.id}")

    def _append(self, room_id: str, line: str):
        try:
            with open(self.path, 'a', encoding='utf-8') as f:
                f.write(line)
        except Exception:
            logger.exception(f"Failed to write match log for room {room_id} to {self.path}")
            return
        logger.info(f"Match in room {room_id} logged to {self.path}")
