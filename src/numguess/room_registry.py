import random
from typing import Dict, List, Optional

from .room import Room

ROOM_ID_MIN = 100000
ROOM_ID_MAX = 999999


class RoomRegistry(object):
    """Owns every live room in the process.

    The model here is:
    - There is a set of rooms, each with a unique 6-digit string ID.
    - Each connection is a member of at most one room at a time.
    - Rooms live until they are deleted; finished rooms are kept.

    """
    def __init__(self, rng: Optional[random.Random] = None):
        """Initialize the RoomRegistry with empty state."""
        self.rooms: Dict[str, Room] = {}  # room_id -> Room
        self.member_to_room: Dict[str, str] = {}  # connection id -> room_id
        self._rng = rng or random.Random()

    def _new_room_id(self) -> str:
        room_id = str(self._rng.randint(ROOM_ID_MIN, ROOM_ID_MAX))
        while room_id in self.rooms:
            room_id = str(self._rng.randint(ROOM_ID_MIN, ROOM_ID_MAX))
        return room_id

    def create(self, digits: int) -> Room:
        """Create an empty room and return it.

        IDs are random 6-digit numbers, regenerated on collision.

        """
        room = Room(self._new_room_id(), digits, rng=self._rng)
        self.rooms[room.id] = room
        return room

    def get(self, room_id: str) -> Optional[Room]:
        """Return the room with the given ID, or None."""
        return self.rooms.get(room_id)

    def delete(self, room_id: str):
        """Remove the given room and free its members.

        """
        room = self.rooms.pop(room_id, None)
        if room is None:
            return
        for member, joined in list(self.member_to_room.items()):
            if joined == room_id:
                del self.member_to_room[member]

    def list_rooms(self) -> List[str]:
        """Lists current room IDs.

        """
        return list(self.rooms.keys())

    def attach(self, member: str, room_id: str):
        """Record that a connection belongs to a room.

        Raise KeyError if the room doesn't exist.
        Raise RuntimeError if the connection is already in another room.

        """
        if room_id not in self.rooms:
            raise KeyError(f"Room '{room_id}' does not exist")

        current = self.member_to_room.get(member)
        if current is not None and current != room_id:
            raise RuntimeError(f"'{member}' is already in room '{current}'")

        self.member_to_room[member] = room_id

    def detach(self, member: str) -> Optional[str]:
        """Forget a connection's membership and return the room it was in."""
        return self.member_to_room.pop(member, None)

    def room_of(self, member: str) -> Optional[Room]:
        """Return the room a connection belongs to, if any."""
        room_id = self.member_to_room.get(member)
        if room_id is None:
            return None
        return self.rooms.get(room_id)

    def __len__(self):
        return len(self.rooms)
