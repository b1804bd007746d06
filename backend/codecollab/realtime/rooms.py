"""
Room membership for realtime connections.

A room is a key mapped to the set of connection ids inside it. Rooms
appear on the first join and are dropped as soon as the last member
leaves, so an empty room and a missing room look the same to callers.
"""

import threading
from typing import Any, Dict, FrozenSet, List, Set

DOCUMENT_ROOM_PREFIX = "document:"
PROJECT_ROOM_PREFIX = "project:"


def document_room(document_id: str) -> str:
    return f"{DOCUMENT_ROOM_PREFIX}{document_id}"


def project_room(project_id: str) -> str:
    return f"{PROJECT_ROOM_PREFIX}{project_id}"


class RoomRegistry:
    """Thread-safe mapping of room key to member connection ids."""

    def __init__(self):
        self._rooms: Dict[str, Set[str]] = {}
        self._memberships: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    def join(self, connection_id: str, room_key: str) -> bool:
        """
        Add a connection to a room.

        Returns:
            True if the connection was not already a member
        """
        with self._lock:
            members = self._rooms.setdefault(room_key, set())
            if connection_id in members:
                return False
            members.add(connection_id)
            self._memberships.setdefault(connection_id, set()).add(room_key)
            return True

    def leave(self, connection_id: str, room_key: str) -> bool:
        """Remove a connection from one room; unknown rooms are a no-op."""
        with self._lock:
            return self._remove(connection_id, room_key)

    def leave_all(self, connection_id: str) -> List[str]:
        """
        Remove a connection from every room it joined.

        Returns:
            The room keys the connection was removed from
        """
        with self._lock:
            rooms = sorted(self._memberships.get(connection_id, ()))
            for room_key in rooms:
                self._remove(connection_id, room_key)
            return rooms

    def members_of(self, room_key: str) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._rooms.get(room_key, ()))

    def rooms_of(self, connection_id: str) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._memberships.get(connection_id, ()))

    def room_count(self) -> int:
        with self._lock:
            return len(self._rooms)

    def get_statistics(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "total_rooms": len(self._rooms),
                "document_rooms": sum(1 for key in self._rooms if key.startswith(DOCUMENT_ROOM_PREFIX)),
                "project_rooms": sum(1 for key in self._rooms if key.startswith(PROJECT_ROOM_PREFIX)),
                "connections_in_rooms": len(self._memberships),
                "total_memberships": sum(len(members) for members in self._rooms.values()),
                "rooms": {key: len(members) for key, members in self._rooms.items()},
            }

    def _remove(self, connection_id: str, room_key: str) -> bool:
        # caller holds the lock
        members = self._rooms.get(room_key)
        if not members or connection_id not in members:
            return False

        members.discard(connection_id)
        if not members:
            del self._rooms[room_key]

        joined = self._memberships.get(connection_id)
        if joined is not None:
            joined.discard(room_key)
            if not joined:
                del self._memberships[connection_id]
        return True
