"""
Realtime collaboration over Socket.IO.
"""

from .rooms import RoomRegistry, document_room, project_room
from .router import RealtimeEventRouter
from .server import CollaborationGateway, Connection

__all__ = [
    "RoomRegistry",
    "document_room",
    "project_room",
    "RealtimeEventRouter",
    "CollaborationGateway",
    "Connection",
]
