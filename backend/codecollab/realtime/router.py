"""
Realtime event routing.

Each handler validates its payload, mirrors room membership into both the
registry and the Socket.IO server, and emits the resulting event to one
Socket.IO room. Delivery counts come from the registry snapshot.

Edit, cursor and presence broadcasts skip the sending connection. Chat goes
to the whole project room, sender included. The disconnect notice goes to
every connection.
"""

import time
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Protocol

from loguru import logger

from .events import (
    ChatMessagePayload,
    ClientEvent,
    CodeChangePayload,
    CursorChangePayload,
    JoinDocumentPayload,
    LeaveDocumentPayload,
    ServerEvent,
    parse_payload,
    parse_project_id,
)
from .rooms import RoomRegistry, document_room, project_room

EditChecker = Callable[[str, str], Awaitable[bool]]


class Emitter(Protocol):
    """The slice of ``socketio.AsyncServer`` the router needs."""

    async def emit(self, event: str, data: Any = None, to: Optional[str] = None,
                   room: Optional[str] = None, skip_sid: Optional[str] = None, **kwargs) -> None:
        ...

    async def enter_room(self, sid: str, room: str, namespace: Optional[str] = None) -> None:
        ...

    async def leave_room(self, sid: str, room: str, namespace: Optional[str] = None) -> None:
        ...


class RealtimeEventRouter:
    """Dispatches inbound realtime events to room members."""

    def __init__(
        self,
        registry: RoomRegistry,
        emitter: Emitter,
        edit_checker: Optional[EditChecker] = None,
        enforce_edit_permission: bool = False,
    ):
        self.registry = registry
        self.emitter = emitter
        self.edit_checker = edit_checker
        self.enforce_edit_permission = enforce_edit_permission
        self.stats = {
            "events_routed": 0,
            "events_dropped": 0,
            "messages_delivered": 0,
        }

    async def join_document(self, sid: str, data: Any) -> Optional[str]:
        """
        Join a document room, announce the joiner to the others and send
        the joiner the room snapshot (which already includes it).

        Returns:
            The room key joined, or None if the payload was dropped
        """
        payload = self._parse(JoinDocumentPayload, ClientEvent.JOIN_DOCUMENT, sid, data)
        if payload is None:
            return None

        room_key = document_room(payload.document_id)
        self.registry.join(sid, room_key)
        await self.emitter.enter_room(sid, room_key)
        logger.debug(f"{payload.user_name} ({sid}) joined {room_key}")

        await self._broadcast(
            room_key,
            ServerEvent.USER_JOINED,
            {"userId": payload.user_id, "userName": payload.user_name, "socketId": sid},
            exclude=sid,
        )

        members = sorted(self.registry.members_of(room_key))
        await self._send(
            sid,
            ServerEvent.USERS_IN_DOCUMENT,
            {"count": len(members), "users": [{"socketId": member} for member in members]},
        )
        return room_key

    async def leave_document(self, sid: str, data: Any) -> Optional[str]:
        payload = self._parse(LeaveDocumentPayload, ClientEvent.LEAVE_DOCUMENT, sid, data)
        if payload is None:
            return None

        room_key = document_room(payload.document_id)
        self.registry.leave(sid, room_key)
        await self.emitter.leave_room(sid, room_key)
        logger.debug(f"{sid} left {room_key}")
        return room_key

    async def join_project_chat(self, sid: str, data: Any) -> Optional[str]:
        project_id = parse_project_id(sid, data)
        if project_id is None:
            self.stats["events_dropped"] += 1
            return None

        room_key = project_room(project_id)
        self.registry.join(sid, room_key)
        await self.emitter.enter_room(sid, room_key)
        self.stats["events_routed"] += 1
        logger.debug(f"{sid} joined {room_key}")
        return room_key

    async def send_chat_message(self, sid: str, data: Any) -> int:
        """Relay a chat message to the project room; returns deliveries."""
        payload = self._parse(ChatMessagePayload, ClientEvent.SEND_CHAT_MESSAGE, sid, data)
        if payload is None:
            return 0

        return await self._broadcast(
            project_room(payload.project_id),
            ServerEvent.NEW_CHAT_MESSAGE,
            payload.message,
        )

    async def code_change(self, sid: str, data: Any, user_id: Optional[str] = None) -> int:
        """
        Relay an edit to the other members of the document room.

        With edit enforcement on, the edit is only relayed for an
        authenticated connection whose user may edit the document.
        """
        payload = self._parse(CodeChangePayload, ClientEvent.CODE_CHANGE, sid, data)
        if payload is None:
            return 0

        if self.enforce_edit_permission and not await self._may_edit(user_id, payload.document_id):
            logger.debug(f"Dropping code-change from {sid}: no edit permission on {payload.document_id}")
            self.stats["events_dropped"] += 1
            return 0

        return await self._broadcast(
            document_room(payload.document_id),
            ServerEvent.CODE_UPDATE,
            {
                "documentId": payload.document_id,
                "code": payload.code,
                "userId": payload.user_id,
                "timestamp": int(time.time() * 1000),
            },
            exclude=sid,
        )

    async def cursor_change(self, sid: str, data: Any) -> int:
        payload = self._parse(CursorChangePayload, ClientEvent.CURSOR_CHANGE, sid, data)
        if payload is None:
            return 0

        return await self._broadcast(
            document_room(payload.document_id),
            ServerEvent.CURSOR_UPDATE,
            {
                "userId": payload.user_id,
                "userName": payload.user_name,
                "position": payload.position,
                "socketId": sid,
            },
            exclude=sid,
        )

    async def disconnect(self, sid: str) -> List[str]:
        """
        Drop the connection from every room and tell every connected
        client, not only the former room mates, that it left.
        """
        rooms = self.registry.leave_all(sid)
        await self.emitter.emit(ServerEvent.USER_LEFT, {"socketId": sid})
        self.stats["events_routed"] += 1
        return rooms

    def get_statistics(self) -> Dict[str, Any]:
        return dict(self.stats)

    def _parse(self, model, event: str, sid: str, data: Any):
        payload = parse_payload(model, event, sid, data)
        if payload is None:
            self.stats["events_dropped"] += 1
        else:
            self.stats["events_routed"] += 1
        return payload

    async def _may_edit(self, user_id: Optional[str], document_id: str) -> bool:
        if not user_id or self.edit_checker is None:
            return False
        return await self.edit_checker(user_id, document_id)

    async def _broadcast(self, room_key: str, event: str, data: Any, exclude: Optional[str] = None) -> int:
        recipients = self._recipients(self.registry.members_of(room_key), exclude)
        if not recipients:
            return 0
        await self.emitter.emit(event, data, room=room_key, skip_sid=exclude)
        self.stats["messages_delivered"] += len(recipients)
        return len(recipients)

    async def _send(self, sid: str, event: str, data: Any) -> None:
        await self.emitter.emit(event, data, to=sid)
        self.stats["messages_delivered"] += 1

    @staticmethod
    def _recipients(members: Iterable[str], exclude: Optional[str]) -> List[str]:
        return sorted(member for member in members if member != exclude)
