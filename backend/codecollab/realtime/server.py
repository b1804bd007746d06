"""
Socket.IO gateway for realtime collaboration.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

import socketio
from loguru import logger
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from codecollab.collaboration.permissions import resolve_edit_permission
from codecollab.core.config import Settings, get_allowed_origins, get_settings
from codecollab.core.error_handlers import AuthenticationError
from codecollab.core.security import decode_access_token
from codecollab.db.database import SessionLocal
from codecollab.services.access_service import load_permission_context

from .events import ClientEvent
from .rooms import RoomRegistry
from .router import RealtimeEventRouter


@dataclass
class Connection:
    """An open Socket.IO connection."""
    sid: str
    user_id: Optional[str] = None
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sid": self.sid,
            "user_id": self.user_id,
            "connected_at": self.connected_at.isoformat(),
        }


class CollaborationGateway:
    """Owns the Socket.IO server, the open connections and the room registry."""

    def __init__(
        self,
        sio: Optional[socketio.AsyncServer] = None,
        registry: Optional[RoomRegistry] = None,
        session_factory: Callable[[], Session] = SessionLocal,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.sio = sio or socketio.AsyncServer(
            async_mode="asgi",
            cors_allowed_origins=get_allowed_origins(),
            logger=False,
            engineio_logger=False,
        )
        self.registry = registry or RoomRegistry()
        self.session_factory = session_factory
        self.connections: Dict[str, Connection] = {}
        self.router = RealtimeEventRouter(
            self.registry,
            self.sio,
            edit_checker=self.can_edit,
            enforce_edit_permission=self.settings.realtime_enforce_edit_permission,
        )
        self.stats = {
            "started_at": datetime.now(timezone.utc),
            "total_connections": 0,
        }
        self._register_handlers()

    def _register_handlers(self):
        self.sio.on("connect", self.connect)
        self.sio.on("disconnect", self.disconnect)
        self.sio.on(ClientEvent.JOIN_DOCUMENT, self.router.join_document)
        self.sio.on(ClientEvent.LEAVE_DOCUMENT, self.router.leave_document)
        self.sio.on(ClientEvent.JOIN_PROJECT_CHAT, self.router.join_project_chat)
        self.sio.on(ClientEvent.SEND_CHAT_MESSAGE, self.router.send_chat_message)
        self.sio.on(ClientEvent.CODE_CHANGE, self.code_change)
        self.sio.on(ClientEvent.CURSOR_CHANGE, self.router.cursor_change)

    async def connect(self, sid: str, environ: Dict[str, Any], auth: Optional[Dict[str, Any]] = None) -> bool:
        """
        Register the connection. Every connection is accepted; a valid
        access token in ``auth.token`` tags it with the user id.
        """
        user_id = None
        token = auth.get("token") if isinstance(auth, dict) else None
        if token:
            try:
                user_id = decode_access_token(token)["userId"]
            except AuthenticationError as e:
                logger.debug(f"Socket {sid} connected with unusable token: {e.message}")

        self.connections[sid] = Connection(sid=sid, user_id=user_id)
        self.stats["total_connections"] += 1
        logger.info(f"User connected: {sid}" + (f" (user {user_id})" if user_id else ""))
        return True

    async def disconnect(self, sid: str, *args) -> None:
        self.connections.pop(sid, None)
        rooms = await self.router.disconnect(sid)
        logger.info(f"User disconnected: {sid} (left {len(rooms)} room(s))")

    async def code_change(self, sid: str, data: Any) -> int:
        connection = self.connections.get(sid)
        user_id = connection.user_id if connection else None
        return await self.router.code_change(sid, data, user_id=user_id)

    async def can_edit(self, user_id: str, document_id: str) -> bool:
        return await run_in_threadpool(self._resolve_edit, user_id, document_id)

    def _resolve_edit(self, user_id: str, document_id: str) -> bool:
        db = self.session_factory()
        try:
            ctx = load_permission_context(db, document_id, user_id)
        finally:
            db.close()
        return ctx is not None and resolve_edit_permission(ctx)

    def asgi_app(self, other_app=None) -> socketio.ASGIApp:
        """Serve Socket.IO at /socket.io and everything else from ``other_app``."""
        return socketio.ASGIApp(self.sio, other_asgi_app=other_app)

    def get_statistics(self) -> Dict[str, Any]:
        uptime = (datetime.now(timezone.utc) - self.stats["started_at"]).total_seconds()
        return {
            "started_at": self.stats["started_at"].isoformat(),
            "uptime_seconds": round(uptime, 1),
            "active_connections": len(self.connections),
            "authenticated_connections": sum(1 for c in self.connections.values() if c.user_id),
            "total_connections": self.stats["total_connections"],
            "rooms": self.registry.get_statistics(),
            "events": self.router.get_statistics(),
        }
