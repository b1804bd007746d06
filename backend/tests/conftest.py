"""
Pytest configuration and shared fixtures for the collaboration backend tests.
"""

import os

# Settings are read once and cached, so the environment must be set before
# anything from codecollab is imported.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "test"
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id.apps.googleusercontent.com"

from typing import Any, Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from codecollab.collaboration.permissions import ProjectRole
from codecollab.core.security import create_access_token
from codecollab.db.database import SessionLocal, drop_tables, init_db
from codecollab.main import app
from codecollab.models import (
    ChatMessage,
    Document,
    DocumentPermission,
    Folder,
    FolderPermission,
    Project,
    ProjectMember,
    User,
)
from codecollab.realtime.rooms import RoomRegistry
from codecollab.realtime.router import RealtimeEventRouter


class FakeEmitter:
    """
    Records every emit instead of talking to a Socket.IO server.

    Room emits are expanded to one ``(event, data, sid)`` entry per
    recipient, using the rooms entered through ``enter_room``.
    """

    def __init__(self):
        self.emitted: List[Tuple[str, Any, Optional[str]]] = []
        self.room_emits: List[Tuple[str, Any, str, Optional[str]]] = []
        self.rooms: Dict[str, set] = {}

    async def enter_room(self, sid: str, room: str, namespace: Optional[str] = None) -> None:
        self.rooms.setdefault(room, set()).add(sid)

    async def leave_room(self, sid: str, room: str, namespace: Optional[str] = None) -> None:
        self.rooms.get(room, set()).discard(sid)

    async def emit(self, event: str, data: Any = None, to: Optional[str] = None,
                   room: Optional[str] = None, skip_sid: Optional[str] = None, **kwargs) -> None:
        target = to or room
        if target is not None and target in self.rooms:
            self.room_emits.append((event, data, target, skip_sid))
            for sid in sorted(self.rooms[target]):
                if sid != skip_sid:
                    self.emitted.append((event, data, sid))
            return
        self.emitted.append((event, data, target))

    def events_for(self, sid: str) -> List[Tuple[str, Any]]:
        return [(event, data) for event, data, to in self.emitted if to == sid]

    def named(self, event_name: str) -> List[Tuple[str, Any, Optional[str]]]:
        return [entry for entry in self.emitted if entry[0] == event_name]

    def clear(self) -> None:
        self.emitted.clear()
        self.room_emits.clear()


class DataFactory:
    """Creates committed rows for tests."""

    def __init__(self, db):
        self.db = db
        self._counter = 0

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def user(self, name: str = None, email: str = None) -> User:
        self._counter += 1
        name = name or f"User {self._counter}"
        email = email or f"user{self._counter}@example.com"
        return self._save(User(google_id=f"google-{self._counter}", email=email, name=name))

    def project(self, owner: User, name: str = "Demo project", is_public: bool = False) -> Project:
        project = Project(name=name, owner_id=owner.id, is_public=is_public)
        project.members.append(ProjectMember(user_id=owner.id, role=ProjectRole.ADMIN))
        return self._save(project)

    def member(self, project: Project, user: User, role: ProjectRole = ProjectRole.EDITOR) -> ProjectMember:
        return self._save(ProjectMember(project_id=project.id, user_id=user.id, role=role))

    def folder(self, project: Project, name: str = "src", parent: Folder = None) -> Folder:
        return self._save(Folder(project_id=project.id, name=name, parent_id=parent.id if parent else None))

    def document(self, project: Project, name: str = "index.js", folder: Folder = None,
                 content: str = "// Start coding here...\n") -> Document:
        return self._save(Document(
            project_id=project.id,
            folder_id=folder.id if folder else None,
            name=name,
            content=content,
        ))

    def document_grant(self, document: Document, user: User, can_edit: bool = True,
                       can_delete: bool = False) -> DocumentPermission:
        return self._save(DocumentPermission(
            document_id=document.id, user_id=user.id, can_edit=can_edit, can_delete=can_delete
        ))

    def folder_grant(self, folder: Folder, user: User, can_edit: bool = True,
                     can_delete: bool = False) -> FolderPermission:
        return self._save(FolderPermission(
            folder_id=folder.id, user_id=user.id, can_edit=can_edit, can_delete=can_delete
        ))

    def chat_message(self, project: Project, user: User, message: str = "hello",
                     reply_to: ChatMessage = None) -> ChatMessage:
        return self._save(ChatMessage(
            project_id=project.id,
            user_id=user.id,
            message=message,
            reply_to_id=reply_to.id if reply_to else None,
        ))


@pytest.fixture
def db_session():
    """Fresh schema per test on the shared in-memory database."""
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        drop_tables()


@pytest.fixture
def factory(db_session):
    return DataFactory(db_session)


@pytest.fixture
def client(db_session):
    """HTTP client for the FastAPI app (lifespan is not run)."""
    return TestClient(app)


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user."""
    def _headers(user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _headers


@pytest.fixture
def owner(factory):
    return factory.user(name="Olivia Owner", email="owner@example.com")


@pytest.fixture
def project(factory, owner):
    return factory.project(owner)


@pytest.fixture
def fake_emitter():
    return FakeEmitter()


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def event_router(registry, fake_emitter):
    return RealtimeEventRouter(registry, fake_emitter)
