"""
Tests for realtime event routing between connections.
"""

import time

import pytest

from codecollab.realtime.events import ServerEvent
from codecollab.realtime.router import RealtimeEventRouter


class TestDocumentPresence:
    """Test suite for join-document / leave-document."""

    async def test_first_joiner_sees_only_itself(self, event_router, fake_emitter):
        # Act
        room = await event_router.join_document("sA", {"documentId": "d1", "userId": "u1", "userName": "Ann"})

        # Assert
        assert room == "document:d1"
        assert fake_emitter.emitted == [
            (ServerEvent.USERS_IN_DOCUMENT, {"count": 1, "users": [{"socketId": "sA"}]}, "sA"),
        ]

    async def test_second_joiner_is_announced_to_others(self, event_router, fake_emitter):
        # Arrange
        await event_router.join_document("sA", {"documentId": "d1", "userId": "u1", "userName": "Ann"})
        fake_emitter.clear()

        # Act
        await event_router.join_document("sB", {"documentId": "d1", "userId": "u2", "userName": "Bob"})

        # Assert
        assert fake_emitter.events_for("sA") == [
            (ServerEvent.USER_JOINED, {"userId": "u2", "userName": "Bob", "socketId": "sB"}),
        ]
        assert fake_emitter.events_for("sB") == [
            (ServerEvent.USERS_IN_DOCUMENT, {"count": 2, "users": [{"socketId": "sA"}, {"socketId": "sB"}]}),
        ]

    async def test_joiner_does_not_receive_own_announcement(self, event_router, fake_emitter):
        await event_router.join_document("sA", {"documentId": "d1"})
        await event_router.join_document("sB", {"documentId": "d1"})

        joined_targets = [to for _, _, to in fake_emitter.named(ServerEvent.USER_JOINED)]
        assert joined_targets == ["sA"]

    async def test_leave_document_stops_updates(self, event_router, fake_emitter, registry):
        await event_router.join_document("sA", {"documentId": "d1"})
        await event_router.join_document("sB", {"documentId": "d1"})

        await event_router.leave_document("sB", {"documentId": "d1"})
        fake_emitter.clear()
        delivered = await event_router.code_change("sA", {"documentId": "d1", "code": "x = 1"})

        assert delivered == 0
        assert fake_emitter.emitted == []
        assert registry.members_of("document:d1") == frozenset({"sA"})

    async def test_rooms_are_isolated(self, event_router, fake_emitter):
        await event_router.join_document("sA", {"documentId": "d1"})
        await event_router.join_document("sB", {"documentId": "d2"})
        fake_emitter.clear()

        delivered = await event_router.code_change("sA", {"documentId": "d1", "code": "only d1"})

        assert delivered == 0
        assert fake_emitter.events_for("sB") == []


class TestEditAndCursorRelay:
    """Test suite for code-change and cursor-change fan-out."""

    async def test_code_change_reaches_other_members_only(self, event_router, fake_emitter):
        # Arrange
        await event_router.join_document("sA", {"documentId": "d1", "userId": "u1", "userName": "Ann"})
        await event_router.join_document("sB", {"documentId": "d1", "userId": "u2", "userName": "Bob"})
        await event_router.join_document("sC", {"documentId": "d1", "userId": "u3", "userName": "Cid"})
        fake_emitter.clear()
        before = int(time.time() * 1000)

        # Act
        delivered = await event_router.code_change("sA", {"documentId": "d1", "code": "let a = 1;", "userId": "u1"})

        # Assert
        assert delivered == 2
        assert fake_emitter.events_for("sA") == []
        for sid in ("sB", "sC"):
            [(event, data)] = fake_emitter.events_for(sid)
            assert event == ServerEvent.CODE_UPDATE
            assert data["documentId"] == "d1"
            assert data["code"] == "let a = 1;"
            assert data["userId"] == "u1"
            assert isinstance(data["timestamp"], int)
            assert data["timestamp"] >= before

    async def test_code_change_from_non_member_still_relays_to_room(self, event_router, fake_emitter):
        await event_router.join_document("sB", {"documentId": "d1"})
        fake_emitter.clear()

        delivered = await event_router.code_change("sX", {"documentId": "d1", "code": "hi"})

        assert delivered == 1
        assert fake_emitter.events_for("sB")[0][0] == ServerEvent.CODE_UPDATE

    async def test_empty_code_is_relayed(self, event_router, fake_emitter):
        await event_router.join_document("sA", {"documentId": "d1"})
        await event_router.join_document("sB", {"documentId": "d1"})
        fake_emitter.clear()

        delivered = await event_router.code_change("sA", {"documentId": "d1", "code": ""})

        assert delivered == 1
        assert fake_emitter.events_for("sB")[0][1]["code"] == ""

    async def test_cursor_change_carries_socket_id(self, event_router, fake_emitter):
        await event_router.join_document("sA", {"documentId": "d1"})
        await event_router.join_document("sB", {"documentId": "d1"})
        fake_emitter.clear()

        position = {"lineNumber": 3, "column": 7}
        delivered = await event_router.cursor_change(
            "sA", {"documentId": "d1", "position": position, "userId": "u1", "userName": "Ann"}
        )

        assert delivered == 1
        assert fake_emitter.emitted == [
            (
                ServerEvent.CURSOR_UPDATE,
                {"userId": "u1", "userName": "Ann", "position": position, "socketId": "sA"},
                "sB",
            )
        ]


class TestSocketRooms:
    """Room membership is mirrored into the Socket.IO server, which does the fan-out."""

    async def test_join_and_leave_enter_socket_rooms(self, event_router, fake_emitter):
        await event_router.join_document("sA", {"documentId": "d1"})
        await event_router.join_project_chat("sA", "p1")
        await event_router.join_document("sB", {"documentId": "d1"})

        assert fake_emitter.rooms == {"document:d1": {"sA", "sB"}, "project:p1": {"sA"}}

        await event_router.leave_document("sB", {"documentId": "d1"})

        assert fake_emitter.rooms["document:d1"] == {"sA"}

    async def test_edit_is_one_room_emit_skipping_sender(self, event_router, fake_emitter):
        # Arrange
        for sid in ("sA", "sB", "sC"):
            await event_router.join_document(sid, {"documentId": "d1"})
        fake_emitter.clear()

        # Act
        delivered = await event_router.code_change("sA", {"documentId": "d1", "code": "y = 2"})

        # Assert
        assert delivered == 2
        [(event, data, room, skip_sid)] = fake_emitter.room_emits
        assert (event, room, skip_sid) == (ServerEvent.CODE_UPDATE, "document:d1", "sA")
        assert data["code"] == "y = 2"

    async def test_chat_room_emit_skips_nobody(self, event_router, fake_emitter):
        await event_router.join_project_chat("sA", "p1")

        await event_router.send_chat_message("sA", {"projectId": "p1", "message": "hi"})

        assert fake_emitter.room_emits == [(ServerEvent.NEW_CHAT_MESSAGE, "hi", "project:p1", None)]

    async def test_nothing_is_emitted_to_an_empty_room(self, event_router, fake_emitter):
        await event_router.join_document("sA", {"documentId": "d1"})
        fake_emitter.clear()

        assert await event_router.cursor_change("sA", {"documentId": "d1", "position": None}) == 0
        assert fake_emitter.room_emits == []


class TestProjectChat:
    """Test suite for project chat rooms."""

    async def test_join_project_chat_accepts_bare_id_and_object(self, event_router, registry):
        assert await event_router.join_project_chat("sA", "p1") == "project:p1"
        assert await event_router.join_project_chat("sB", {"projectId": "p1"}) == "project:p1"

        assert registry.members_of("project:p1") == frozenset({"sA", "sB"})

    async def test_chat_message_includes_sender(self, event_router, fake_emitter):
        # Arrange
        await event_router.join_project_chat("sA", "p1")
        await event_router.join_project_chat("sB", "p1")
        message = {"id": "m1", "message": "hello", "user": {"name": "Ann"}}

        # Act
        delivered = await event_router.send_chat_message("sA", {"projectId": "p1", "message": message})

        # Assert
        assert delivered == 2
        assert fake_emitter.emitted == [
            (ServerEvent.NEW_CHAT_MESSAGE, message, "sA"),
            (ServerEvent.NEW_CHAT_MESSAGE, message, "sB"),
        ]

    async def test_chat_does_not_leak_into_document_rooms(self, event_router, fake_emitter):
        await event_router.join_document("sA", {"documentId": "p1"})
        await event_router.join_project_chat("sB", "p1")
        fake_emitter.clear()

        await event_router.send_chat_message("sB", {"projectId": "p1", "message": {"message": "hi"}})

        assert fake_emitter.events_for("sA") == []


class TestDisconnect:

    async def test_disconnect_leaves_every_room_and_broadcasts_globally(self, event_router, fake_emitter, registry):
        await event_router.join_document("sA", {"documentId": "d1"})
        await event_router.join_project_chat("sA", "p1")
        fake_emitter.clear()

        rooms = await event_router.disconnect("sA")

        assert rooms == ["document:d1", "project:p1"]
        assert registry.rooms_of("sA") == frozenset()
        assert registry.room_count() == 0
        assert fake_emitter.emitted == [(ServerEvent.USER_LEFT, {"socketId": "sA"}, None)]

    async def test_disconnect_without_rooms_still_announces(self, event_router, fake_emitter):
        rooms = await event_router.disconnect("sZ")

        assert rooms == []
        assert fake_emitter.named(ServerEvent.USER_LEFT) == [(ServerEvent.USER_LEFT, {"socketId": "sZ"}, None)]


class TestMalformedPayloads:
    """Malformed events are dropped without emitting anything."""

    @pytest.mark.parametrize("payload", [None, "d1", 42, [], {}, {"documentId": ""}, {"documentId": 5}])
    async def test_join_document_drops_bad_payloads(self, event_router, fake_emitter, registry, payload):
        result = await event_router.join_document("sA", payload)

        assert result is None
        assert fake_emitter.emitted == []
        assert registry.room_count() == 0

    async def test_code_change_without_code_is_dropped(self, event_router, fake_emitter):
        await event_router.join_document("sA", {"documentId": "d1"})
        await event_router.join_document("sB", {"documentId": "d1"})
        fake_emitter.clear()

        delivered = await event_router.code_change("sA", {"documentId": "d1"})

        assert delivered == 0
        assert fake_emitter.emitted == []

    async def test_chat_without_project_is_dropped(self, event_router, fake_emitter):
        assert await event_router.send_chat_message("sA", {"message": "hi"}) == 0
        assert await event_router.join_project_chat("sA", "") is None
        assert await event_router.join_project_chat("sA", {"project": "p1"}) is None
        assert fake_emitter.emitted == []

    async def test_chat_without_message_is_dropped(self, event_router, fake_emitter):
        # Arrange
        await event_router.join_project_chat("sA", "p1")

        # Act
        delivered = await event_router.send_chat_message("sA", {"projectId": "p1"})

        # Assert
        assert delivered == 0
        assert fake_emitter.emitted == []

    async def test_cursor_without_position_is_dropped(self, event_router, fake_emitter):
        await event_router.join_document("sA", {"documentId": "d1"})
        await event_router.join_document("sB", {"documentId": "d1"})
        fake_emitter.clear()

        delivered = await event_router.cursor_change("sA", {"documentId": "d1", "userId": "u1"})

        assert delivered == 0
        assert fake_emitter.emitted == []

    async def test_numeric_document_id_is_dropped(self, event_router, fake_emitter):
        await event_router.join_document("sA", {"documentId": "123"})
        await event_router.join_document("sB", {"documentId": "123"})
        fake_emitter.clear()

        delivered = await event_router.code_change("sA", {"documentId": 123, "code": "x"})

        assert delivered == 0
        assert fake_emitter.emitted == []

    async def test_dropped_events_are_counted(self, event_router):
        await event_router.join_document("sA", None)
        await event_router.cursor_change("sA", "nope")
        await event_router.join_document("sA", {"documentId": "d1"})

        stats = event_router.get_statistics()
        assert stats["events_dropped"] == 2
        assert stats["events_routed"] == 1
        assert stats["messages_delivered"] == 1


class TestEditEnforcement:
    """Test suite for optional edit-permission enforcement on code-change."""

    @staticmethod
    def make_router(registry, emitter, allowed):
        async def edit_checker(user_id, document_id):
            return (user_id, document_id) in allowed
        return RealtimeEventRouter(registry, emitter, edit_checker=edit_checker, enforce_edit_permission=True)

    async def test_permitted_user_edit_is_relayed(self, registry, fake_emitter):
        router = self.make_router(registry, fake_emitter, {("u1", "d1")})
        await router.join_document("sA", {"documentId": "d1"})
        await router.join_document("sB", {"documentId": "d1"})
        fake_emitter.clear()

        delivered = await router.code_change("sA", {"documentId": "d1", "code": "ok"}, user_id="u1")

        assert delivered == 1

    async def test_unpermitted_user_edit_is_dropped(self, registry, fake_emitter):
        router = self.make_router(registry, fake_emitter, {("u1", "d1")})
        await router.join_document("sA", {"documentId": "d1"})
        await router.join_document("sB", {"documentId": "d1"})
        fake_emitter.clear()

        delivered = await router.code_change("sB", {"documentId": "d1", "code": "nope"}, user_id="u2")

        assert delivered == 0
        assert fake_emitter.emitted == []
        assert router.get_statistics()["events_dropped"] == 1

    async def test_anonymous_edit_is_dropped_when_enforced(self, registry, fake_emitter):
        router = self.make_router(registry, fake_emitter, {("u1", "d1")})
        await router.join_document("sA", {"documentId": "d1"})
        await router.join_document("sB", {"documentId": "d1"})
        fake_emitter.clear()

        assert await router.code_change("sA", {"documentId": "d1", "code": "x"}) == 0

    async def test_enforcement_off_ignores_checker(self, registry, fake_emitter):
        async def deny_all(user_id, document_id):
            return False

        router = RealtimeEventRouter(registry, fake_emitter, edit_checker=deny_all)
        await router.join_document("sA", {"documentId": "d1"})
        await router.join_document("sB", {"documentId": "d1"})

        assert await router.code_change("sA", {"documentId": "d1", "code": "x"}) == 1
