"""Tests for the user, room and event sub-stores."""

import pytest

from slackbridge.datastore.bridge_stores import (
    EventBridgeStore,
    RoomBridgeStore,
    UserBridgeStore,
)
from slackbridge.datastore.collection import INTERNAL_ID, DocumentCollection
from slackbridge.datastore.models import MatrixUser


@pytest.fixture
def user_store() -> UserBridgeStore:
    return UserBridgeStore(DocumentCollection("users"))


@pytest.fixture
def event_store() -> EventBridgeStore:
    return EventBridgeStore(DocumentCollection("events"))


class TestUserBridgeStore:
    """Tests for Matrix user aggregates."""

    @pytest.mark.asyncio
    async def test_get_missing_matrix_user(self, user_store) -> None:
        assert await user_store.get_matrix_user("@nobody:hs") is None

    @pytest.mark.asyncio
    async def test_set_and_get_matrix_user(self, user_store) -> None:
        await user_store.set_matrix_user(MatrixUser(user_id="@alice:hs", data={"k": "v"}))

        user = await user_store.get_matrix_user("@alice:hs")

        assert user == MatrixUser(user_id="@alice:hs", data={"k": "v"})

    @pytest.mark.asyncio
    async def test_ghost_with_same_id_is_not_an_aggregate(self, user_store) -> None:
        await user_store.upsert({"id": "@x:hs"}, {"id": "@x:hs", "type": "remote"})
        assert await user_store.get_matrix_user("@x:hs") is None

    @pytest.mark.asyncio
    async def test_set_matrix_user_replaces(self, user_store) -> None:
        await user_store.set_matrix_user(MatrixUser(user_id="@alice:hs", data={"a": 1}))
        await user_store.set_matrix_user(MatrixUser(user_id="@alice:hs", data={"b": 2}))

        documents = await user_store.select()
        assert len(documents) == 1
        assert documents[0]["data"] == {"b": 2}

    @pytest.mark.asyncio
    async def test_set_matrix_user_keeps_entry_fields(self, user_store) -> None:
        await user_store.upsert_entry(
            {"id": "@alice:hs", "type": "matrix", "display_name": "Alice"}
        )
        await user_store.set_matrix_user(MatrixUser(user_id="@alice:hs", data={"a": 1}))

        document = await user_store.select_one({"id": "@alice:hs"})
        assert document["display_name"] == "Alice"
        assert document["data"] == {"a": 1}

    @pytest.mark.asyncio
    async def test_upsert_entry_keeps_aggregate(self, user_store) -> None:
        await user_store.set_matrix_user(MatrixUser(user_id="@alice:hs", data={"a": 1}))
        await user_store.upsert_entry({"id": "@alice:hs", "type": "matrix"})

        user = await user_store.get_matrix_user("@alice:hs")
        assert user.data == {"a": 1}


class TestRoomBridgeStore:
    """Tests for generic select/upsert/delete."""

    @pytest.mark.asyncio
    async def test_upsert_select_delete(self) -> None:
        store = RoomBridgeStore(DocumentCollection("rooms"))
        await store.upsert({"id": "INTEG-a"}, {"id": "INTEG-a", "matrix_id": "!r"})

        documents = await store.select({"matrix_id": {"$exists": True}})
        assert [doc["id"] for doc in documents] == ["INTEG-a"]
        assert INTERNAL_ID in documents[0]

        assert await store.delete({"id": "INTEG-a"}) == 1
        assert await store.select_one({"id": "INTEG-a"}) is None


class TestEventBridgeStore:
    """Tests for event link lookups."""

    @pytest.fixture
    def document(self) -> dict:
        return {
            "id": "$ev_1.0",
            "matrix": {"roomId": "!r", "eventId": "$ev"},
            "remote": {"roomId": "C1", "eventId": "1.0"},
            "extras": {},
        }

    @pytest.mark.asyncio
    async def test_lookup_from_both_sides(self, event_store, document) -> None:
        await event_store.upsert_event(document)

        by_matrix = await event_store.get_entry_by_matrix_id("!r", "$ev")
        by_remote = await event_store.get_entry_by_remote_id("C1", "1.0")

        assert by_matrix == by_remote
        assert by_matrix["id"] == "$ev_1.0"

    @pytest.mark.asyncio
    async def test_upsert_by_document_id(self, event_store, document) -> None:
        await event_store.upsert_event(document)
        await event_store.upsert_event({**document, "extras": {"edited": True}})

        documents = await event_store.select()
        assert len(documents) == 1
        assert documents[0]["extras"] == {"edited": True}

    @pytest.mark.asyncio
    async def test_delete_by_matrix_id(self, event_store, document) -> None:
        await event_store.upsert_event(document)

        assert await event_store.delete_by_matrix_id("!r", "$ev") == 1
        assert await event_store.get_entry_by_remote_id("C1", "1.0") is None
