"""Tests for how EmbeddedDatastore answers calls it cannot serve."""

from datetime import datetime

import pytest
from prometheus_client import REGISTRY

from slackbridge.datastore.errors import UnsupportedOperationError
from slackbridge.datastore.models import RoomEntry, TeamEntry, UserEntry


def degraded_count(operation: str, policy: str) -> float:
    value = REGISTRY.get_sample_value(
        "slackbridge_datastore_degraded_total",
        {"operation": operation, "policy": policy},
    )
    return value or 0.0


class TestSilentDegradation:
    """Puppets, emoji and activity metrics return zero values."""

    @pytest.mark.asyncio
    async def test_puppets(self, datastore) -> None:
        assert await datastore.set_puppet_token("T1", "U1", "@alice:hs", "xoxp-1") is None
        assert await datastore.remove_puppet_token_by_matrix_id("T1", "@alice:hs") is None
        assert await datastore.get_puppet_token_by_slack_id("T1", "U1") is None
        assert await datastore.get_puppet_token_by_matrix_id("T1", "@alice:hs") is None
        assert await datastore.get_puppets_by_matrix_id("@alice:hs") == []
        assert await datastore.get_puppeted_users() == []
        assert await datastore.get_puppet_matrix_user_by_slack_id("T1", "U1") is None

    @pytest.mark.asyncio
    async def test_written_puppet_is_not_stored(self, datastore) -> None:
        await datastore.set_puppet_token("T1", "U1", "@alice:hs", "xoxp-1")

        assert await datastore.get_puppet_token_by_slack_id("T1", "U1") is None

    @pytest.mark.asyncio
    async def test_emoji(self, datastore) -> None:
        assert await datastore.upsert_emoji("T1", "party", "mxc://hs/party") is None
        assert await datastore.get_emoji_mxc("T1", "party") is None
        assert await datastore.delete_emoji("T1", "party") is None

    @pytest.mark.asyncio
    async def test_activity_metrics(self, datastore) -> None:
        user = UserEntry(id="@g:hs", team_id="T1")
        room = RoomEntry(id="INTEG-1", matrix_id="!r:hs")
        team = TeamEntry(id="T1")

        assert await datastore.upsert_activity_metrics(user, team) is None
        assert await datastore.upsert_activity_metrics(room, team, datetime(2024, 1, 1)) is None
        assert await datastore.get_active_rooms_per_team() == {}
        assert await datastore.get_active_users_per_team(7, 90) == {}

    @pytest.mark.asyncio
    async def test_degraded_calls_are_counted(self, datastore) -> None:
        before = degraded_count("get_emoji_mxc", "silent")

        await datastore.get_emoji_mxc("T1", "party")

        assert degraded_count("get_emoji_mxc", "silent") == before + 1


class TestUnsupportedOperations:
    """Admin-room calls fail loudly."""

    @pytest.mark.asyncio
    async def test_get_user_admin_room(self, datastore) -> None:
        with pytest.raises(UnsupportedOperationError) as exc_info:
            await datastore.get_user_admin_room("@alice:hs")

        assert exc_info.value.operation == "get_user_admin_room"
        assert exc_info.value.backend == "embedded"
        assert str(exc_info.value) == "get_user_admin_room is not supported on embedded"

    @pytest.mark.asyncio
    async def test_get_user_for_admin_room(self, datastore) -> None:
        with pytest.raises(UnsupportedOperationError):
            await datastore.get_user_for_admin_room("!admin:hs")

    @pytest.mark.asyncio
    async def test_set_user_admin_room(self, datastore) -> None:
        with pytest.raises(NotImplementedError):
            await datastore.set_user_admin_room("@alice:hs", "!admin:hs")

    @pytest.mark.asyncio
    async def test_unsupported_calls_are_counted(self, datastore) -> None:
        before = degraded_count("set_user_admin_room", "unsupported")

        with pytest.raises(UnsupportedOperationError):
            await datastore.set_user_admin_room("@alice:hs", "!admin:hs")

        assert degraded_count("set_user_admin_room", "unsupported") == before + 1
