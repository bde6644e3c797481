"""Fixtures for datastore tests."""

from dataclasses import dataclass

import pytest

from slackbridge.config.models.storage import StorageConfig
from slackbridge.datastore.models import RoomEntry, RoomEntryRemote, UserEntry
from slackbridge.datastore.stores import EmbeddedDatastore, create_datastore


@dataclass
class FakeGhost:
    """Minimal stand-in for a Slack ghost."""

    user_id: str
    slack_id: str
    team_id: str
    display_name: str | None = None

    def to_entry(self) -> UserEntry:
        return UserEntry(
            id=self.user_id,
            slack_id=self.slack_id,
            team_id=self.team_id,
            display_name=self.display_name,
        )


@dataclass
class FakeBridgedRoom:
    """Minimal stand-in for a bridged room."""

    inbound_id: str
    matrix_room_id: str
    slack_channel_id: str
    slack_team_id: str | None = None

    def to_entry(self) -> RoomEntry:
        return RoomEntry(
            id=self.inbound_id,
            matrix_id=self.matrix_room_id,
            remote_id=self.slack_channel_id,
            remote=RoomEntryRemote(
                id=self.slack_channel_id,
                slack_team_id=self.slack_team_id,
            ),
        )


@pytest.fixture
def datastore() -> EmbeddedDatastore:
    """In-memory datastore without a reaction collection."""
    return create_datastore(StorageConfig())


@pytest.fixture
def reaction_datastore() -> EmbeddedDatastore:
    """In-memory datastore with a reaction collection."""
    return create_datastore(StorageConfig(reactions=True))


@pytest.fixture
def ghost_factory() -> type[FakeGhost]:
    return FakeGhost


@pytest.fixture
def room_factory() -> type[FakeBridgedRoom]:
    return FakeBridgedRoom
