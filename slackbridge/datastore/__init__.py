"""Bridge datastore: models, codecs, collections and backends.

Usage:
    from slackbridge.config import get_settings
    from slackbridge.datastore import create_datastore

    datastore = create_datastore(get_settings().storage)
    await datastore.load()
    await datastore.upsert_room(room)
"""

from slackbridge.datastore.enums import RoomType, UserType
from slackbridge.datastore.errors import (
    DatastoreError,
    InvalidArgumentError,
    UnsupportedOperationError,
)
from slackbridge.datastore.models import (
    LINKED_ROOM_PATTERN,
    EventEntry,
    MatrixUser,
    PuppetEntry,
    ReactionEntry,
    RoomEntry,
    RoomEntryRemote,
    SlackAccount,
    TeamEntry,
    UserEntry,
)
from slackbridge.datastore.store import Datastore
from slackbridge.datastore.stores import EmbeddedDatastore, create_datastore

__all__ = [
    # Interface and backends
    "Datastore",
    "EmbeddedDatastore",
    "create_datastore",
    # Models
    "EventEntry",
    "LINKED_ROOM_PATTERN",
    "MatrixUser",
    "PuppetEntry",
    "ReactionEntry",
    "RoomEntry",
    "RoomEntryRemote",
    "SlackAccount",
    "TeamEntry",
    "UserEntry",
    # Enums
    "RoomType",
    "UserType",
    # Errors
    "DatastoreError",
    "InvalidArgumentError",
    "UnsupportedOperationError",
]
