"""Datastore backends."""

from slackbridge.config.models.storage import StorageConfig
from slackbridge.datastore.bridge_stores import (
    EventBridgeStore,
    RoomBridgeStore,
    UserBridgeStore,
)
from slackbridge.datastore.collection import DocumentCollection
from slackbridge.datastore.store import Datastore
from slackbridge.datastore.stores.embedded import EmbeddedDatastore
from slackbridge.observability.logging import get_logger

logger = get_logger(__name__)

# Collection name -> datafile name inside the storage directory
DATAFILES = {
    "users": "user-store.db",
    "rooms": "room-store.db",
    "events": "event-store.db",
    "teams": "teams.db",
    "reactions": "reaction-store.db",
}


def create_datastore(config: StorageConfig) -> EmbeddedDatastore:
    """Build an embedded datastore from storage configuration.

    Collections are persisted under ``config.path`` when it is set and
    kept in memory otherwise. A reaction collection is only created when
    ``config.reactions`` is enabled.
    """

    def collection(name: str) -> DocumentCollection:
        path = config.path / DATAFILES[name] if config.path is not None else None
        return DocumentCollection(name, path, compact_on_load=config.compact_on_load)

    datastore = EmbeddedDatastore(
        user_store=UserBridgeStore(collection("users")),
        room_store=RoomBridgeStore(collection("rooms")),
        event_store=EventBridgeStore(collection("events")),
        team_store=collection("teams"),
        reaction_store=collection("reactions") if config.reactions else None,
    )
    logger.info(
        "datastore_created",
        backend=config.backend,
        path=str(config.path) if config.path is not None else None,
        reactions=config.reactions,
    )
    return datastore


__all__ = [
    "DATAFILES",
    "Datastore",
    "EmbeddedDatastore",
    "create_datastore",
]
