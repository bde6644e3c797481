"""Sub-stores over document collections.

Each sub-store wraps one collection and knows the document shape of its
entity kind. They speak documents, not models; the datastore façade runs
results through the entity codecs.
"""

from slackbridge.datastore import codecs
from slackbridge.datastore.collection import Document, DocumentCollection, Query
from slackbridge.datastore.models import MatrixUser


class BridgeStore:
    """Generic select/upsert/delete access to one collection."""

    def __init__(self, collection: DocumentCollection) -> None:
        self.collection = collection

    async def select(self, query: Query | None = None) -> list[Document]:
        return await self.collection.find(query)

    async def select_one(self, query: Query) -> Document | None:
        return await self.collection.find_one(query)

    async def upsert(self, query: Query, document: Document) -> None:
        await self.collection.upsert(query, document)

    async def delete(self, query: Query) -> int:
        return await self.collection.remove(query)


class UserBridgeStore(BridgeStore):
    """Ghost users and Matrix user aggregates share one collection.

    Ghost documents are keyed by ``id``; Matrix aggregates by
    ``{"type": "matrix", "id": ...}``. A Matrix user stored as an entry
    and carrying linked accounts is one document: entry fields at the top
    level, aggregate attributes under ``data``. Each write keeps the
    other half.
    """

    async def upsert_entry(self, document: Document) -> None:
        existing = await self.select_one({"id": document["id"]})
        if existing is not None and "data" in existing:
            document = {**document, "data": existing["data"]}
        await self.upsert({"id": document["id"]}, document)

    async def get_matrix_user(self, user_id: str) -> MatrixUser | None:
        document = await self.select_one(codecs.matrix_user_query(user_id))
        if document is None:
            return None
        return codecs.document_to_matrix_user(document)

    async def set_matrix_user(self, user: MatrixUser) -> None:
        query = codecs.matrix_user_query(user.user_id)
        document = codecs.matrix_user_to_document(user)
        existing = await self.select_one(query)
        if existing is not None:
            document = {**codecs.strip_internal(existing), **document}
        await self.upsert(query, document)


class RoomBridgeStore(BridgeStore):
    """Room link documents keyed by ``id``."""


class EventBridgeStore(BridgeStore):
    """Event link documents, reachable from the Matrix or the Slack side."""

    async def upsert_event(self, document: Document) -> None:
        await self.upsert({"id": document["id"]}, document)

    async def get_entry_by_matrix_id(self, room_id: str, event_id: str) -> Document | None:
        return await self.select_one(codecs.event_matrix_query(room_id, event_id))

    async def get_entry_by_remote_id(self, channel_id: str, ts: str) -> Document | None:
        return await self.select_one(codecs.event_remote_query(channel_id, ts))

    async def delete_by_matrix_id(self, room_id: str, event_id: str) -> int:
        return await self.delete(codecs.event_matrix_query(room_id, event_id))
