"""Embedded document-store implementation of Datastore.

This is the reduced backend. It persists users, linked accounts, rooms,
events and teams, and reactions when it is given a reaction collection.
Everything else degrades:

- Puppets, custom emoji and activity metrics are silently absent.
  Writes succeed without storing anything; reads return None, [] or {}.
- Admin rooms raise UnsupportedOperationError. Admin-room identity
  drives control-plane permission checks, so an empty answer would be
  mistaken for "this user has no admin room".
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from slackbridge.datastore import codecs
from slackbridge.datastore.bridge_stores import (
    EventBridgeStore,
    RoomBridgeStore,
    UserBridgeStore,
)
from slackbridge.datastore.collection import DocumentCollection
from slackbridge.datastore.enums import RoomType, UserType
from slackbridge.datastore.errors import InvalidArgumentError, UnsupportedOperationError
from slackbridge.datastore.models import (
    EventEntry,
    MatrixUser,
    PuppetEntry,
    ReactionEntry,
    RoomEntry,
    SlackAccount,
    SupportsRoomEntry,
    SupportsUserEntry,
    TeamEntry,
    UserEntry,
    is_linked_room_id,
)
from slackbridge.datastore.store import Datastore
from slackbridge.observability.logging import get_logger
from slackbridge.observability.metrics import DATASTORE_DEGRADED

logger = get_logger(__name__)


class EmbeddedDatastore(Datastore):
    """Datastore over embedded document collections.

    Writes to one user document (upsert_user, insert_account,
    delete_account) are serialised with an in-process lock per user id,
    so concurrent calls within one process do not lose updates. Separate
    processes sharing datafiles still race (last write wins).
    """

    backend_name = "embedded"

    def __init__(
        self,
        user_store: UserBridgeStore,
        room_store: RoomBridgeStore,
        event_store: EventBridgeStore,
        team_store: DocumentCollection,
        reaction_store: DocumentCollection | None = None,
    ) -> None:
        self.user_store = user_store
        self.room_store = room_store
        self.event_store = event_store
        self.team_store = team_store
        self.reaction_store = reaction_store
        # user id -> (lock, number of tasks holding or waiting on it)
        self._account_locks: dict[str, tuple[asyncio.Lock, int]] = {}

    @property
    def supports_reactions(self) -> bool:
        return self.reaction_store is not None

    async def load(self) -> None:
        """Load every collection up front instead of on first use."""
        collections = [
            self.user_store.collection,
            self.room_store.collection,
            self.event_store.collection,
            self.team_store,
        ]
        if self.reaction_store is not None:
            collections.append(self.reaction_store)
        for collection in collections:
            await collection.load()

    @asynccontextmanager
    async def _account_lock(self, user_id: str) -> AsyncIterator[None]:
        """Serialise writes to one user's document.

        The lock is dropped once nobody holds or waits on it, so the map
        only holds users with a write in flight.
        """
        lock, users = self._account_locks.get(user_id, (asyncio.Lock(), 0))
        self._account_locks[user_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._account_locks[user_id]
            if users == 1:
                del self._account_locks[user_id]
            else:
                self._account_locks[user_id] = (lock, users - 1)

    def _degraded(self, operation: str) -> None:
        DATASTORE_DEGRADED.labels(operation=operation, policy="silent").inc()
        logger.debug(
            "datastore_operation_degraded",
            operation=operation,
            backend=self.backend_name,
        )

    def _unsupported(self, operation: str) -> UnsupportedOperationError:
        DATASTORE_DEGRADED.labels(operation=operation, policy="unsupported").inc()
        logger.warning(
            "datastore_operation_unsupported",
            operation=operation,
            backend=self.backend_name,
        )
        return UnsupportedOperationError(operation, self.backend_name)

    # Users

    async def upsert_user(self, user: UserEntry | SupportsUserEntry) -> None:
        entry = user if isinstance(user, UserEntry) else user.to_entry()
        async with self._account_lock(entry.id):
            await self.user_store.upsert_entry(codecs.user_to_document(entry))

    async def get_user(self, user_id: str) -> UserEntry | None:
        document = await self.user_store.select_one({"id": user_id})
        if document is None:
            return None
        return codecs.document_to_user(document)

    async def get_all_users(self, matrix_only: bool) -> list[UserEntry]:
        users = [codecs.document_to_user(doc) for doc in await self.user_store.select()]
        if matrix_only:
            return [u for u in users if u.type == UserType.MATRIX]
        return [u for u in users if u.type != UserType.MATRIX]

    async def get_all_users_for_team(self, team_id: str) -> list[UserEntry]:
        users = await self.get_all_users(False)
        return [u for u in users if u.team_id == team_id]

    # Linked Slack accounts

    async def get_matrix_user(self, user_id: str) -> MatrixUser | None:
        return await self.user_store.get_matrix_user(user_id)

    async def store_matrix_user(self, user: MatrixUser) -> None:
        await self.user_store.set_matrix_user(user)

    async def insert_account(
        self,
        user_id: str,
        slack_id: str,
        team_id: str,
        access_token: str,
    ) -> None:
        async with self._account_lock(user_id):
            matrix_user = await self.get_matrix_user(user_id) or MatrixUser(user_id=user_id)
            accounts = codecs.accounts_from_data(matrix_user.data)
            accounts[slack_id] = {
                "access_token": access_token,
                "team_id": team_id,
            }
            matrix_user.set("accounts", accounts)
            await self.store_matrix_user(matrix_user)
        logger.info(
            "datastore_account_inserted",
            user_id=user_id,
            slack_id=slack_id,
            team_id=team_id,
        )

    async def get_accounts_for_matrix_user(self, user_id: str) -> list[SlackAccount]:
        matrix_user = await self.get_matrix_user(user_id)
        if matrix_user is None:
            return []
        return [
            SlackAccount(
                matrix_id=user_id,
                slack_id=slack_id,
                team_id=account["team_id"],
                access_token=account["access_token"],
            )
            for slack_id, account in matrix_user.accounts.items()
        ]

    async def get_accounts_for_team(self, team_id: str) -> list[SlackAccount]:
        # Accounts are nested per Matrix user with no team index, so this
        # backend never answers. Callers rely on the empty list.
        self._degraded("get_accounts_for_team")
        return []

    async def delete_account(self, user_id: str, slack_id: str) -> None:
        async with self._account_lock(user_id):
            matrix_user = await self.get_matrix_user(user_id)
            if matrix_user is None:
                return None
            accounts = codecs.accounts_from_data(matrix_user.data)
            if slack_id not in accounts:
                return None
            del accounts[slack_id]
            # The aggregate stays even when this was its last account.
            matrix_user.set("accounts", accounts)
            await self.store_matrix_user(matrix_user)
        logger.info("datastore_account_deleted", user_id=user_id, slack_id=slack_id)
        return None

    # Rooms

    async def upsert_room(self, room: RoomEntry | SupportsRoomEntry) -> None:
        entry = room if isinstance(room, RoomEntry) else room.to_entry()
        await self.room_store.upsert({"id": entry.id}, codecs.room_to_document(entry))

    async def delete_room(self, room_id: str) -> None:
        await self.room_store.delete({"id": room_id})

    async def get_all_rooms(self) -> list[RoomEntry]:
        documents = await self.room_store.select({"matrix_id": {"$exists": True}})
        # Legacy links also carry a matrix_id; only the id form tells them apart.
        return [
            codecs.document_to_room(doc)
            for doc in documents
            if is_linked_room_id(doc["id"])
        ]

    async def get_room_count(self) -> int:
        return len(await self.get_all_rooms())

    # Events

    async def upsert_event(self, entry: EventEntry) -> None:
        await self.event_store.upsert_event(codecs.event_to_document(entry))

    async def upsert_event_fields(
        self,
        room_id: str,
        event_id: str,
        channel_id: str,
        ts: str,
        extras: dict | None = None,
    ) -> None:
        missing = [
            name
            for name, value in (
                ("room_id", room_id),
                ("event_id", event_id),
                ("channel_id", channel_id),
                ("ts", ts),
            )
            if not value
        ]
        if missing:
            raise InvalidArgumentError(f"Missing parameters: {', '.join(missing)}")
        await self.upsert_event(
            EventEntry(
                room_id=room_id,
                event_id=event_id,
                slack_channel_id=channel_id,
                slack_ts=ts,
                extras=extras or {},
            )
        )

    async def get_event_by_matrix_id(self, room_id: str, event_id: str) -> EventEntry | None:
        document = await self.event_store.get_entry_by_matrix_id(room_id, event_id)
        if document is None:
            return None
        return codecs.document_to_event(document)

    async def get_event_by_slack_id(self, channel_id: str, ts: str) -> EventEntry | None:
        document = await self.event_store.get_entry_by_remote_id(channel_id, ts)
        if document is None:
            return None
        return codecs.document_to_event(document)

    async def delete_event_by_matrix_id(self, room_id: str, event_id: str) -> None:
        await self.event_store.delete_by_matrix_id(room_id, event_id)

    async def get_all_events(self) -> list[EventEntry]:
        return [codecs.document_to_event(doc) for doc in await self.event_store.select()]

    # Reactions

    async def upsert_reaction(self, entry: ReactionEntry) -> None:
        if self.reaction_store is None:
            self._degraded("upsert_reaction")
            return None
        await self.reaction_store.upsert(
            codecs.reaction_matrix_query(entry.room_id, entry.event_id),
            codecs.reaction_to_document(entry),
        )

    async def get_reaction_by_matrix_id(
        self, room_id: str, event_id: str
    ) -> ReactionEntry | None:
        if self.reaction_store is None:
            self._degraded("get_reaction_by_matrix_id")
            return None
        document = await self.reaction_store.find_one(
            codecs.reaction_matrix_query(room_id, event_id)
        )
        return codecs.document_to_reaction(document) if document else None

    async def get_reaction_by_slack_id(
        self,
        slack_channel_id: str,
        slack_message_ts: str,
        slack_user_id: str,
        reaction: str,
    ) -> ReactionEntry | None:
        if self.reaction_store is None:
            self._degraded("get_reaction_by_slack_id")
            return None
        document = await self.reaction_store.find_one(
            codecs.reaction_slack_query(
                slack_channel_id, slack_message_ts, slack_user_id, reaction
            )
        )
        return codecs.document_to_reaction(document) if document else None

    async def delete_reaction_by_matrix_id(self, room_id: str, event_id: str) -> None:
        if self.reaction_store is None:
            self._degraded("delete_reaction_by_matrix_id")
            return None
        await self.reaction_store.remove(codecs.reaction_matrix_query(room_id, event_id))

    async def delete_reaction_by_slack_id(
        self,
        slack_channel_id: str,
        slack_message_ts: str,
        slack_user_id: str,
        reaction: str,
    ) -> None:
        if self.reaction_store is None:
            self._degraded("delete_reaction_by_slack_id")
            return None
        await self.reaction_store.remove(
            codecs.reaction_slack_query(
                slack_channel_id, slack_message_ts, slack_user_id, reaction
            )
        )

    async def get_all_reactions(self) -> list[ReactionEntry]:
        if self.reaction_store is None:
            self._degraded("get_all_reactions")
            return []
        return [codecs.document_to_reaction(doc) for doc in await self.reaction_store.find()]

    # Teams

    async def upsert_team(self, entry: TeamEntry) -> None:
        await self.team_store.upsert({"id": entry.id}, codecs.team_to_document(entry))

    async def get_team(self, team_id: str) -> TeamEntry | None:
        document = await self.team_store.find_one({"id": team_id})
        if document is None:
            return None
        return codecs.document_to_team(document)

    async def get_all_teams(self) -> list[TeamEntry]:
        return [codecs.document_to_team(doc) for doc in await self.team_store.find()]

    async def delete_team(self, team_id: str) -> None:
        await self.team_store.remove({"id": team_id})

    # Custom emoji

    async def upsert_emoji(self, team_id: str, name: str, mxc: str) -> None:
        self._degraded("upsert_emoji")
        return None

    async def get_emoji_mxc(self, team_id: str, name: str) -> str | None:
        self._degraded("get_emoji_mxc")
        return None

    async def delete_emoji(self, team_id: str, name: str) -> None:
        self._degraded("delete_emoji")
        return None

    # Puppets

    async def set_puppet_token(
        self,
        team_id: str,
        slack_user: str,
        matrix_user: str,
        token: str,
    ) -> None:
        self._degraded("set_puppet_token")
        return None

    async def remove_puppet_token_by_matrix_id(self, team_id: str, matrix_id: str) -> None:
        self._degraded("remove_puppet_token_by_matrix_id")
        return None

    async def get_puppet_token_by_slack_id(self, team_id: str, slack_id: str) -> str | None:
        self._degraded("get_puppet_token_by_slack_id")
        return None

    async def get_puppet_token_by_matrix_id(self, team_id: str, matrix_id: str) -> str | None:
        self._degraded("get_puppet_token_by_matrix_id")
        return None

    async def get_puppets_by_matrix_id(self, user_id: str) -> list[PuppetEntry]:
        self._degraded("get_puppets_by_matrix_id")
        return []

    async def get_puppeted_users(self) -> list[PuppetEntry]:
        self._degraded("get_puppeted_users")
        return []

    async def get_puppet_matrix_user_by_slack_id(
        self, team_id: str, slack_id: str
    ) -> str | None:
        self._degraded("get_puppet_matrix_user_by_slack_id")
        return None

    # Admin rooms

    async def get_user_admin_room(self, user_id: str) -> str | None:
        raise self._unsupported("get_user_admin_room")

    async def get_user_for_admin_room(self, room_id: str) -> str | None:
        raise self._unsupported("get_user_for_admin_room")

    async def set_user_admin_room(self, user_id: str, room_id: str) -> None:
        raise self._unsupported("set_user_admin_room")

    # Activity metrics

    async def upsert_activity_metrics(
        self,
        subject: UserEntry | RoomEntry,
        team: TeamEntry,
        date: datetime | None = None,
    ) -> None:
        self._degraded("upsert_activity_metrics")
        return None

    async def get_active_rooms_per_team(
        self,
        activity_threshold_days: int = 2,
        history_length_days: int = 30,
    ) -> dict[str, dict[RoomType, int]]:
        self._degraded("get_active_rooms_per_team")
        return {}

    async def get_active_users_per_team(
        self,
        activity_threshold_days: int = 2,
        history_length_days: int = 30,
    ) -> dict[str, dict[bool, int]]:
        self._degraded("get_active_users_per_team")
        return {}
