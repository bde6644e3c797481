"""Datastore abstract interface."""

from abc import ABC, abstractmethod
from datetime import datetime

from slackbridge.datastore.enums import RoomType
from slackbridge.datastore.models import (
    EventEntry,
    PuppetEntry,
    ReactionEntry,
    RoomEntry,
    SlackAccount,
    SupportsRoomEntry,
    SupportsUserEntry,
    TeamEntry,
    UserEntry,
)


class Datastore(ABC):
    """Abstract interface for bridge persistence.

    Covers users and their linked Slack accounts, room links, event and
    reaction links, teams, puppets, admin rooms, custom emoji and
    activity metrics. Backends that cannot serve part of this interface
    still implement every method; see the backend's own documentation
    for which calls degrade to empty results and which raise
    UnsupportedOperationError.

    Lookups return None (or an empty list) for missing records.
    """

    # Users

    @abstractmethod
    async def upsert_user(self, user: UserEntry | SupportsUserEntry) -> None:
        """Create or replace a user by id."""
        pass

    @abstractmethod
    async def get_user(self, user_id: str) -> UserEntry | None:
        """Get a user by id."""
        pass

    @abstractmethod
    async def get_all_users(self, matrix_only: bool) -> list[UserEntry]:
        """List Matrix users, or remote users when matrix_only is False."""
        pass

    @abstractmethod
    async def get_all_users_for_team(self, team_id: str) -> list[UserEntry]:
        """List remote users belonging to a team."""
        pass

    # Linked Slack accounts

    @abstractmethod
    async def insert_account(
        self,
        user_id: str,
        slack_id: str,
        team_id: str,
        access_token: str,
    ) -> None:
        """Link a Slack account to a Matrix user."""
        pass

    @abstractmethod
    async def get_accounts_for_matrix_user(self, user_id: str) -> list[SlackAccount]:
        """List Slack accounts linked to a Matrix user."""
        pass

    @abstractmethod
    async def get_accounts_for_team(self, team_id: str) -> list[SlackAccount]:
        """List Slack accounts linked in a team."""
        pass

    @abstractmethod
    async def delete_account(self, user_id: str, slack_id: str) -> None:
        """Unlink a Slack account from a Matrix user."""
        pass

    # Rooms

    @abstractmethod
    async def upsert_room(self, room: RoomEntry | SupportsRoomEntry) -> None:
        """Create or replace a room link by id."""
        pass

    @abstractmethod
    async def delete_room(self, room_id: str) -> None:
        """Delete a room link."""
        pass

    @abstractmethod
    async def get_all_rooms(self) -> list[RoomEntry]:
        """List linked rooms."""
        pass

    @abstractmethod
    async def get_room_count(self) -> int:
        """Count linked rooms."""
        pass

    # Events

    @abstractmethod
    async def upsert_event(self, entry: EventEntry) -> None:
        """Create or replace an event link."""
        pass

    @abstractmethod
    async def upsert_event_fields(
        self,
        room_id: str,
        event_id: str,
        channel_id: str,
        ts: str,
        extras: dict | None = None,
    ) -> None:
        """Create or replace an event link from its parts."""
        pass

    @abstractmethod
    async def get_event_by_matrix_id(self, room_id: str, event_id: str) -> EventEntry | None:
        """Get an event link by its Matrix side."""
        pass

    @abstractmethod
    async def get_event_by_slack_id(self, channel_id: str, ts: str) -> EventEntry | None:
        """Get an event link by its Slack side."""
        pass

    @abstractmethod
    async def delete_event_by_matrix_id(self, room_id: str, event_id: str) -> None:
        """Delete an event link by its Matrix side."""
        pass

    @abstractmethod
    async def get_all_events(self) -> list[EventEntry]:
        """List all event links."""
        pass

    # Reactions

    @abstractmethod
    async def upsert_reaction(self, entry: ReactionEntry) -> None:
        """Create or replace a reaction link."""
        pass

    @abstractmethod
    async def get_reaction_by_matrix_id(
        self, room_id: str, event_id: str
    ) -> ReactionEntry | None:
        """Get a reaction link by its Matrix side."""
        pass

    @abstractmethod
    async def get_reaction_by_slack_id(
        self,
        slack_channel_id: str,
        slack_message_ts: str,
        slack_user_id: str,
        reaction: str,
    ) -> ReactionEntry | None:
        """Get a reaction link by its Slack side."""
        pass

    @abstractmethod
    async def delete_reaction_by_matrix_id(self, room_id: str, event_id: str) -> None:
        """Delete a reaction link by its Matrix side."""
        pass

    @abstractmethod
    async def delete_reaction_by_slack_id(
        self,
        slack_channel_id: str,
        slack_message_ts: str,
        slack_user_id: str,
        reaction: str,
    ) -> None:
        """Delete a reaction link by its Slack side."""
        pass

    @abstractmethod
    async def get_all_reactions(self) -> list[ReactionEntry]:
        """List all reaction links."""
        pass

    # Teams

    @abstractmethod
    async def upsert_team(self, entry: TeamEntry) -> None:
        """Create or replace a team by id."""
        pass

    @abstractmethod
    async def get_team(self, team_id: str) -> TeamEntry | None:
        """Get a team by id."""
        pass

    @abstractmethod
    async def get_all_teams(self) -> list[TeamEntry]:
        """List all teams."""
        pass

    @abstractmethod
    async def delete_team(self, team_id: str) -> None:
        """Delete a team."""
        pass

    # Custom emoji

    @abstractmethod
    async def upsert_emoji(self, team_id: str, name: str, mxc: str) -> None:
        """Store the mxc URI of a team's custom emoji."""
        pass

    @abstractmethod
    async def get_emoji_mxc(self, team_id: str, name: str) -> str | None:
        """Get the mxc URI of a team's custom emoji."""
        pass

    @abstractmethod
    async def delete_emoji(self, team_id: str, name: str) -> None:
        """Forget a team's custom emoji."""
        pass

    # Puppets

    @abstractmethod
    async def set_puppet_token(
        self,
        team_id: str,
        slack_user: str,
        matrix_user: str,
        token: str,
    ) -> None:
        """Store the token used to puppet a Slack user."""
        pass

    @abstractmethod
    async def remove_puppet_token_by_matrix_id(self, team_id: str, matrix_id: str) -> None:
        """Forget a Matrix user's puppet token in a team."""
        pass

    @abstractmethod
    async def get_puppet_token_by_slack_id(self, team_id: str, slack_id: str) -> str | None:
        """Get a puppet token by Slack user."""
        pass

    @abstractmethod
    async def get_puppet_token_by_matrix_id(self, team_id: str, matrix_id: str) -> str | None:
        """Get a puppet token by Matrix user."""
        pass

    @abstractmethod
    async def get_puppets_by_matrix_id(self, user_id: str) -> list[PuppetEntry]:
        """List a Matrix user's puppets across teams."""
        pass

    @abstractmethod
    async def get_puppeted_users(self) -> list[PuppetEntry]:
        """List all puppets."""
        pass

    @abstractmethod
    async def get_puppet_matrix_user_by_slack_id(
        self, team_id: str, slack_id: str
    ) -> str | None:
        """Get the Matrix user puppeting a Slack user."""
        pass

    # Admin rooms

    @abstractmethod
    async def get_user_admin_room(self, user_id: str) -> str | None:
        """Get the admin room of a Matrix user."""
        pass

    @abstractmethod
    async def get_user_for_admin_room(self, room_id: str) -> str | None:
        """Get the Matrix user owning an admin room."""
        pass

    @abstractmethod
    async def set_user_admin_room(self, user_id: str, room_id: str) -> None:
        """Record a Matrix user's admin room."""
        pass

    # Activity metrics

    @abstractmethod
    async def upsert_activity_metrics(
        self,
        subject: UserEntry | RoomEntry,
        team: TeamEntry,
        date: datetime | None = None,
    ) -> None:
        """Record that a user or room was active in a team on a date."""
        pass

    @abstractmethod
    async def get_active_rooms_per_team(
        self,
        activity_threshold_days: int = 2,
        history_length_days: int = 30,
    ) -> dict[str, dict[RoomType, int]]:
        """Count active rooms per team, by room type."""
        pass

    @abstractmethod
    async def get_active_users_per_team(
        self,
        activity_threshold_days: int = 2,
        history_length_days: int = 30,
    ) -> dict[str, dict[bool, int]]:
        """Count active users per team, split by remote (True) or Matrix (False)."""
        pass
