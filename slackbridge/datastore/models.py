"""Datastore domain models.

Runtime representations of everything the bridge persists: users and
their linked Slack accounts, bridged rooms, event and reaction links,
teams and puppets.
"""

import re
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, model_validator

from slackbridge.datastore.enums import UserType

# Linked rooms carry ids of this form; older bare links do not.
LINKED_ROOM_PATTERN = re.compile(r"^INTEG-(.*)$")


def is_linked_room_id(room_id: str) -> bool:
    """Return True if the id follows the INTEG-<token> convention."""
    return LINKED_ROOM_PATTERN.match(room_id) is not None


class UserEntry(BaseModel):
    """A stored user, either a real Matrix user or a Slack ghost."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: str = Field(..., description="Bridge-internal user id, unique across kinds")
    slack_id: str | None = Field(default=None, description="Slack user id")
    team_id: str | None = Field(default=None, description="Slack team id")
    display_name: str | None = Field(default=None, description="Display name")
    avatar_url: str | None = Field(default=None, description="Avatar URL")
    type: UserType = Field(default=UserType.REMOTE, description="User kind")


class MatrixUser(BaseModel):
    """Identity account aggregate for one Matrix user.

    ``data`` is an open attribute bag. Its ``accounts`` key maps a Slack
    user id to ``{"access_token": ..., "team_id": ...}``, so one Matrix
    user may be linked to accounts in several workspaces.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    user_id: str = Field(..., description="Matrix user id")
    data: dict[str, Any] = Field(default_factory=dict, description="Attributes")

    def get(self, key: str) -> Any:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    @property
    def accounts(self) -> dict[str, dict[str, str]]:
        return dict(self.data.get("accounts") or {})


class SlackAccount(BaseModel):
    """One Slack account linked to a Matrix user."""

    matrix_id: str
    slack_id: str
    team_id: str
    access_token: str


class RoomEntryRemote(BaseModel):
    """Slack-side metadata of a bridged room."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    name: str | None = None
    slack_team_id: str | None = None
    slack_type: str | None = None
    slack_private: bool | None = None
    webhook_uri: str | None = None
    slack_bot_token: str | None = None
    slack_user_token: str | None = None
    puppet_owner: str | None = None


class RoomEntry(BaseModel):
    """A stored room link."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    id: str = Field(..., description="Link id, INTEG-<token> for linked rooms")
    matrix_id: str | None = Field(default=None, description="Matrix room id")
    remote_id: str | None = Field(default=None, description="Slack channel id")
    remote: RoomEntryRemote = Field(
        default_factory=RoomEntryRemote, description="Slack-side metadata"
    )


class EventEntry(BaseModel):
    """Link between a Matrix event and a Slack message."""

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    room_id: str = Field(..., description="Matrix room id")
    event_id: str = Field(..., description="Matrix event id")
    slack_channel_id: str = Field(..., description="Slack channel id")
    slack_ts: str = Field(..., description="Slack message timestamp")
    extras: dict[str, Any] = Field(
        default_factory=dict,
        description="Protocol-specific metadata (thread messages, attachment ids)",
    )


class ReactionEntry(BaseModel):
    """Link between a Matrix reaction event and one Slack reaction."""

    room_id: str
    event_id: str
    slack_channel_id: str
    slack_message_ts: str
    slack_user_id: str
    reaction: str


def _is_team_value(value: Any) -> bool:
    if value is None or isinstance(value, str | int | float | bool):
        return True
    if isinstance(value, list):
        return all(_is_team_value(item) for item in value)
    if isinstance(value, dict):
        return all(
            isinstance(key, str) and _is_team_value(item) for key, item in value.items()
        )
    return False


class TeamEntry(BaseModel):
    """Per-workspace record.

    Only ``id`` is fixed. Callers may attach any further fields as long
    as every value is a scalar (str, int, float, bool, None), or a list
    or string-keyed dict of such values, nested to any depth.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Slack team id")

    @model_validator(mode="after")
    def validate_extra_values(self) -> "TeamEntry":
        for key, value in (self.model_extra or {}).items():
            if not _is_team_value(value):
                raise ValueError(f"Unsupported value for team field {key!r}")
        return self

    def get(self, key: str, default: Any = None) -> Any:
        return (self.model_extra or {}).get(key, default)


class PuppetEntry(BaseModel):
    """A puppeted Slack identity controlled by a Matrix user."""

    matrix_id: str
    team_id: str
    slack_id: str
    token: str


class SupportsUserEntry(Protocol):
    """Anything that can describe itself as a stored user (e.g. a ghost)."""

    def to_entry(self) -> UserEntry: ...


class SupportsRoomEntry(Protocol):
    """Anything that can describe itself as a stored room (e.g. a bridged room)."""

    def to_entry(self) -> RoomEntry: ...
