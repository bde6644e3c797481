"""Entity codecs.

Pure mapping between datastore models and the flat documents kept in
document collections. Nothing here touches a collection. Every decoder
drops the collection's internal ``_id`` so it never reaches callers.
"""

from typing import Any

from slackbridge.datastore.collection import INTERNAL_ID, Document
from slackbridge.datastore.enums import UserType
from slackbridge.datastore.models import (
    EventEntry,
    MatrixUser,
    ReactionEntry,
    RoomEntry,
    TeamEntry,
    UserEntry,
)


def strip_internal(document: Document) -> Document:
    """Return the document without store-assigned fields."""
    return {key: value for key, value in document.items() if key != INTERNAL_ID}


# Users


def user_to_document(entry: UserEntry) -> Document:
    return entry.model_dump(mode="json")


def document_to_user(document: Document) -> UserEntry:
    """Decode a user document of either kind.

    The stored ``type`` only sets the kind. A Matrix user document that
    holds nothing but an account aggregate decodes with its entry fields
    unset.
    """
    return UserEntry(
        id=document["id"],
        slack_id=document.get("slack_id"),
        team_id=document.get("team_id"),
        display_name=document.get("display_name"),
        avatar_url=document.get("avatar_url"),
        type=UserType(document.get("type", UserType.REMOTE.value)),
    )


def matrix_user_query(user_id: str) -> Document:
    return {"type": UserType.MATRIX.value, "id": user_id}


def matrix_user_to_document(user: MatrixUser) -> Document:
    return {
        "type": UserType.MATRIX.value,
        "id": user.user_id,
        "data": dict(user.data),
    }


def document_to_matrix_user(document: Document) -> MatrixUser:
    return MatrixUser(user_id=document["id"], data=dict(document.get("data") or {}))


# Rooms


def room_to_document(entry: RoomEntry) -> Document:
    # Unset references are omitted so "$exists" filters see them as absent.
    return entry.model_dump(mode="json", exclude_none=True)


def document_to_room(document: Document) -> RoomEntry:
    return RoomEntry.model_validate(strip_internal(document))


# Events


def event_document_id(event_id: str, slack_ts: str) -> str:
    """Key an event link on both sides.

    Slack timestamps never contain ``_``, so splitting on the last ``_``
    recovers the pair and distinct links never share a key.
    """
    return f"{event_id}_{slack_ts}"


def event_to_document(entry: EventEntry) -> Document:
    return {
        "id": event_document_id(entry.event_id, entry.slack_ts),
        "matrix": {"roomId": entry.room_id, "eventId": entry.event_id},
        "remote": {"roomId": entry.slack_channel_id, "eventId": entry.slack_ts},
        "extras": dict(entry.extras),
    }


def event_matrix_query(room_id: str, event_id: str) -> Document:
    return {"matrix.roomId": room_id, "matrix.eventId": event_id}


def event_remote_query(channel_id: str, ts: str) -> Document:
    return {"remote.roomId": channel_id, "remote.eventId": ts}


def document_to_event(document: Document) -> EventEntry:
    return EventEntry(
        room_id=document["matrix"]["roomId"],
        event_id=document["matrix"]["eventId"],
        slack_channel_id=document["remote"]["roomId"],
        slack_ts=document["remote"]["eventId"],
        extras=dict(document.get("extras") or {}),
    )


# Reactions


def reaction_to_document(entry: ReactionEntry) -> Document:
    return entry.model_dump(mode="json")


def reaction_matrix_query(room_id: str, event_id: str) -> Document:
    return {"room_id": room_id, "event_id": event_id}


def reaction_slack_query(
    slack_channel_id: str,
    slack_message_ts: str,
    slack_user_id: str,
    reaction: str,
) -> Document:
    return {
        "slack_channel_id": slack_channel_id,
        "slack_message_ts": slack_message_ts,
        "slack_user_id": slack_user_id,
        "reaction": reaction,
    }


def document_to_reaction(document: Document) -> ReactionEntry:
    return ReactionEntry.model_validate(strip_internal(document))


# Teams


def team_to_document(entry: TeamEntry) -> Document:
    return entry.model_dump(mode="json")


def document_to_team(document: Document) -> TeamEntry:
    return TeamEntry.model_validate(strip_internal(document))


def accounts_from_data(data: dict[str, Any]) -> dict[str, dict[str, str]]:
    """Copy the ``accounts`` mapping out of a Matrix user's attributes."""
    return {
        slack_id: dict(account)
        for slack_id, account in (data.get("accounts") or {}).items()
    }
