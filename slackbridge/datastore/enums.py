"""Enums for the datastore domain."""

from enum import Enum


class UserType(str, Enum):
    """Which side of the bridge a stored user belongs to.

    Matrix users are real accounts on the homeserver. Remote users are
    ghosts puppeting a Slack identity.
    """

    MATRIX = "matrix"
    REMOTE = "remote"


class RoomType(str, Enum):
    """Slack conversation kind of a bridged room."""

    CHANNEL = "channel"
    GROUP = "group"
    IM = "im"
    MPIM = "mpim"
    USER = "user"
