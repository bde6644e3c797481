"""Storage backend configuration models."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["embedded"]


class StorageConfig(BaseModel):
    """Configuration for the datastore backend.

    The embedded backend keeps one document collection per entity kind.
    When ``path`` is set each collection is persisted to a JSONL datafile
    inside that directory; otherwise everything lives in memory.
    """

    backend: BackendType = Field(
        default="embedded",
        description="Backend type",
    )
    path: Path | None = Field(
        default=None,
        description="Directory holding the collection datafiles (None = memory only)",
    )
    reactions: bool = Field(
        default=False,
        description="Ship a reaction collection (newer backend generation)",
    )
    compact_on_load: bool = Field(
        default=True,
        description="Rewrite datafiles with only live documents after replay",
    )


class BridgeAPIConfig(BaseModel):
    """Bridge provisioning API client configuration."""

    base_url: str = Field(
        default="http://localhost:9899",
        description="Base URL of the bridge API",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout in seconds",
    )
