"""Embedded key/filter document collection.

A small schemaless document store. Documents live in memory and, when a
path is given, every mutation is appended to a JSONL datafile:

- an upsert writes the full document
- a removal writes ``{"_id": ..., "$$deleted": true}``

Opening the collection replays the datafile (the last line for an
``_id`` wins) and, by default, compacts it so only live documents remain.

Queries are plain mappings. Each key may be dotted (``"matrix.roomId"``)
and each condition is either a value compared for equality or
``{"$exists": bool}``.
"""

import asyncio
import copy
import json
import tempfile
import uuid
from pathlib import Path
from typing import Any

import aiofiles

from slackbridge.observability.logging import get_logger
from slackbridge.observability.metrics import COLLECTION_DOCUMENTS, DATASTORE_OPERATIONS

logger = get_logger(__name__)

INTERNAL_ID = "_id"
DELETED_MARKER = "$$deleted"

Document = dict[str, Any]
Query = dict[str, Any]


def _lookup(document: Document, key: str) -> tuple[bool, Any]:
    current: Any = document
    for part in key.split("."):
        if not isinstance(current, dict) or part not in current:
            return False, None
        current = current[part]
    return True, current


def matches(document: Document, query: Query) -> bool:
    """Return True if the document satisfies every condition in the query."""
    for key, condition in query.items():
        present, value = _lookup(document, key)
        if isinstance(condition, dict) and "$exists" in condition:
            if present != bool(condition["$exists"]):
                return False
            continue
        if not present or value != condition:
            return False
    return True


def _dumps(document: Document) -> str:
    return json.dumps(document, ensure_ascii=False, separators=(",", ":"))


class DocumentCollection:
    """One named collection of documents.

    Without a path the collection is memory only and starts empty. With
    a path it loads lazily on first use; call ``load()`` to fail fast at
    startup instead.

    Returned documents are copies and include the internal ``_id``;
    callers higher up strip it.
    """

    def __init__(
        self,
        name: str,
        path: Path | None = None,
        *,
        compact_on_load: bool = True,
    ) -> None:
        self.name = name
        self.path = path
        self.compact_on_load = compact_on_load
        self.last_error_count: int = 0
        self._documents: dict[str, Document] = {}
        self._loaded = path is None
        self._lock = asyncio.Lock()

    @property
    def persistent(self) -> bool:
        return self.path is not None

    async def load(self) -> None:
        """Replay the datafile into memory. No-op once loaded."""
        if self._loaded:
            return
        async with self._lock:
            if self._loaded:
                return
            await self._replay()
            if self.compact_on_load:
                await self._rewrite()
            self._loaded = True
            self._update_gauge()

    async def find(self, query: Query | None = None) -> list[Document]:
        """Return copies of all documents matching the query."""
        await self.load()
        self._count("find")
        query = query or {}
        return [
            copy.deepcopy(document)
            for document in self._documents.values()
            if matches(document, query)
        ]

    async def find_one(self, query: Query) -> Document | None:
        """Return a copy of the first matching document, or None."""
        await self.load()
        self._count("find")
        for document in self._documents.values():
            if matches(document, query):
                return copy.deepcopy(document)
        return None

    async def count(self, query: Query | None = None) -> int:
        await self.load()
        query = query or {}
        return sum(1 for document in self._documents.values() if matches(document, query))

    async def upsert(self, query: Query, document: Document) -> Document:
        """Replace the first document matching the query, or insert.

        The stored document is exactly ``document`` plus its ``_id``;
        fields of the previous version are not merged in.
        """
        await self.load()
        async with self._lock:
            existing = next(
                (doc for doc in self._documents.values() if matches(doc, query)),
                None,
            )
            stored = {k: v for k, v in copy.deepcopy(document).items() if k != INTERNAL_ID}
            stored[INTERNAL_ID] = (
                existing[INTERNAL_ID] if existing is not None else uuid.uuid4().hex
            )
            await self._append([stored])
            self._documents[stored[INTERNAL_ID]] = stored
            self._count("upsert")
            self._update_gauge()
            return copy.deepcopy(stored)

    async def remove(self, query: Query) -> int:
        """Remove every matching document, returning how many were removed."""
        await self.load()
        async with self._lock:
            doomed = [
                doc_id
                for doc_id, document in self._documents.items()
                if matches(document, query)
            ]
            if not doomed:
                return 0
            await self._append(
                [{INTERNAL_ID: doc_id, DELETED_MARKER: True} for doc_id in doomed]
            )
            for doc_id in doomed:
                del self._documents[doc_id]
            self._count("remove")
            self._update_gauge()
            return len(doomed)

    async def compact(self) -> None:
        """Atomically rewrite the datafile with only live documents."""
        await self.load()
        async with self._lock:
            await self._rewrite()

    async def _replay(self) -> None:
        assert self.path is not None
        # Created once here; appends and rewrites assume it exists.
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._documents = {}
        self.last_error_count = 0
        if not self.path.exists():
            return

        error_count = 0
        async with aiofiles.open(self.path, encoding="utf-8") as f:
            async for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    document = json.loads(line)
                    doc_id = document[INTERNAL_ID]
                except (json.JSONDecodeError, KeyError, TypeError) as e:
                    error_count += 1
                    logger.warning(
                        "collection_malformed_line",
                        collection=self.name,
                        error=str(e),
                    )
                    continue
                if document.get(DELETED_MARKER):
                    self._documents.pop(doc_id, None)
                else:
                    self._documents[doc_id] = document

        self.last_error_count = error_count
        logger.debug(
            "collection_loaded",
            collection=self.name,
            documents=len(self._documents),
            skipped=error_count,
        )

    async def _append(self, documents: list[Document]) -> None:
        if self.path is None:
            return
        payload = "".join(_dumps(document) + "\n" for document in documents)
        async with aiofiles.open(self.path, "a", encoding="utf-8") as f:
            await f.write(payload)

    async def _rewrite(self) -> None:
        if self.path is None:
            return
        temp_fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.stem}_",
            suffix=".tmp",
        )
        try:
            async with aiofiles.open(temp_fd, "w", encoding="utf-8") as f:
                for document in self._documents.values():
                    await f.write(_dumps(document) + "\n")
            Path(temp_path).replace(self.path)
        except Exception:
            try:
                Path(temp_path).unlink()
            except OSError:
                pass
            raise

        self._count("compact")

    def _count(self, operation: str) -> None:
        DATASTORE_OPERATIONS.labels(collection=self.name, operation=operation).inc()

    def _update_gauge(self) -> None:
        COLLECTION_DOCUMENTS.labels(collection=self.name).set(len(self._documents))
