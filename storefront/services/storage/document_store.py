"""Redis-backed JSON document collections with atomic write batches."""

from __future__ import annotations

import copy
import json
import logging
import uuid
from collections.abc import Iterable
from typing import Annotated, Any, Literal

import redis.asyncio as redis
from fastapi import Depends

from storefront.config import settings
from storefront.errors import NotFoundError

logger = logging.getLogger(__name__)

_redis_client: redis.Redis | None = None

Document = dict[str, Any]
QueryOp = Literal["==", "in"]

_MISSING = object()


def get_redis_client() -> redis.Redis:
    """Return a singleton Redis client for the current process."""

    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


async def close_redis_client() -> None:
    """Close the process-wide client if one was created."""

    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


def resolve_field(document: Document, path: str) -> Any:
    """Read a dotted field path such as ``discountInfo.discountId``."""
    current: Any = document
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def merge_fields(document: Document, fields: Document) -> Document:
    """Return a copy of ``document`` with top-level or dotted fields replaced."""
    merged = copy.deepcopy(document)
    for path, value in fields.items():
        target = merged
        *parents, leaf = path.split(".")
        for part in parents:
            child = target.get(part)
            if not isinstance(child, dict):
                child = {}
                target[part] = child
            target = child
        target[leaf] = value
    return merged


class DocumentStore:
    """Schemaless collections of JSON documents keyed by generated ids."""

    def __init__(self, client: redis.Redis, prefix: str = "") -> None:
        self._client = client
        self._prefix = prefix

    @property
    def client(self) -> redis.Redis:
        return self._client

    def _key(self, collection: str, doc_id: str) -> str:
        return f"{self._prefix}doc:{collection}:{doc_id}"

    def _index_key(self, collection: str) -> str:
        return f"{self._prefix}idx:{collection}"

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    async def add(self, collection: str, data: Document) -> str:
        """Insert a document under a fresh id and return the id."""
        doc_id = self.new_id()
        await self.set(collection, doc_id, data)
        return doc_id

    async def set(self, collection: str, doc_id: str, data: Document) -> None:
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.set(self._key(collection, doc_id), _dumps(data))
            pipe.sadd(self._index_key(collection), doc_id)
            await pipe.execute()

    async def get(self, collection: str, doc_id: str) -> Document | None:
        raw = await self._client.get(self._key(collection, doc_id))
        if raw is None:
            return None
        return json.loads(raw)

    async def update(self, collection: str, doc_id: str, fields: Document) -> None:
        """Merge ``fields`` into an existing document."""
        batch = self.batch()
        batch.update(collection, doc_id, fields)
        await batch.commit()

    async def delete(self, collection: str, doc_id: str) -> bool:
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.delete(self._key(collection, doc_id))
            pipe.srem(self._index_key(collection), doc_id)
            removed, _ = await pipe.execute()
        return bool(removed)

    async def stream(self, collection: str) -> list[tuple[str, Document]]:
        """Return every document of a collection as ``(id, data)`` pairs."""
        ids = sorted(_text(i) for i in await self._client.smembers(self._index_key(collection)))
        if not ids:
            return []
        raws = await self._client.mget([self._key(collection, i) for i in ids])
        return [
            (doc_id, json.loads(raw))
            for doc_id, raw in zip(ids, raws)
            if raw is not None
        ]

    async def where(
        self,
        collection: str,
        field: str,
        op: QueryOp,
        value: Any,
    ) -> list[tuple[str, Document]]:
        """Filter a collection on a (possibly dotted) field.

        ``==`` compares for equality; ``in`` matches when the field equals any
        element of ``value``.
        """
        if op == "in":
            candidates = list(value)
            if not candidates:
                return []
        elif op != "==":
            raise ValueError(f"Unsupported query operator: {op}")

        matches: list[tuple[str, Document]] = []
        for doc_id, document in await self.stream(collection):
            field_value = resolve_field(document, field)
            if field_value is _MISSING:
                continue
            if op == "==" and field_value == value:
                matches.append((doc_id, document))
            elif op == "in" and field_value in candidates:
                matches.append((doc_id, document))
        return matches

    def batch(self) -> WriteBatch:
        return WriteBatch(self)


class WriteBatch:
    """Stages writes and applies them together in one Redis transaction."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._ops: list[tuple[str, str, str, Document | None]] = []

    def __len__(self) -> int:
        return len(self._ops)

    def set(self, collection: str, doc_id: str, data: Document) -> WriteBatch:
        self._ops.append(("set", collection, doc_id, data))
        return self

    def update(self, collection: str, doc_id: str, fields: Document) -> WriteBatch:
        self._ops.append(("update", collection, doc_id, fields))
        return self

    def delete(self, collection: str, doc_id: str) -> WriteBatch:
        self._ops.append(("delete", collection, doc_id, None))
        return self

    async def commit(self) -> int:
        """Apply all staged writes, or none of them.

        Update targets are read before the transaction starts; a missing
        target aborts the whole batch with :class:`NotFoundError`.
        """
        if not self._ops:
            return 0

        store = self._store
        targets = _unique(
            (collection, doc_id)
            for kind, collection, doc_id, _ in self._ops
            if kind == "update"
        )
        current: dict[tuple[str, str], Document | None] = {}
        if targets:
            raws = await store.client.mget(
                [store._key(collection, doc_id) for collection, doc_id in targets]
            )
            for target, raw in zip(targets, raws):
                current[target] = json.loads(raw) if raw is not None else None

        staged: dict[tuple[str, str], Document | None] = {}
        for kind, collection, doc_id, data in self._ops:
            target = (collection, doc_id)
            if kind == "set":
                staged[target] = data
            elif kind == "delete":
                staged[target] = None
            else:
                base = staged[target] if target in staged else current.get(target)
                if base is None:
                    raise NotFoundError(f"No document to update: {collection}/{doc_id}")
                staged[target] = merge_fields(base, data or {})

        async with store.client.pipeline(transaction=True) as pipe:
            for (collection, doc_id), data in staged.items():
                if data is None:
                    pipe.delete(store._key(collection, doc_id))
                    pipe.srem(store._index_key(collection), doc_id)
                else:
                    pipe.set(store._key(collection, doc_id), _dumps(data))
                    pipe.sadd(store._index_key(collection), doc_id)
            await pipe.execute()

        logger.debug(
            "Committed write batch",
            extra={"operations": len(self._ops), "documents": len(staged)},
        )
        return len(staged)


def _dumps(data: Document) -> str:
    return json.dumps(data, default=str)


def _text(value: str | bytes) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


def _unique(items: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    seen: dict[tuple[str, str], None] = {}
    for item in items:
        seen.setdefault(item, None)
    return list(seen)


def create_document_store(client: redis.Redis | None = None) -> DocumentStore:
    """Factory used by scripts running outside the API process."""
    return DocumentStore(client or get_redis_client(), settings.STORE_KEY_PREFIX)


def get_document_store(
    client: Annotated[redis.Redis, Depends(get_redis_client)],
) -> DocumentStore:
    """FastAPI dependency factory."""
    return DocumentStore(client, settings.STORE_KEY_PREFIX)


StoreDependency = Annotated[DocumentStore, Depends(get_document_store)]
