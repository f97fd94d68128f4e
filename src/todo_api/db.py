from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Generator, List, Mapping, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from .errors import StoreError
from .models import TodoEntity
from .repositories import Repository
from .schemas import TodoCreate
from .settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Fields:
    collection: str = "todos"
    id: str = "_id"
    title: str = "title"
    description: str = "description"
    is_completed: str = "isCompleted"
    created_at: str = "createdAt"
    updated_at: str = "updatedAt"


_FIELDS = _Fields()


@contextmanager
def _store_errors() -> Generator[None, None, None]:
    """Re-raise driver failures as StoreError, keeping the driver's message."""
    try:
        yield
    except PyMongoError as exc:
        raise StoreError(str(exc)) from exc


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# PUBLIC_INTERFACE
class MongoStore:
    """
    Explicit handle on a MongoDB database.

    Created once at application startup and handed to MongoRepository; nothing
    else in the application holds a client.
    """

    def __init__(
        self,
        uri: str = "mongodb://localhost:27017",
        database: str = "todo_app",
        timeout_ms: int = 5000,
        client: Optional[AsyncIOMotorClient] = None,
    ) -> None:
        self._client = client if client is not None else AsyncIOMotorClient(
            uri, serverSelectionTimeoutMS=timeout_ms, tz_aware=True
        )
        self._database = self._client[database]
        self.database_name = database

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoStore":
        return cls(
            uri=settings.mongodb_uri,
            database=settings.mongodb_database,
            timeout_ms=settings.mongodb_timeout_ms,
        )

    async def ping(self) -> None:
        """Round-trip to the server. Raises StoreError if it cannot be reached."""
        with _store_errors():
            await self._client.admin.command("ping")
        logger.info("Connected to MongoDB database '%s'", self.database_name)

    def collection(self, name: str) -> AsyncIOMotorCollection:
        return self._database[name]

    def close(self) -> None:
        self._client.close()


class MongoRepository(Repository):
    """
    Repository storing todos as documents in the ``todos`` collection.
    """

    backend = "mongo"

    def __init__(self, store: MongoStore) -> None:
        self._store = store
        self._collection = store.collection(_FIELDS.collection)

    def _doc_to_entity(self, doc: Mapping[str, Any]) -> TodoEntity:
        return {
            "id": str(doc[_FIELDS.id]),
            "title": str(doc[_FIELDS.title]),
            "description": doc.get(_FIELDS.description) or "",
            "is_completed": bool(doc.get(_FIELDS.is_completed, False)),
            "created_at": _as_utc(doc[_FIELDS.created_at]),
            "updated_at": _as_utc(doc[_FIELDS.updated_at]),
        }

    async def ping(self) -> None:
        await self._store.ping()

    async def close(self) -> None:
        self._store.close()

    async def _find_all(self) -> List[TodoEntity]:
        with _store_errors():
            cursor = self._collection.find({}, sort=[(_FIELDS.id, ASCENDING)])
            docs = await cursor.to_list(length=None)
        return [self._doc_to_entity(d) for d in docs]

    async def _find_one(self, oid: ObjectId) -> Optional[TodoEntity]:
        with _store_errors():
            doc = await self._collection.find_one({_FIELDS.id: oid})
        return self._doc_to_entity(doc) if doc else None

    async def _insert(self, data: TodoCreate, now: datetime) -> TodoEntity:
        doc: Dict[str, Any] = {
            _FIELDS.title: data.title,
            _FIELDS.description: data.description,
            _FIELDS.is_completed: data.is_completed,
            _FIELDS.created_at: now,
            _FIELDS.updated_at: now,
        }
        with _store_errors():
            result = await self._collection.insert_one(doc)
        doc[_FIELDS.id] = result.inserted_id
        return self._doc_to_entity(doc)

    async def _update(self, oid: ObjectId, changes: Dict[str, Any], now: datetime) -> Optional[TodoEntity]:
        fields = {getattr(_FIELDS, name): value for name, value in changes.items()}
        fields[_FIELDS.updated_at] = now
        with _store_errors():
            doc = await self._collection.find_one_and_update(
                {_FIELDS.id: oid},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        return self._doc_to_entity(doc) if doc else None

    async def _delete(self, oid: ObjectId) -> Optional[TodoEntity]:
        with _store_errors():
            doc = await self._collection.find_one_and_delete({_FIELDS.id: oid})
        return self._doc_to_entity(doc) if doc else None
