from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId

from .errors import InvalidIdentifierError, TodoValidationError
from .models import TodoEntity
from .schemas import TodoCreate
from .settings import Settings
from .validation import validate_new_todo, validate_todo_changes

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Current UTC time truncated to milliseconds, the precision MongoDB keeps."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond - now.microsecond % 1000)


# PUBLIC_INTERFACE
def parse_object_id(todo_id: Any) -> ObjectId:
    """
    Convert a client-supplied id into an ObjectId.

    Raises:
        InvalidIdentifierError if the value is not a 24-character hex string.
    """
    if not isinstance(todo_id, str) or not ObjectId.is_valid(todo_id):
        raise InvalidIdentifierError()
    return ObjectId(todo_id)


# PUBLIC_INTERFACE
class Repository(ABC):
    """
    Todo accessor contract.

    The public coroutines validate identifiers and fields, then delegate to the
    backend primitives (the underscore methods), which only talk to the store.
    "Not found" is reported as ``None``, never as an exception.
    """

    backend: str = "abstract"

    async def list_all(self) -> List[TodoEntity]:
        """Return every todo in insertion order."""
        return await self._find_all()

    async def get_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        """Return a todo by id, or None if not found."""
        return await self._find_one(parse_object_id(todo_id))

    async def create(self, fields: Any) -> TodoEntity:
        """Validate ``fields``, persist a new todo and return it."""
        result = validate_new_todo(fields)
        if not result.ok:
            raise TodoValidationError(result.message)
        assert result.value is not None
        created = await self._insert(result.value, utcnow())
        logger.info("Created todo %s", created["id"])
        return created

    async def update_by_id(self, todo_id: str, fields: Any) -> Optional[TodoEntity]:
        """Apply the supplied fields to an existing todo. Return the updated todo or None."""
        oid = parse_object_id(todo_id)
        result = validate_todo_changes(fields)
        if not result.ok:
            raise TodoValidationError(result.message)
        assert result.value is not None
        return await self._update(oid, result.value.changes(), utcnow())

    async def delete_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        """Delete a todo. Return its state prior to removal, or None if not found."""
        deleted = await self._delete(parse_object_id(todo_id))
        if deleted is not None:
            logger.info("Deleted todo %s", deleted["id"])
        return deleted

    async def ping(self) -> None:
        """Check that the backing store is reachable. Raises StoreError if not."""

    async def close(self) -> None:
        """Release the store handle."""

    @abstractmethod
    async def _find_all(self) -> List[TodoEntity]:
        ...

    @abstractmethod
    async def _find_one(self, oid: ObjectId) -> Optional[TodoEntity]:
        ...

    @abstractmethod
    async def _insert(self, data: TodoCreate, now: datetime) -> TodoEntity:
        ...

    @abstractmethod
    async def _update(self, oid: ObjectId, changes: Dict[str, Any], now: datetime) -> Optional[TodoEntity]:
        """``changes`` is keyed by TodoEntity field name and holds only supplied fields."""

    @abstractmethod
    async def _delete(self, oid: ObjectId) -> Optional[TodoEntity]:
        ...


class InMemoryRepository(Repository):
    """
    In-memory repository suitable for testing and local development.

    Each primitive completes without awaiting, so operations never interleave
    on the event loop.
    """

    backend = "memory"

    def __init__(self) -> None:
        self._items: Dict[ObjectId, TodoEntity] = {}

    async def _find_all(self) -> List[TodoEntity]:
        return [t.copy() for t in self._items.values()]

    async def _find_one(self, oid: ObjectId) -> Optional[TodoEntity]:
        item = self._items.get(oid)
        return None if item is None else item.copy()

    async def _insert(self, data: TodoCreate, now: datetime) -> TodoEntity:
        oid = ObjectId()
        entity: TodoEntity = {
            "id": str(oid),
            "title": data.title,
            "description": data.description,
            "is_completed": data.is_completed,
            "created_at": now,
            "updated_at": now,
        }
        self._items[oid] = entity
        return entity.copy()

    async def _update(self, oid: ObjectId, changes: Dict[str, Any], now: datetime) -> Optional[TodoEntity]:
        existing = self._items.get(oid)
        if existing is None:
            return None
        updated = existing.copy()
        updated.update(changes)  # type: ignore[typeddict-item]
        updated["updated_at"] = now
        self._items[oid] = updated
        return updated.copy()

    async def _delete(self, oid: ObjectId) -> Optional[TodoEntity]:
        return self._items.pop(oid, None)


# PUBLIC_INTERFACE
def build_repository(settings: Settings) -> Repository:
    """
    Factory returning the repository configured by settings.
    - mongo: MongoRepository over a freshly constructed MongoStore
    - memory: InMemoryRepository
    """
    if settings.persistence_backend == "memory":
        return InMemoryRepository()
    from .db import MongoRepository, MongoStore

    return MongoRepository(MongoStore.from_settings(settings))
