from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from threading import RLock
from typing import Dict, List, Optional, Sequence

from bson import ObjectId

from .models import TodoEntity, TodoFields, TodoStatus
from .settings import get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def is_valid_id(todo_id: Optional[str]) -> bool:
    """Return True if todo_id is syntactically a valid ObjectId string."""
    return bool(todo_id) and ObjectId.is_valid(todo_id)


# PUBLIC_INTERFACE
class Repository(ABC):
    """
    Abstract contract for the Todo collection.

    Implementations receive ids that already passed is_valid_id.
    """

    @abstractmethod
    def find_all(self) -> List[TodoEntity]:
        """Return every TodoEntity in storage order."""

    @abstractmethod
    def find_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        """Return a TodoEntity by id, or None if not found."""

    @abstractmethod
    def find_by_status(self, status: str) -> List[TodoEntity]:
        """Return the TodoEntities whose status equals status exactly."""

    @abstractmethod
    def insert(self, fields: TodoFields) -> TodoEntity:
        """Create and return a new TodoEntity."""

    @abstractmethod
    def insert_many(self, rows: Sequence[TodoFields]) -> List[TodoEntity]:
        """Create all rows in one batch and return the created entities in order."""

    @abstractmethod
    def update(self, todo_id: str, patch: TodoFields) -> Optional[TodoEntity]:
        """Apply patch to an existing TodoEntity. Return updated entity or None if not found."""

    @abstractmethod
    def delete(self, todo_id: str) -> bool:
        """Delete a TodoEntity by id. Return True if deleted, False if not found."""

    @abstractmethod
    def export_rows(self) -> List[TodoFields]:
        """Return description and status of every todo, without ids."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        # dicts keep insertion order, which stands in for storage order
        self._items: Dict[str, TodoEntity] = {}

    def _build(self, fields: TodoFields) -> TodoEntity:
        return {
            "id": str(ObjectId()),
            "description": fields["description"],
            "status": fields.get("status") or TodoStatus.PENDING.value,
        }

    def find_all(self) -> List[TodoEntity]:
        with self._lock:
            return [t.copy() for t in self._items.values()]

    def find_by_id(self, todo_id: str) -> Optional[TodoEntity]:
        with self._lock:
            item = self._items.get(todo_id)
            return None if item is None else item.copy()

    def find_by_status(self, status: str) -> List[TodoEntity]:
        with self._lock:
            return [t.copy() for t in self._items.values() if t["status"] == status]

    def insert(self, fields: TodoFields) -> TodoEntity:
        entity = self._build(fields)
        with self._lock:
            self._items[entity["id"]] = entity
        return entity.copy()

    def insert_many(self, rows: Sequence[TodoFields]) -> List[TodoEntity]:
        entities = [self._build(r) for r in rows]
        with self._lock:
            for entity in entities:
                self._items[entity["id"]] = entity
        return [e.copy() for e in entities]

    def update(self, todo_id: str, patch: TodoFields) -> Optional[TodoEntity]:
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None:
                return None
            updated = existing.copy()
            updated.update(patch)  # type: ignore[typeddict-item]
            self._items[todo_id] = updated
            return updated.copy()

    def delete(self, todo_id: str) -> bool:
        with self._lock:
            return self._items.pop(todo_id, None) is not None

    def export_rows(self) -> List[TodoFields]:
        with self._lock:
            return [{"description": t["description"], "status": t["status"]} for t in self._items.values()]


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the process-wide repository configured by settings.
    - memory: InMemoryRepository
    - mongo: MongoRepository backed by pymongo
    """
    settings = get_settings()
    if settings.persistence_backend == "mongo":
        from .db import MongoRepository

        logger.info(
            "Using MongoDB collection %s.%s", settings.mongodb_database, settings.mongodb_collection
        )
        return MongoRepository.from_settings(settings)
    logger.info("Using in-memory todo repository")
    return InMemoryRepository()
