from __future__ import annotations

from enum import Enum
from typing import TypedDict


# PUBLIC_INTERFACE
class TodoStatus(str, Enum):
    """Completion states a Todo can be in."""

    PENDING = "pending"
    COMPLETED = "completed"


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    Storage-agnostic shape of a Todo record as handed out by repositories.

    Fields:
    - id: ObjectId hex string assigned by the persistence layer
    - description: Non-empty text (trimmed on input via schemas)
    - status: 'pending' or 'completed'
    """

    id: str
    description: str
    status: str


class TodoFields(TypedDict, total=False):
    """Writable subset of a Todo, used for inserts and partial updates."""

    description: str
    status: str
