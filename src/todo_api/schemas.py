from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from .models import TodoFields, TodoStatus

DESCRIPTION_ERROR = "Description cannot be empty"
STATUS_ERROR = "Status can only be pending or completed"

# Error types raised by the validators below; their messages are user-facing as-is.
CUSTOM_ERROR_TYPES = {"description_empty", "status_invalid"}


def _check_description(value: Any) -> str:
    """
    Strip surrounding whitespace and reject anything that is not a non-empty string.
    """
    if not isinstance(value, str) or not value.strip():
        raise PydanticCustomError("description_empty", DESCRIPTION_ERROR)
    return value.strip()


def _check_status(value: Any) -> TodoStatus:
    if isinstance(value, TodoStatus):
        return value
    try:
        return TodoStatus(value)
    except ValueError:
        raise PydanticCustomError("status_invalid", STATUS_ERROR) from None


def _create_schema_extra(schema: Dict[str, Any]) -> None:
    """
    Publish description as required. Its None default only exists so that a
    missing value reaches the validator and gets the usual message.
    """
    schema["properties"]["description"].pop("default", None)
    schema["required"] = ["description"]
    schema["example"] = {"description": "Buy milk", "status": "pending"}


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.
    """

    model_config = ConfigDict(json_schema_extra=_create_schema_extra)

    description: str = Field(
        default=None,
        validate_default=True,
        description="What needs to be done; must not be blank",
    )
    status: TodoStatus = Field(
        default=TodoStatus.PENDING,
        description="Completion status; defaults to 'pending'",
    )

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v: Any) -> str:
        """
        Require a description and strip whitespace around it.
        """
        return _check_description(v)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> TodoStatus:
        """
        Empty or missing status falls back to 'pending'; anything else must be a known status.
        """
        if v is None or v == "":
            return TodoStatus.PENDING
        return _check_status(v)

    def to_fields(self) -> TodoFields:
        return {"description": self.description, "status": self.status.value}  # type: ignore[typeddict-item]


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only provided, non-empty fields will be updated.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "description": "Buy oat milk",
                "status": "completed",
            }
        }
    )

    description: Optional[str] = Field(default=None, description="Replacement description")
    status: Optional[TodoStatus] = Field(default=None, description="New completion status")

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v: Any) -> Optional[str]:
        """
        If a description is provided it must not be blank.
        """
        if v is None:
            return v
        return _check_description(v)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> Optional[TodoStatus]:
        if v is None or v == "":
            return None
        return _check_status(v)

    def to_patch(self) -> TodoFields:
        """
        Build the patch applied to the stored record. Absent fields are left out.
        """
        patch: TodoFields = {}
        if self.description:
            patch["description"] = self.description
        if self.status:
            patch["status"] = self.status.value
        return patch


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "66f1c2a9e4b0a1b2c3d4e5f6",
                "description": "Buy milk",
                "status": "pending",
            }
        }
    )

    id: str = Field(..., description="Unique identifier of the todo item")
    description: str = Field(..., description="What needs to be done")
    status: str = Field(..., description="Completion status")


class TodoList(BaseModel):
    data: List[TodoOut] = Field(..., description="Matching Todo items")


class TodoMessage(BaseModel):
    message: str
    todo: TodoOut


class TodoBatch(BaseModel):
    message: str
    count: int = Field(..., description="Number of todos inserted")
    todos: List[TodoOut]


class Message(BaseModel):
    message: str


class ErrorOut(BaseModel):
    error: str = Field(..., description="Human readable error message")
