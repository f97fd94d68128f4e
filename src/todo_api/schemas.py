from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError


def _clean_title(value: Any) -> str:
    """
    Internal helper enforcing the title rules shared by create and update.
    - None or whitespace-only strings are rejected as missing.
    - Non-string values are rejected.
    - Surrounding whitespace is stripped.
    """
    if value is None:
        raise PydanticCustomError("title_required", "Title is required")
    if not isinstance(value, str):
        raise PydanticCustomError("title_type", "Title must be a string")
    s = value.strip()
    if not s:
        raise PydanticCustomError("title_required", "Title is required")
    return s


def _coerce_description(value: Any) -> Any:
    """
    None becomes an empty description; numbers and booleans are cast to text.
    Anything else (lists, objects) is left for the str field to reject.
    """
    if value is None:
        return ""
    if isinstance(value, (bool, int, float)):
        return str(value).lower() if isinstance(value, bool) else str(value)
    return value


class _TodoFields(BaseModel):
    # Clients speak camelCase (isCompleted); Python code uses snake_case.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# PUBLIC_INTERFACE
class TodoCreate(_TodoFields):
    """
    Schema for creating a new Todo item.
    Unknown fields (including id and timestamps) are ignored.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "description": "Two litres, semi-skimmed",
                "isCompleted": False,
            }
        }
    )

    title: str = Field(default=None, validate_default=True, description="Short title for the todo item")
    description: str = Field(default="", description="Optional detailed description")
    is_completed: bool = Field(default=False, description="Completion status flag")

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v: Any) -> str:
        """
        Require a non-blank title and strip surrounding whitespace.
        """
        return _clean_title(v)

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v: Any) -> Any:
        return _coerce_description(v)


# PUBLIC_INTERFACE
class TodoUpdate(_TodoFields):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "isCompleted": True,
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    is_completed: Optional[bool] = Field(default=None, description="Completion status flag")

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v: Any) -> str:
        """
        If title is provided, it must be non-blank; an explicit null is rejected.
        """
        return _clean_title(v)

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v: Any) -> Any:
        return _coerce_description(v)

    @field_validator("is_completed", mode="before")
    @classmethod
    def reject_null_flag(cls, v: Any) -> Any:
        if v is None:
            raise PydanticCustomError("bool_type", "isCompleted must be a boolean")
        return v

    def changes(self) -> Dict[str, Any]:
        """Return only the fields the client actually supplied, keyed by attribute name."""
        return self.model_dump(include=self.model_fields_set)


# PUBLIC_INTERFACE
class TodoOut(_TodoFields):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "665f1c2e9b1e8a3d4c5b6a79",
                "title": "Buy milk",
                "description": "",
                "isCompleted": False,
                "createdAt": "2025-01-25T10:15:30.123000Z",
                "updatedAt": "2025-01-26T09:00:00.000000Z",
            }
        }
    )

    id: str = Field(..., description="Unique identifier of the todo item (ObjectId hex string)")
    title: str = Field(..., description="Short title for the todo item")
    description: str = Field(default="", description="Detailed description")
    is_completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp (UTC)")
    updated_at: datetime = Field(..., description="Last update timestamp (UTC)")


class MessageOut(BaseModel):
    """Plain message body used for delete confirmations and not-found responses."""

    message: str = Field(..., description="Human readable outcome")
