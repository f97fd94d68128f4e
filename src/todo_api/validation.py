"""
Explicit validation of client-supplied todo fields.

``validate_new_todo`` and ``validate_todo_changes`` never raise for bad input;
they return a ``ValidationResult`` holding either the parsed schema or the list
of field errors, and the repository decides what to do with it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .schemas import TodoCreate, TodoUpdate

T = TypeVar("T", bound=BaseModel)

VALIDATION_PREFIX = "Todo validation failed"


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """
    Outcome of validating a payload against a todo schema.

    Exactly one of ``value`` / ``errors`` is meaningful: ``errors`` is empty
    when validation succeeded.
    """

    value: Optional[T] = None
    errors: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def message(self) -> str:
        """Single-line summary, e.g. ``Todo validation failed: title: Title is required``."""
        return f"{VALIDATION_PREFIX}: {', '.join(self.errors)}"


def _format_error(error: Mapping[str, Any]) -> str:
    field = ".".join(str(part) for part in error.get("loc", ())) or "body"
    return f"{field}: {error.get('msg', 'invalid value')}"


def _validate(schema: Type[T], payload: Any) -> ValidationResult[T]:
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        return ValidationResult(errors=("body: Request body must be a JSON object",))
    try:
        return ValidationResult(value=schema.model_validate(dict(payload)))
    except PydanticValidationError as exc:
        return ValidationResult(errors=tuple(_format_error(e) for e in exc.errors()))


# PUBLIC_INTERFACE
def validate_new_todo(payload: Any) -> ValidationResult[TodoCreate]:
    """Validate the fields of a todo about to be created."""
    return _validate(TodoCreate, payload)


# PUBLIC_INTERFACE
def validate_todo_changes(payload: Any) -> ValidationResult[TodoUpdate]:
    """
    Validate a partial update.

    Stored records already satisfy the schema, so checking every supplied field
    is enough for the merged record to be valid as well.
    """
    return _validate(TodoUpdate, payload)
