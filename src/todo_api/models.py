from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    Storage-neutral representation of a stored Todo record, as returned by
    every repository backend.

    Fields:
    - id: ObjectId of the record as a 24-character hex string
    - title: Short title (never blank, trimmed on input via schemas)
    - description: Free text, empty string when not provided
    - is_completed: Boolean completion flag
    - created_at: UTC creation timestamp
    - updated_at: UTC timestamp of the last successful update
    """

    id: str
    title: str
    description: str
    is_completed: bool
    created_at: datetime
    updated_at: datetime
