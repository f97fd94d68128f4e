"""
Error kinds raised by the todo accessor and their HTTP mapping.

Every failure the API reports is classified as one of the ``ErrorKind`` members.
Handlers never pick a status code themselves; they look it up in
``HTTP_STATUS_BY_KIND`` and build the body with ``error_response``.
"""
from __future__ import annotations

import enum
from typing import Dict

from fastapi import status
from fastapi.responses import JSONResponse

NOT_FOUND_MESSAGE = "Todo not found"
INVALID_ID_MESSAGE = "Invalid ID format"


# PUBLIC_INTERFACE
class ErrorKind(str, enum.Enum):
    """Closed set of failure classes surfaced by the todo API."""

    VALIDATION_ERROR = "ValidationError"
    INVALID_IDENTIFIER = "InvalidIdentifier"
    NOT_FOUND = "NotFound"
    STORE_ERROR = "StoreError"


# Only a missing record gets a 4xx; validation and id failures are 500s.
HTTP_STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.INVALID_IDENTIFIER: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.STORE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class TodoError(Exception):
    """Base class for classified accessor failures."""

    kind: ErrorKind = ErrorKind.STORE_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]


class TodoValidationError(TodoError):
    """Input fields do not satisfy the todo schema."""

    kind = ErrorKind.VALIDATION_ERROR


class InvalidIdentifierError(TodoError):
    """An id-scoped operation received a malformed identifier."""

    kind = ErrorKind.INVALID_IDENTIFIER

    def __init__(self, message: str = INVALID_ID_MESSAGE) -> None:
        super().__init__(message)


class StoreError(TodoError):
    """The document store is unreachable or rejected the operation."""

    kind = ErrorKind.STORE_ERROR


# PUBLIC_INTERFACE
def error_response(kind: ErrorKind, message: str) -> JSONResponse:
    """
    Build the JSON response for an error kind.

    Not-found outcomes use ``{"message": ...}``; every other kind uses
    ``{"error": ...}``.
    """
    key = "message" if kind is ErrorKind.NOT_FOUND else "error"
    return JSONResponse(status_code=HTTP_STATUS_BY_KIND[kind], content={key: message})


def not_found_response() -> JSONResponse:
    return error_response(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)
