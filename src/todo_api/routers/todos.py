from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Request, status

from ..errors import ErrorKind, TodoError, error_response, not_found_response
from ..repositories import Repository
from ..schemas import MessageOut, TodoOut

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/todos",
    tags=["todos"],
)

_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    500: {"description": "Validation, identifier or store error: {\"error\": <message>}"},
}
_NOT_FOUND_RESPONSES: Dict[int, Dict[str, Any]] = {
    404: {"model": MessageOut, "description": "Todo not found"},
    **_ERROR_RESPONSES,
}


def get_repository(request: Request) -> Repository:
    """
    Dependency returning the repository created at application startup.
    """
    return request.app.state.repository


def handle_todo_errors(endpoint: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
    """
    Convert accessor failures raised by an endpoint into JSON error responses.

    Classified failures go through the error-kind table; anything else is
    logged and reported as a 500 carrying the exception message.
    """

    @functools.wraps(endpoint)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await endpoint(*args, **kwargs)
        except TodoError as exc:
            logger.warning("%s in %s: %s", exc.kind.value, endpoint.__name__, exc.message)
            return error_response(exc.kind, exc.message)
        except Exception as exc:
            logger.exception("Unexpected error in %s", endpoint.__name__)
            return error_response(ErrorKind.STORE_ERROR, str(exc))

    return wrapper


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TodoOut],
    summary="List Todos",
    description="Return every Todo item in insertion order.",
    responses=_ERROR_RESPONSES,
)
@handle_todo_errors
async def list_todos(repo: Repository = Depends(get_repository)) -> Any:
    """
    List all todos.
    """
    items = await repo.list_all()
    return [TodoOut(**it) for it in items]


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Get Todo",
    description="Get a single Todo item by ID.",
    responses=_NOT_FOUND_RESPONSES,
)
@handle_todo_errors
async def get_todo(todo_id: str, repo: Repository = Depends(get_repository)) -> Any:
    """
    Retrieve a single Todo item by its ID.
    """
    item = await repo.get_by_id(todo_id)
    if item is None:
        return not_found_response()
    return TodoOut(**item)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item and return the created resource.",
    responses=_ERROR_RESPONSES,
)
@handle_todo_errors
async def create_todo(
    payload: Optional[Dict[str, Any]] = Body(default=None, examples=[{"title": "Buy milk"}]),
    repo: Repository = Depends(get_repository),
) -> Any:
    """
    Create a new Todo. Only title is required.
    """
    created = await repo.create(payload)
    return TodoOut(**created)


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Update Todo",
    description="Update the supplied fields of a Todo item; omitted fields keep their values.",
    responses=_NOT_FOUND_RESPONSES,
)
@handle_todo_errors
async def update_todo(
    todo_id: str,
    payload: Optional[Dict[str, Any]] = Body(default=None, examples=[{"isCompleted": True}]),
    repo: Repository = Depends(get_repository),
) -> Any:
    """
    Partial update of a Todo item.
    """
    updated = await repo.update_by_id(todo_id, payload)
    if updated is None:
        return not_found_response()
    return TodoOut(**updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=MessageOut,
    summary="Delete Todo",
    description="Delete a Todo item by ID.",
    responses=_NOT_FOUND_RESPONSES,
)
@handle_todo_errors
async def delete_todo(todo_id: str, repo: Repository = Depends(get_repository)) -> Any:
    """
    Delete a Todo. Returns a confirmation message, 404 if not found.
    """
    deleted = await repo.delete_by_id(todo_id)
    if deleted is None:
        return not_found_response()
    return MessageOut(message="Todo deleted successfully")
