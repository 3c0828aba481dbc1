from __future__ import annotations

import logging
import os
import shutil
import tempfile
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import Response

from ..repositories import Repository, get_repository, is_valid_id
from ..schemas import (
    DESCRIPTION_ERROR,
    ErrorOut,
    Message,
    TodoBatch,
    TodoCreate,
    TodoList,
    TodoMessage,
    TodoOut,
    TodoUpdate,
)
from ..settings import Settings, get_settings
from ..utils import InvalidCSVFormat, read_todos_csv, render_todos_csv

logger = logging.getLogger(__name__)

router = APIRouter(tags=["todos"])

EMPTY_LIST = "Todo list is empty"
NOT_FOUND = "Todo not found"
INVALID_ID = "Todo ID is required"

_bad_request = {400: {"model": ErrorOut, "description": "Validation error"}}
_not_found = {404: {"model": ErrorOut, "description": "No matching todo"}}


def _get_repo(repo: Repository = Depends(get_repository)) -> Repository:
    """
    Dependency wrapper for repository to keep signatures clean.
    """
    return repo


def _valid_todo_id(todo_id: str) -> str:
    """
    Path dependency rejecting malformed ids. Dependencies are solved before the
    request body is validated, so a bad id is reported ahead of bad body fields.
    """
    if not is_valid_id(todo_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_ID)
    return todo_id


def _spool_upload(upload: UploadFile, upload_dir: str) -> str:
    """
    Copy an uploaded file to a temporary file under upload_dir and return its path.
    The caller owns the file and must remove it.
    """
    os.makedirs(upload_dir, exist_ok=True)
    with tempfile.NamedTemporaryFile("wb", dir=upload_dir, suffix=".csv", delete=False) as tmp:
        try:
            shutil.copyfileobj(upload.file, tmp)
        except Exception:
            tmp.close()
            os.remove(tmp.name)
            raise
    return tmp.name


# PUBLIC_INTERFACE
@router.get(
    "/todos",
    response_model=TodoList,
    summary="List Todos",
    description="Return every Todo item. An empty collection is reported as 404.",
    responses={**_not_found},
)
def list_todos(repo: Repository = Depends(_get_repo)) -> TodoList:
    """
    List all todos in storage order.
    """
    items = repo.find_all()
    if not items:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=EMPTY_LIST)
    return TodoList(data=[TodoOut(**it) for it in items])


# PUBLIC_INTERFACE
@router.get(
    "/todos/filter",
    response_model=TodoList,
    summary="Filter Todos",
    description=(
        "Return the todos whose status matches the 'status' query parameter exactly. "
        "The value is not checked against the known statuses."
    ),
    responses={**_bad_request, **_not_found},
)
def filter_todos(
    status_filter: Optional[str] = Query(None, alias="status", description="Status to match exactly"),
    repo: Repository = Depends(_get_repo),
) -> TodoList:
    """
    Filter todos by status.
    """
    if not status_filter:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Status query parameter is required"
        )
    items = repo.find_by_status(status_filter)
    if not items:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todos not found")
    return TodoList(data=[TodoOut(**it) for it in items])


# PUBLIC_INTERFACE
@router.post(
    "/todos/upload",
    response_model=TodoBatch,
    status_code=status.HTTP_201_CREATED,
    summary="Upload Todos",
    description=(
        "Bulk-create todos from a CSV file sent as multipart field 'file'. The header may only "
        "contain 'description' and 'status'; if any row is invalid nothing is inserted."
    ),
    responses={**_bad_request},
)
def upload_todos(
    file: Optional[UploadFile] = File(None, description="CSV file with a description,status header"),
    repo: Repository = Depends(_get_repo),
    settings: Settings = Depends(get_settings),
) -> TodoBatch:
    """
    Import todos from an uploaded CSV file in a single batch.
    The spooled copy of the upload is removed whatever the outcome.
    """
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded.")

    path = _spool_upload(file, settings.upload_dir)
    try:
        try:
            rows = read_todos_csv(path)
        except InvalidCSVFormat as e:
            logger.warning("Rejected CSV upload %r: %s", file.filename, e)
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid CSV format.")
        created = repo.insert_many(rows)
    finally:
        os.remove(path)

    logger.info("Imported %d todos from %r", len(created), file.filename)
    return TodoBatch(
        message="Todos added successfully",
        count=len(created),
        todos=[TodoOut(**it) for it in created],
    )


# PUBLIC_INTERFACE
@router.get(
    "/todos/download",
    response_class=Response,
    summary="Download Todos",
    description="Export every todo's description and status as a CSV attachment named todos.csv.",
    responses={
        200: {"content": {"text/csv": {}}, "description": "CSV export"},
        **_not_found,
    },
)
def download_todos(repo: Repository = Depends(_get_repo)) -> Response:
    """
    Download all todos as CSV.
    """
    rows = repo.export_rows()
    if not rows:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=EMPTY_LIST)
    return Response(
        render_todos_csv(rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="todos.csv"'},
    )


# PUBLIC_INTERFACE
@router.get(
    "/todo/{todo_id}",
    response_model=TodoOut,
    summary="Get Todo",
    description="Get a single Todo item by ID.",
    responses={**_bad_request, **_not_found},
)
def get_todo(
    todo_id: str = Depends(_valid_todo_id),
    repo: Repository = Depends(_get_repo),
) -> TodoOut:
    """
    Retrieve a single Todo item by its ID.
    """
    item = repo.find_by_id(todo_id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return TodoOut(**item)


# PUBLIC_INTERFACE
@router.post(
    "/todo",
    response_model=TodoMessage,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item; status defaults to 'pending'.",
    responses={**_bad_request},
)
def create_todo(
    payload: Optional[TodoCreate] = None,
    repo: Repository = Depends(_get_repo),
) -> TodoMessage:
    """
    Create a new Todo. A request without a body has no description.
    """
    if payload is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DESCRIPTION_ERROR)
    created = repo.insert(payload.to_fields())
    return TodoMessage(message="Todo added successfully", todo=TodoOut(**created))


# PUBLIC_INTERFACE
@router.put(
    "/todo/{todo_id}",
    response_model=TodoMessage,
    summary="Update Todo",
    description=(
        "Partially update a Todo item. Only the description and status fields that are "
        "provided and non-empty are changed."
    ),
    responses={**_bad_request, **_not_found},
)
def update_todo(
    todo_id: str = Depends(_valid_todo_id),
    payload: Optional[TodoUpdate] = None,
    repo: Repository = Depends(_get_repo),
) -> TodoMessage:
    """
    Partial update of a Todo item. An empty body is applied as an empty patch.
    """
    patch = (payload or TodoUpdate()).to_patch()
    updated = repo.update(todo_id, patch)
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return TodoMessage(message="Todo updated successfully", todo=TodoOut(**updated))


# PUBLIC_INTERFACE
@router.delete(
    "/todo/{todo_id}",
    response_model=Message,
    summary="Delete Todo",
    description="Delete a Todo item by ID.",
    responses={**_bad_request, **_not_found},
)
def delete_todo(
    todo_id: str = Depends(_valid_todo_id),
    repo: Repository = Depends(_get_repo),
) -> Message:
    """
    Delete a Todo. Returns 200 with a confirmation, 404 if not found.
    """
    if not repo.delete(todo_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
    return Message(message="Todo deleted successfully")
