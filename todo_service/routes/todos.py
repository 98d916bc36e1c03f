"""
Todo Service - Todo Route Handlers
===================================

What:  The five HTTP endpoints of the service.
How:   Each route pulls the raw body and/or `id` query parameter off the
       request and hands them to TodoService, which renders the final
       Envelope with `render()` (wired in by create_app()).
Who:   Mounted by create_app(); clients speak JSON envelopes.

Route Inventory:
    POST   /create         body {name, done?}      → 201
    GET    /list                                   → 200
    PUT    /update/?id=N   body {name, done?}      → 200
    DELETE /delete/?id=N                           → 200
    GET    /count                                  → 200

Bodies are read as raw bytes rather than declared as pydantic parameters:
decode failures must come back as 400 envelopes from the pipeline, not as
FastAPI's 422 validation responses.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from todo_service.schemas.todo import Envelope
from todo_service.services.todo_service import TodoService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Todos"])


def get_todo_service(request: Request) -> TodoService:
    """FastAPI dependency: the pipeline built by create_app()."""
    return request.app.state.todo_service


def render(envelope: Envelope) -> JSONResponse:
    return JSONResponse(status_code=envelope.status, content=envelope.to_wire())


def first_query_value(request: Request, name: str) -> Optional[str]:
    """First value of a repeated query parameter (`?id=1&id=2` gives "1")."""
    values = request.query_params.getlist(name)
    return values[0] if values else None


@router.post("/create", summary="Create a todo", status_code=201)
async def create_todo(
    request: Request,
    service: TodoService = Depends(get_todo_service),
) -> JSONResponse:
    body = await request.body()
    return await service.create(body)


@router.get("/list", summary="List all todos")
async def list_todos(
    service: TodoService = Depends(get_todo_service),
) -> JSONResponse:
    return await service.fetch_all()


@router.put("/update/", summary="Replace name and done of a todo")
@router.put("/update", include_in_schema=False)
async def update_todo(
    request: Request,
    service: TodoService = Depends(get_todo_service),
) -> JSONResponse:
    body = await request.body()
    return await service.update(first_query_value(request, "id"), body)


@router.delete("/delete/", summary="Delete a todo")
@router.delete("/delete", include_in_schema=False)
async def delete_todo(
    request: Request,
    service: TodoService = Depends(get_todo_service),
) -> JSONResponse:
    return await service.delete(first_query_value(request, "id"))


@router.get("/count", summary="Count stored todos")
async def count_todos(
    service: TodoService = Depends(get_todo_service),
) -> JSONResponse:
    return await service.count_entries()
