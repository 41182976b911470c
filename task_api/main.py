"""FastAPI application entry point."""

import logging
import re
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from task_api.config import Settings
from task_api.errors import TaskError, TaskNotFoundError
from task_api.models import (
    ApiResponse,
    ErrorResponse,
    HealthResponse,
    Task,
    TaskCreate,
    TaskStats,
    TaskUpdate,
)
from task_api.store import TaskStore

logger = logging.getLogger(__name__)

ENDPOINTS = (
    "GET    /health",
    "GET    /api/tasks",
    "GET    /api/tasks/{id}",
    "POST   /api/tasks",
    "PUT    /api/tasks/{id}",
    "DELETE /api/tasks/{id}",
    "GET    /api/stats",
)

TASK_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


def get_store(request: Request) -> TaskStore:
    """Return the store owned by the running application."""
    return request.app.state.store


StoreDep = Annotated[TaskStore, Depends(get_store)]


def parse_task_id(raw: str) -> int:
    """Parse the leading integer of a path id, so `1abc` and `1.5` both read as 1.

    Ids without a leading run of ASCII digits match no task.
    """
    match = TASK_ID_PATTERN.match(raw.strip())
    if match is None:
        raise TaskNotFoundError()
    return int(match.group())


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Translate every failure into the ``{success: false, message}`` envelope."""

    @app.exception_handler(TaskError)
    async def task_error_handler(request: Request, exc: TaskError) -> JSONResponse:
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.debug("Rejected body for %s %s: %s", request.method, request.url.path, exc.errors())
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid request body")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        # Unknown paths and unsupported methods are both reported as a missing route.
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return _error(status.HTTP_404_NOT_FOUND, "Route not found")
        return _error(exc.status_code, str(exc.detail))


def register_error_middleware(app: FastAPI) -> None:
    """Turn unexpected exceptions into a generic 500.

    Must be registered before CORSMiddleware so CORS headers wrap the 500 too.
    """

    @app.middleware("http")
    async def unhandled_error_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.url.path)
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Something went wrong!")


def register_routes(app: FastAPI) -> None:
    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse()

    @app.get(
        "/api/tasks",
        response_model=ApiResponse[list[Task]],
        response_model_exclude_none=True,
        tags=["Tasks"],
    )
    async def list_tasks(
        store: StoreDep,
        status: str | None = None,
        priority: str | None = None,
    ) -> ApiResponse[list[Task]]:
        """List tasks, optionally filtered by status and priority."""
        tasks = store.list_all(status=status, priority=priority)
        return ApiResponse(count=len(tasks), data=tasks)

    @app.get(
        "/api/tasks/{task_id}",
        response_model=ApiResponse[Task],
        response_model_exclude_none=True,
        tags=["Tasks"],
    )
    async def get_task(task_id: str, store: StoreDep) -> ApiResponse[Task]:
        """Get a specific task by ID."""
        return ApiResponse(data=store.get(parse_task_id(task_id)))

    @app.post(
        "/api/tasks",
        response_model=ApiResponse[Task],
        response_model_exclude_none=True,
        status_code=status.HTTP_201_CREATED,
        tags=["Tasks"],
    )
    async def create_task(
        store: StoreDep, data: TaskCreate | None = None
    ) -> ApiResponse[Task]:
        """Create a new task."""
        task = store.create(data or TaskCreate())
        return ApiResponse(message="Task created successfully", data=task)

    @app.put(
        "/api/tasks/{task_id}",
        response_model=ApiResponse[Task],
        response_model_exclude_none=True,
        tags=["Tasks"],
    )
    async def update_task(
        task_id: str, store: StoreDep, data: TaskUpdate | None = None
    ) -> ApiResponse[Task]:
        """Update an existing task."""
        task = store.update(parse_task_id(task_id), data or TaskUpdate())
        return ApiResponse(message="Task updated successfully", data=task)

    @app.delete(
        "/api/tasks/{task_id}",
        response_model=ApiResponse[Task],
        response_model_exclude_none=True,
        tags=["Tasks"],
    )
    async def delete_task(task_id: str, store: StoreDep) -> ApiResponse[Task]:
        """Delete a task and return its last state."""
        task = store.delete(parse_task_id(task_id))
        return ApiResponse(message="Task deleted successfully", data=task)

    @app.get(
        "/api/stats",
        response_model=ApiResponse[TaskStats],
        response_model_exclude_none=True,
        tags=["Stats"],
    )
    async def get_stats(store: StoreDep) -> ApiResponse[TaskStats]:
        """Task counts by status and priority."""
        return ApiResponse(data=store.stats())


def create_app(
    store: TaskStore | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the application around a task store. A seeded store is created if none is given."""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Task API ready with %d tasks", len(app.state.store.list_all()))
        for endpoint in ENDPOINTS:
            logger.info("  %s", endpoint)
        yield
        logger.info("Task API shutting down")

    app = FastAPI(
        title="Task Store API",
        description="An in-memory task tracking API.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store if store is not None else TaskStore()
    app.state.settings = settings

    register_error_middleware(app)
    # Cross-origin requests are allowed from any origin by default
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    register_routes(app)
    return app


app = create_app()
