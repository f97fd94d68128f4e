import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import HTTP_STATUS_BY_KIND, ErrorKind, StoreError, TodoError, error_response
from .logging_config import setup_logging
from .repositories import build_repository
from .routers import todos as todos_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "todos", "description": "CRUD operations for Todo items."},
]


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    The repository (and its store connection) is created once in the lifespan
    hook; if the store cannot be reached the error propagates and startup fails.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_file)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        repository = build_repository(settings)
        try:
            await repository.ping()
        except StoreError as exc:
            logger.error("Cannot reach the %s store: %s", repository.backend, exc.message)
            await repository.close()
            raise
        app.state.repository = repository
        logger.info("Todo API ready (backend=%s)", repository.backend)
        try:
            yield
        finally:
            await repository.close()

    app = FastAPI(
        title="Todo Service",
        description="CRUD API for todo records stored in MongoDB.",
        version="1.0.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    # Runs inside CORSMiddleware; last-resort 500 for anything the handlers did not format
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as exc:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            response = JSONResponse(status_code=500, content={"error": str(exc)})
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "%s %s -> %d (%.1f ms)", request.method, request.url.path, status_code, elapsed_ms
            )
        return response

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TodoError)
    async def todo_error_handler(request: Request, exc: TodoError) -> JSONResponse:
        return error_response(exc.kind, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Malformed request bodies (e.g. invalid JSON) are validation failures.

        Response format:
            {
                "error": "Request validation failed",
                "detail": [... pydantic/fastapi error details ...]
            }
        """
        return JSONResponse(
            status_code=HTTP_STATUS_BY_KIND[ErrorKind.VALIDATION_ERROR],
            content={"error": "Request validation failed", "detail": jsonable_encoder(exc.errors())},
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health and the storage backend.
        """
        return {"message": "Healthy", "backend": settings.persistence_backend}

    app.include_router(todos_router.router)
    return app


app = create_app()
