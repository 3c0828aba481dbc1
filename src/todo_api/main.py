import logging
from typing import Any, Dict, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .log import setup_logging
from .routers import todos as todos_router
from .schemas import CUSTOM_ERROR_TYPES
from .settings import get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "todos",
        "description": "CRUD operations for Todo items, status filtering, and CSV import/export.",
    },
]

_settings = get_settings()
setup_logging(_settings.log_level)

app = FastAPI(
    title="Todo Service",
    description="To-do list API backed by a document collection, with CSV bulk upload and download.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# Configure CORS from the CORS_ALLOW_ORIGINS environment variable, with "*" fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _validation_message(errors: Sequence[Dict[str, Any]]) -> str:
    """
    Pick a single message for the first validation error. Messages raised by the
    Todo schemas are already user-facing; anything else is prefixed with its field.
    """
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") in CUSTOM_ERROR_TYPES:
        return str(first.get("msg"))
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path")]
    field = ".".join(loc) or "request body"
    return f"{field}: {first.get('msg')}"


# Global exception handlers so that every failure body is {"error": "..."}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Report request validation errors as 400 with a field-specific message.

    Response format:
        {"error": "Description cannot be empty"}
    """
    return JSONResponse(status_code=400, content={"error": _validation_message(exc.errors())})


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Log unexpected failures (persistence errors, unreadable uploads) and hide them from the caller.
    """
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


# Include routers
app.include_router(todos_router.router)
