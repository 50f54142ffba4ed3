import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.handler import INTERNAL_ERROR, UserHandler, UserRepository
from .api.middleware import AccessLogMiddleware, RequestIdMiddleware
from .api.routers import health, users
from .api.swagger import build_router, ensure_spec
from .core.config import Settings, get_settings
from .db_connection import get_engine
from .store import UserStore

logger = logging.getLogger(__name__)

INVALID_REQUEST = "Invalid request"


def _open_store(settings: Settings) -> UserStore:
    store = UserStore(get_engine(settings.database))
    try:
        store.ping()
        store.create_schema()
    except Exception:
        store.close()
        raise
    return store


def create_app(settings: Optional[Settings] = None, store: Optional[UserRepository] = None) -> FastAPI:
    """Build the application.

    When ``store`` is omitted a :class:`UserStore` is opened from
    ``settings.database`` on startup. The store is closed on shutdown either way.
    """
    if settings is None:
        settings = get_settings()

    spec_path = ensure_spec(settings.openapi)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        repo = store if store is not None else _open_store(settings)
        app.state.handler = UserHandler(repo)
        logger.info("Users API ready (mode=%s)", settings.app.mode)
        try:
            yield
        finally:
            logger.info("Shutting down, closing user store")
            repo.close()

    swagger_ui = settings.app.swagger_ui or None
    app = FastAPI(
        title="Users API",
        version="1.0.0",
        docs_url=swagger_ui,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIdMiddleware)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        logger.error("request validation error: %s", exc.errors())
        return JSONResponse(status_code=400, content={"error": INVALID_REQUEST})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unexpected error while handling %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})

    app.include_router(build_router(spec_path))
    app.include_router(health.router, prefix=settings.openapi.api_prefix, tags=["health"])
    app.include_router(users.router, prefix=settings.openapi.api_prefix, tags=["users"])

    return app
