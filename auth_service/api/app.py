"""FastAPI application for the authentication service."""
import time
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from auth_service.auth.exceptions import AuthServiceError
from auth_service.auth.jwt_handler import Clock, JWTHandler
from auth_service.auth.password_handler import PasswordHandler
from auth_service.auth.service import AuthService
from auth_service.config import Settings, get_settings
from auth_service.database.mongodb import MongodbClient
from auth_service.database.user_repository import (
    InMemoryUserRepository,
    MongoUserRepository,
    UserRepository,
)
from auth_service.utils.logging_utils import get_logger, setup_logging
from auth_service.utils.request_context import (
    get_request_id,
    reset_request_id,
    set_request_id,
)

from .auth import router as auth_router


def get_cors_origins_list(settings: Settings) -> List[str]:
    """
    Build the list of allowed CORS origins from settings.

    Returns:
        List of allowed origins, de-duplicated in order.
    """
    unique_origins: List[str] = []
    for origin in settings.cors_origins or []:
        if origin not in unique_origins:
            unique_origins.append(origin)

    if not unique_origins:
        unique_origins = ["*"]

    # In development an open policy is narrowed to the local frontend
    if settings.environment == "development" and unique_origins == ["*"]:
        unique_origins = ["http://localhost:3000"]

    return unique_origins


def _build_lifespan(settings: Settings, user_repository: Optional[UserRepository],
                    clock: Optional[Clock]):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan context manager for setup and teardown."""
        logger = get_logger(__name__)
        logger.info("Starting application and wiring resources...")

        app.state.settings = settings
        app.state.mongodb_client = None

        repository = user_repository
        if repository is None:
            if settings.mongo_uri is not None:
                app.state.mongodb_client = MongodbClient(settings)
                await app.state.mongodb_client.ensure_user_indexes()
                repository = MongoUserRepository(app.state.mongodb_client)
                logger.info("Using MongoDB user store")
            else:
                repository = InMemoryUserRepository()
                logger.warning("MONGO_URI not set; using in-memory user store (data is not persisted)")

        app.state.user_repository = repository
        app.state.auth_service = AuthService(
            user_repository=repository,
            password_handler=PasswordHandler(rounds=settings.password_hash_rounds),
            jwt_handler=JWTHandler(settings, clock=clock),
            settings=settings,
        )
        logger.info(
            f"Token engine ready: access TTL {settings.jwt_access_token_expire_minutes}m, "
            f"refresh TTL {settings.jwt_refresh_token_expire_days}d, "
            f"bcrypt rounds {settings.password_hash_rounds}"
        )

        yield

        logger.info("Shutting down and releasing resources...")
        if app.state.mongodb_client is not None:
            try:
                await app.state.mongodb_client.close()
            except Exception as e:
                logger.error(f"Error during MongoDB client cleanup: {e}", exc_info=True)

    return lifespan


def create_app(
    settings: Optional[Settings] = None,
    *,
    user_repository: Optional[UserRepository] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Settings to use; defaults to the cached environment settings.
        user_repository: Store to use instead of the one derived from settings.
        clock: Time source for the token engine.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    main_logger = get_logger(__name__)
    main_logger.info("Creating FastAPI instance...")

    app = FastAPI(
        title=settings.app_title,
        description=settings.app_description,
        version=settings.app_version,
        lifespan=_build_lifespan(settings, user_repository, clock),
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        token = set_request_id(request.headers.get("X-Request-ID"))
        start_time = time.time()
        try:
            response = await call_next(request)
            process_time = time.time() - start_time
            main_logger.info(
                f"Request: {request.method} {request.url.path} - "
                f"Status: {response.status_code} - "
                f"Time: {process_time:.2f}s"
            )
            response.headers["X-Request-ID"] = get_request_id()
            return response
        finally:
            reset_request_id(token)

    allow_origins_list = get_cors_origins_list(settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins_list,
        allow_credentials=allow_origins_list != ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        max_age=settings.cors_max_age,
    )
    main_logger.info(f"CORS origins configured: {allow_origins_list}")

    # Global exception handlers
    @app.exception_handler(AuthServiceError)
    async def auth_service_exception_handler(request: Request, exc: AuthServiceError):
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        main_logger.info(f"Request validation failed: {len(exc.errors())} error(s)")
        fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
        detail = f"Invalid request: {', '.join(fields)}" if fields else "Invalid request"
        return JSONResponse(status_code=400, content={"detail": detail, "error_code": "validation_error"})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail},
                            headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        main_logger.error(f"Unhandled error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_code": "internal_error"},
        )

    app.include_router(auth_router, prefix="/api/v1")

    return app