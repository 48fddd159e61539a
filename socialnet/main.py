"""
FastAPI Application Entry Point
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException

from socialnet.api.router import api_router
from socialnet.api.ws import router as ws_router
from socialnet.core.config import settings
from socialnet.core.errors import (
    AppError,
    app_exception_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from socialnet.core.logging import RequestIDMiddleware, RequestLoggingMiddleware, get_logger, setup_logging
from socialnet.infra.db import close_db_connection, init_models
from socialnet.services.notifications import relay

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging()
    if settings.is_sqlite:
        await init_models()
    logger.info("app.startup", env=settings.env)

    yield

    # Shutdown
    await relay.drain()
    await close_db_connection()
    logger.info("app.shutdown")


tags_metadata = [
    {"name": "auth", "description": "Signup, login, token refresh and password reset."},
    {"name": "profile", "description": "Read and edit the current user's profile."},
    {"name": "interests", "description": "Categorized, rated interests."},
    {"name": "friend", "description": "Friend requests and friendships."},
    {"name": "notifications", "description": "Notification inbox."},
    {"name": "websocket", "description": "Real-time notification stream."},
    {"name": "health", "description": "System health check."},
]


def create_app() -> FastAPI:
    app = FastAPI(
        title="socialnet Backend",
        description="""
socialnet API powers the social app: accounts, profiles, interests, friends
and notifications.
""",
        version="0.1.0",
        openapi_tags=tags_metadata,
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        swagger_ui_parameters={"persistAuthorization": True},
        lifespan=lifespan,
    )

    # Middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_credentials,
        allow_methods=settings.cors_methods,
        allow_headers=settings.cors_headers,
    )

    # Routes
    app.include_router(ws_router)
    app.include_router(api_router, prefix=settings.api_prefix)

    # Exception Handlers
    app.add_exception_handler(AppError, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn on the configured host and port"""
    uvicorn.run(
        "socialnet.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug and not settings.is_production,
    )


if __name__ == "__main__":
    run()
