#!/usr/bin/env python3

"""
Main application entry point for the Image Gallery service.

Architecture: FastAPI application with a PostgreSQL database, external image
providers and a local file store for generated images.
Key Features: Lifecycle management, database health checks, centralized error
mapping, CORS configuration.
"""

import asyncio
import sys

if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

import errno
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.auth import router as auth_router
from app.api.images import router as images_router
from app.api.uploads import router as uploads_router
from app.config import settings
from app.db import check_db_connection, close_db, init_db
from app.services.image_provider_service import (
    close_all_image_clients,
    initialize_all_image_clients,
)
from app.utils.exceptions import AppError
from app.utils.logger import setup_logger

logger = setup_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup...")
    try:
        initialize_all_image_clients()

        logger.info("Initializing database...")
        await init_db()

        if not await check_db_connection():
            logger.critical("Database connectivity check failed.")
            raise SystemExit("Database connection failed.")

    except Exception as e:
        logger.critical(f"Startup error: {e}")
        raise SystemExit(f"Startup failed: {e}") from e

    logger.info("Image Gallery API startup successful.")

    yield

    logger.info("Image Gallery API shutdown...")
    await close_all_image_clients()
    await close_db()
    logger.info("Shutdown complete.")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc!r}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request.") if errors else "Invalid request."
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": message},
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(
            f"Database error on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "A database error occurred."},
        )

    @app.exception_handler(OSError)
    async def oserror_exception_handler(request: Request, exc: OSError):
        logger.error(f"OSError caught: {exc}, errno: {exc.errno}")
        if exc.errno in [errno.ETIMEDOUT, errno.ECONNREFUSED]:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"message": settings.db_unavailable_hint},
            )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "A server error occurred."},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled error on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "A server error occurred."},
        )


def create_app():
    app = FastAPI(title="Image Gallery API", lifespan=lifespan)

    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(images_router)
    app.include_router(uploads_router)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    return app


app = create_app()


def main():
    port = int(settings.server_port)
    host = settings.server_host

    logger.info(f"Starting Image Gallery API server on {host}:{port}")

    try:
        uvicorn.run(app, host=host, port=port, workers=settings.server_workers)
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
