from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from .error import ClientError, ServerError
from identity_service.domain.entities import ErrorCode
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    if exc.status_code == status.HTTP_503_SERVICE_UNAVAILABLE:
        message = "Service temporarily unavailable"
    else:
        message = "Internal server error"
    error_dict = {"code": exc.base_error.code, "message": message}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_pool_timeout(request: Request, exc: PoolTimeoutError):
    error_dict = {
        "code": ErrorCode.SERVICE_UNAVAILABLE.value,
        "message": "Service temporarily unavailable",
    }
    logger.warning("Database connection pool timeout")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"error": error_dict}
    )


def create_app(ApplicationConfig) -> FastAPI:
    logging.basicConfig(level=ApplicationConfig.LOG_LEVEL)

    app = FastAPI(title="Identity Service", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["x-access-token", "x-refresh-token"],
    )

    from identity_service.api.routes import (
        auth,
        health_check,
        security_questions,
        sessions,
        users,
    )

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(users.router, tags=["Users"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(sessions.router, tags=["Sessions"])
    app.include_router(security_questions.router, tags=["Security Questions"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(PoolTimeoutError, handle_pool_timeout)

    return app
