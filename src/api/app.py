from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
import logging

logger = logging.getLogger(__name__)


def error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}


async def handle_client_error(request: Request, exc: ClientError):
    logger.warning(
        f"Client error on {request.method} {request.url.path}: {exc.base_error.code}"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.base_error.code, exc.base_error.message),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    # Only field locations are echoed back, never submitted values
    fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
    logger.info(f"Rejected request body on {request.url.path}: {fields}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body("VALIDATION_ERROR", f"Invalid fields: {', '.join(fields)}"),
    )


async def handle_server_error(request: Request, exc: ServerError):
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(exc.base_error.code, "Internal server error"),
    )


def create_app(ApplicationConfig) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        scheduler = None
        if ApplicationConfig.RETENTION_SWEEP_ENABLED:
            from src.app.services.retention_scheduler import RetentionScheduler
            from src.depends import unit_of_work_scope

            scheduler = RetentionScheduler(
                unit_of_work_scope, ApplicationConfig.RETENTION_SWEEP_INTERVAL_SECONDS
            )
            scheduler.start()
        yield
        if scheduler is not None:
            await scheduler.stop()

    app = FastAPI(title="Invitations & Credits API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import admin, audit, credits, health_check, invitations, workflows

    for router in (
        health_check.router,
        invitations.router,
        workflows.router,
        credits.router,
        audit.router,
        admin.router,
    ):
        app.include_router(router)

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
