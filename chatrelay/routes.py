import uuid
from contextlib import asynccontextmanager

from anyio import to_thread
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.file_routes import router as file_router
from .api.message_routes import router as message_router
from .api.session_routes import router as session_router
from .errors import error_payload
from .logging_config import logger
from .services import RelayService
from .settings import settings


async def handle_unexpected_error(request: Request, exc: Exception):
    """
    Last-resort handler: a failing request is answered with a structured 500
    and logged with an error id, the process keeps serving.
    """
    error_id = uuid.uuid4().hex
    logger.exception(
        "Unhandled error %s %s (error_id=%s)",
        request.method,
        request.url.path,
        error_id,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error_code": "internal_error",
            "message": "Internal server error, please retry later",
            "error_id": error_id,
        },
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    """Malformed requests are client errors and never reach the relay state."""
    errors = [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": str(err.get("msg", "")),
            "type": str(err.get("type", "")),
        }
        for err in exc.errors()
    ]
    logger.info("Malformed request %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_payload(
            status.HTTP_400_BAD_REQUEST,
            error="bad_request",
            message="Malformed request",
            details={"errors": errors},
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    - startup: cap the request worker pool, build the relay unless one was
      installed already, start the idle session sweep
    - shutdown: stop the sweep and drain pending persistence writes
    """
    to_thread.current_default_thread_limiter().total_tokens = settings.worker_pool_size

    relay = getattr(app.state, "relay", None)
    if relay is None:
        relay = RelayService.from_settings(settings)
        app.state.relay = relay
    relay.start()
    try:
        yield
    finally:
        relay.stop()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Chat Relay",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=settings.cors_methods,
        allow_headers=settings.cors_headers,
    )

    app.include_router(message_router)
    app.include_router(file_router)
    app.include_router(session_router)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        client_host = request.client.host if request.client else "-"
        logger.info("HTTP %s %s from %s", request.method, request.url.path, client_host)
        try:
            response = await call_next(request)
        except Exception as exc:  # pragma: no cover - exercised via tests
            response = await handle_unexpected_error(request, exc)
        logger.info(
            "HTTP %s %s -> %s",
            request.method,
            request.url.path,
            response.status_code,
        )
        return response

    return app
