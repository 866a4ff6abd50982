"""FastAPI application factory and configuration."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from ..broker import InvalidCommandRequest
from .schemas import ErrorResponse

logger = logging.getLogger(__name__)


def create_app(
    title: str = "iClock API",
    version: str = "1.0.0",
    enable_metrics: bool = True,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        title: API title for OpenAPI documentation
        version: API version
        enable_metrics: Whether to enable Prometheus metrics

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=title,
        version=version,
        description="""
# iClock API

Command broker for attendance terminals speaking the iClock push protocol.

## Device endpoints (plain text)

- `GET /iclock/getrequest.aspx?SN=<sn>`: poll for pending commands (`C:<id>:<command>` lines)
- `GET /iclock/devicecmd?SN=<sn>&info=C:<id>:OK`: batch command acknowledgment
- `POST /iclock/devicecmd.aspx`: single acknowledgment as `ID`, `Return`, `CMD` form fields
- `GET|POST /iclock/cdata.aspx`: handshake and ATTLOG / OPERLOG table uploads

Device endpoints answer `OK` whenever there is nothing else to say, including
for unknown devices, malformed lines and stale acknowledgments.

## Operator endpoints (JSON)

- `POST /queue-command`: queue a command, returns it with its id
- `GET /commands/{sn}`: inspect a device queue
- `GET /data`: uploaded users and attendance logs
        """,
        license_info={
            "name": "MIT",
        },
        openapi_tags=[
            {
                "name": "devices",
                "description": "Endpoints polled by attendance terminals",
            },
            {
                "name": "commands",
                "description": "Queue and inspect device commands",
            },
            {
                "name": "data",
                "description": "Records uploaded by devices",
            },
            {
                "name": "health",
                "description": "Health check endpoints for monitoring system status",
            },
        ],
    )

    # =========================================================================
    # CORS Middleware
    # =========================================================================
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors."""
        errors = []
        for error in exc.errors():
            error_dict = {
                "loc": list(error.get("loc", [])),
                "msg": str(error.get("msg", "")),
                "type": str(error.get("type", "")),
            }
            if "input" in error:
                error_dict["input"] = str(error["input"])
            errors.append(error_dict)

        logger.warning(f"Validation error on {request.url}: {len(errors)} error(s)")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ErrorResponse(error="Validation error", detail=errors).model_dump(),
        )

    @app.exception_handler(InvalidCommandRequest)
    async def invalid_command_handler(
        request: Request, exc: InvalidCommandRequest
    ) -> JSONResponse:
        """Handle operator requests missing required fields."""
        logger.warning(f"Bad request on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error=str(exc)).model_dump(),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.error(f"Unexpected error on {request.url}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error="Internal server error",
                detail=str(exc) if logger.isEnabledFor(logging.DEBUG) else None,
            ).model_dump(),
        )

    # =========================================================================
    # Import and Include Routers
    # =========================================================================

    from .routes import commands, data, health, iclock

    app.include_router(iclock.router, tags=["devices"])
    app.include_router(commands.router, tags=["commands"])
    app.include_router(data.router, tags=["data"])
    app.include_router(health.router, tags=["health"])

    # =========================================================================
    # Prometheus Metrics
    # =========================================================================

    if enable_metrics:
        instrumentator = Instrumentator(
            should_group_status_codes=True,
            should_ignore_untemplated=True,
            should_respect_env_var=False,
            should_instrument_requests_inprogress=True,
            excluded_handlers=["/metrics"],
            inprogress_name="fastapi_inprogress",
            inprogress_labels=True,
        )
        instrumentator.instrument(app).expose(app, endpoint="/metrics")
        logger.info("Prometheus metrics enabled at /metrics")

    # Catch-all must be registered after every other route, /metrics included
    app.include_router(iclock.fallback_router)

    logger.info(f"FastAPI application created: {title} v{version}")

    return app
