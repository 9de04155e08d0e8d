"""FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from weather_reports.conditions import CONDITION_FLAGS
from weather_reports.config import WeatherReportsConfig, get_config
from weather_reports.exceptions import WeatherStoreError
from weather_reports.metrics import REQUEST_COUNT, REQUEST_DURATION
from weather_reports.routers import health, stats, weather
from weather_reports.store import ObservationStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Lifespan context manager for startup and shutdown events.

    Startup:
    - Open the observation store (unless one was opened by the caller)
    - Log configuration

    Shutdown:
    - Close the store if it was opened here
    """
    config: WeatherReportsConfig = app.state.config
    store: ObservationStore = app.state.store

    logger.info("Starting Weather Reports API")
    logger.info(f"Database path: {store.db_path}")

    owns_store = not store.is_open
    if owns_store:
        store.open()

    if store.check_connection():
        logger.info("Database connection successful")
    else:
        logger.warning("Database connection failed - API may not function properly")

    if config.in_memory:
        logger.warning("Running with an in-memory database; reports will not survive a restart")

    yield

    logger.info("Shutting down Weather Reports API")
    if owns_store:
        store.close()


def _route_path(request: Request) -> str:
    """Route template (``/weather/{report_id}``) so metrics stay low-cardinality."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


def _validation_message(exc: RequestValidationError) -> str:
    """Condense FastAPI's validation error list into one client-facing message."""
    errors = exc.errors()
    # No body at all means no station either
    if (
        len(errors) == 1
        and errors[0].get("type") == "missing"
        and tuple(errors[0].get("loc", ())) == ("body",)
    ):
        return "Station is required"

    for error in errors:
        if "station" in error.get("loc", ()):
            return "Station is required"

    if not errors:
        return "Invalid request"

    error = errors[0]
    field = next(
        (str(part) for part in reversed(error.get("loc", ())) if part in CONDITION_FLAGS),
        None
    )
    if field is not None:
        return f"Condition '{field}' must be a boolean"
    return f"Invalid request body: {error.get('msg', 'malformed input')}"


def create_app(
    config: Optional[WeatherReportsConfig] = None,
    store: Optional[ObservationStore] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Configuration; defaults to the environment-derived config
        store: Observation store to serve; defaults to one built from config.
            A store that is already open is left open on shutdown.

    Returns:
        Configured application
    """
    config = config or get_config()
    store = store or ObservationStore.from_config(config)

    app = FastAPI(
        title=config.api_title,
        version=config.api_version,
        description=config.api_description,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.config = config
    app.state.store = store

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_allow_credentials,
        allow_methods=config.cors_allow_methods,
        allow_headers=config.cors_allow_headers,
    )

    # Request logging and metrics middleware
    @app.middleware("http")
    async def logging_and_metrics_middleware(request: Request, call_next):
        """
        Middleware to log requests and collect Prometheus metrics.

        Tracks:
        - Request count by method, endpoint, and status
        - Request duration by method and endpoint
        """
        start_time = time.time()
        request_id = f"{int(start_time * 1000)}-{id(request)}"

        logger.info(
            f"Request started: {request.method} {request.url.path} "
            f"[{request_id}]"
        )

        response = await call_next(request)

        duration = time.time() - start_time
        endpoint = _route_path(request)

        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code
        ).inc()

        REQUEST_DURATION.labels(
            method=request.method,
            endpoint=endpoint
        ).observe(duration)

        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"[{request_id}] - {response.status_code} - {duration:.3f}s"
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        return response

    @app.exception_handler(WeatherStoreError)
    async def store_exception_handler(request: Request, exc: WeatherStoreError):
        """Map store errors to their status code with an ``{"error": ...}`` body."""
        if exc.status_code >= 500:
            logger.error(f"Store failure: {request.method} {request.url.path} - {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message}
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed request bodies are client errors (400), not 422."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _validation_message(exc)}
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Global exception handler for unhandled errors.

        Returns:
            500 error with sanitized error message
        """
        logger.error(
            f"Unhandled exception: {request.method} {request.url.path} - {str(exc)}",
            exc_info=True
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "path": str(request.url.path)
            }
        )

    # Prometheus metrics endpoint
    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        """Prometheus metrics in text format."""
        return Response(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )

    @app.get("/api/v1/info")
    async def api_info():
        """
        Get API version and configuration information.

        Returns:
            API metadata and available endpoints
        """
        return {
            "api": {
                "title": config.api_title,
                "version": config.api_version,
                "description": config.api_description
            },
            "endpoints": {
                "health": "/health",
                "docs": "/docs",
                "metrics": "/metrics",
                "weather": "/weather",
                "stats": "/stats/{station}"
            },
            "conditions": ["clear", *CONDITION_FLAGS],
            "storage": {
                "in_memory": config.in_memory
            }
        }

    # Include routers
    app.include_router(health.router)
    app.include_router(weather.router)
    app.include_router(stats.router)

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    config = get_config()
    uvicorn.run(
        "weather_reports.main:app",
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower()
    )


if __name__ == "__main__":
    run()
