"""FastAPI application entry point."""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load .env file before importing settings
load_dotenv()

import structlog  # noqa: E402
from fastapi import FastAPI, Response  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from . import __description__, __version__  # noqa: E402
from .api.error_handlers import (  # noqa: E402
    general_exception_handler,
    queue_io_exception_handler,
    unexpected_exception_handler,
    validation_exception_handler,
)
from .api.middleware import (  # noqa: E402
    CorrelationIDMiddleware,
    MetricsMiddleware,
    RequestLoggingMiddleware,
)
from .api.v1.router import router as v1_router  # noqa: E402
from .config.settings import ApplicationSettings, get_settings  # noqa: E402
from .core.dependency_container import (  # noqa: E402
    DependencyContainer,
    set_container,
)
from .domain.exceptions import LeadCaptureException, QueueIOError  # noqa: E402
from .observability.logging import LogFormat, LogLevel, setup_logging  # noqa: E402
from .observability.metrics import MetricsCollector  # noqa: E402

logger = structlog.get_logger()


def configure_logging(settings: ApplicationSettings) -> None:
    """Apply the observability settings to structlog."""
    observability = settings.observability
    setup_logging(
        level=LogLevel(observability.log_level.value),
        format_type=LogFormat(observability.log_format),
        log_file=observability.log_file,
        include_caller_info=settings.debug,
    )


def create_app(settings: ApplicationSettings | None = None) -> FastAPI:
    """Build the application and its dependency container."""
    settings = settings or get_settings()
    configure_logging(settings)

    metrics = MetricsCollector()
    container = DependencyContainer(settings, metrics=metrics)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        set_container(container)
        await container.start()
        logger.info(
            "Lead capture service started",
            environment=settings.environment.value,
            remote_configured=container.gateway.is_configured,
        )
        try:
            yield
        finally:
            await container.shutdown()
            set_container(None)

    app = FastAPI(
        title=settings.app_name,
        description=__description__,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.container = container
    app.state.settings = settings

    # Add middleware
    app.add_middleware(RequestLoggingMiddleware)
    if settings.observability.metrics_enabled:
        app.add_middleware(MetricsMiddleware, metrics_collector=metrics)
    app.add_middleware(CorrelationIDMiddleware)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Add exception handlers
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(QueueIOError, queue_io_exception_handler)
    app.add_exception_handler(LeadCaptureException, general_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)

    # Include API routers
    app.include_router(v1_router)

    if settings.observability.metrics_enabled:

        @app.get(settings.observability.metrics_path, include_in_schema=False)
        async def metrics_endpoint() -> Response:
            """Prometheus exposition."""
            payload, content_type = metrics.render()
            return Response(content=payload, media_type=content_type)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": settings.app_name,
            "version": __version__,
            "status": "running",
            "docs_url": "/docs",
        }

    return app


app = create_app()


def main() -> None:
    """Main entry point for production deployment."""
    import uvicorn

    settings = get_settings()
    port = int(os.getenv("PORT", settings.port))
    host = os.getenv("HOST", settings.host)

    logger.info("Starting server", host=host, port=port)
    uvicorn.run(
        "lead_capture.main:app",
        host=host,
        port=port,
        workers=1,
        log_level=settings.observability.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
