"""
FastAPI Application Factory

Assembles the app:
- Routes (/time under the configured base path, /health)
- Middleware (access log, write timeout)
- Exception handlers (plain-text error bodies)
- Dependency setup (shared TimeZoneService)

The factory lets tests build an app with their own settings or clock,
while main_asyncio.py builds the production one.
"""

from typing import Optional

from fastapi import FastAPI

from timezone_service import __version__
from timezone_service.api.dependencies import set_time_zone_service
from timezone_service.api.middleware.error_handler import register_exception_handlers
from timezone_service.api.middleware.request_logging import register_request_middleware
from timezone_service.api.routes import time as time_routes
from timezone_service.api.schemas.time import HealthResponse
from timezone_service.api.services.time_zone_service import TimeZoneService
from timezone_service.managers.config_manager import ServerSettings
from timezone_service.models.enums import LogCategory
from timezone_service.utils.logger import get_logger

log = get_logger().for_category(LogCategory.SYSTEM)

SERVICE_NAME = "timezone-service"


def create_app(
    settings: Optional[ServerSettings] = None,
    service: Optional[TimeZoneService] = None,
    title: str = "Timezone Service",
    docs_enabled: bool = True,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Server settings (default: ServerSettings())
        service: TimeZoneService used by /time (default: system clock)
        title: API title (shown in docs)
        docs_enabled: Enable /docs and /redoc

    Returns:
        Configured FastAPI application ready to run
    """
    settings = settings or ServerSettings()

    app = FastAPI(
        title=title,
        description="Current time in one or more named time zones",
        version=__version__,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )

    log.info(f"Creating FastAPI app: {title} v{__version__}")

    # =========================================================================
    # Dependencies
    # =========================================================================

    set_time_zone_service(app, service or TimeZoneService())

    # =========================================================================
    # Exception Handlers & Middleware
    # =========================================================================

    register_exception_handlers(app)
    register_request_middleware(app, write_timeout=settings.write_timeout)

    log.debug("Exception handlers and request middleware registered")

    # =========================================================================
    # Routes
    # =========================================================================

    app.include_router(time_routes.router, prefix=settings.base_path)

    log.debug(f"Routes registered: time ({settings.base_path}/time)")

    @app.get("/health", tags=["System"], response_model=HealthResponse, summary="Health check")
    async def health_check():
        """Liveness probe"""
        return HealthResponse(status="healthy", service=SERVICE_NAME, version=__version__)

    return app
