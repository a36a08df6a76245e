"""
API Dependencies - TimeZoneService access for FastAPI endpoints

Pattern:
1. create_app() builds a TimeZoneService and calls set_time_zone_service()
   which stores it on that app's state
2. Endpoints use get_time_zone_service() via Depends()
3. Tests swap the service with app.dependency_overrides

Each app carries its own service, so two apps built in one process never
share a clock.

Example:
    @router.get("/time")
    def get_time(service: TimeZoneService = Depends(get_time_zone_service)):
        ...
"""

from fastapi import FastAPI, Request

from timezone_service.api.services.time_zone_service import TimeZoneService


def set_time_zone_service(app: FastAPI, service: TimeZoneService) -> None:
    """Store the service used by the app's /time endpoint."""
    app.state.time_zone_service = service


async def get_time_zone_service(request: Request) -> TimeZoneService:
    """
    FastAPI dependency returning the app's TimeZoneService.

    The service is stateless, so one instance serves all requests.
    Falls back to a system-clock service if none was registered.
    """
    service = getattr(request.app.state, "time_zone_service", None)
    if service is None:
        service = TimeZoneService()
        request.app.state.time_zone_service = service
    return service
