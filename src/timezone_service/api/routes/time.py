"""
Time routes

Provides:
- GET <base>/time             - current time in UTC (RFC 822)
- GET <base>/time?tz=A,B,...  - current time in each named zone

Only GET is routed; other methods on this path get 405 from the router.
The handler is synchronous so zone lookups, which may read tzdata files,
run in the threadpool instead of on the event loop.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from timezone_service.api.dependencies import get_time_zone_service
from timezone_service.api.middleware.error_handler import ReportSerializationError
from timezone_service.api.schemas.time import TimeZoneReportResponse
from timezone_service.api.services.time_zone_service import (
    TimeZoneService,
    parse_time_zones_from_query,
)

router = APIRouter(tags=["Time"])


@router.get(
    "/time",
    response_model=TimeZoneReportResponse,
    summary="Current time per zone",
    responses={
        404: {"description": "One of the requested zones is not a valid zone identifier"},
        500: {"description": "Report could not be serialized"},
    },
)
def get_time(
    request: Request,
    service: TimeZoneService = Depends(get_time_zone_service),
):
    """
    Get the current time in the zones listed in ``tz``.

    Query:
        tz: comma-separated zone identifiers, e.g. America/New_York,Europe/London.
            Only the first ``tz`` parameter is read.

    Returns:
        {"timezones": {zone: timestamp, ...}}

    Raises:
        InvalidTimeZoneError: first zone that doesn't resolve (404)
        ReportSerializationError: report could not be encoded (500)
    """
    zones = parse_time_zones_from_query(request.query_params)
    report = service.build_report(zones)

    try:
        body = TimeZoneReportResponse.model_validate(report.to_payload())
        return JSONResponse(content=body.model_dump(mode="json"))
    except (ValidationError, TypeError, ValueError) as e:
        raise ReportSerializationError(str(e)) from e
