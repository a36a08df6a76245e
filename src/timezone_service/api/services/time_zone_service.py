"""
API Time Zone Service - Business logic between the /time route and zoneinfo

Turns the raw query string into a TimeZoneRequest, resolves every name
against the system time-zone database, and formats one instant per zone.

The service holds no per-request state: every call to build_report() creates
its own TimeZoneReport, so a single instance can be shared by concurrent
requests.
"""

from datetime import datetime, timezone, tzinfo
from typing import Callable, Mapping, Optional, Sequence, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from timezone_service.api.middleware.error_handler import InvalidTimeZoneError
from timezone_service.models.enums import LogCategory
from timezone_service.models.time_zone import TimeZoneRequest, TimeZoneReport, UTC_KEY
from timezone_service.utils.logger import get_logger
from timezone_service.utils.time_format import format_default, format_rfc822

log = get_logger().for_category(LogCategory.ZONE)

TZ_QUERY_PARAM = "tz"
LOCAL_ZONE_NAME = "Local"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_time_zones_from_query(query: Mapping) -> TimeZoneRequest:
    """
    Build the requested zone set from the query parameters.

    Only the first occurrence of ``tz`` is used. Its value is split on ","
    without trimming, so "A, B" asks for "A" and " B".

    Args:
        query: Starlette QueryParams, or any mapping of name -> list of values

    Returns:
        TimeZoneRequest (empty when ``tz`` is absent)
    """
    if hasattr(query, "getlist"):
        values: Sequence[str] = query.getlist(TZ_QUERY_PARAM)
    else:
        values = query.get(TZ_QUERY_PARAM) or []

    if not values:
        return TimeZoneRequest()

    return TimeZoneRequest.from_names(values[0].split(","))


def resolve_zone(name: str) -> tzinfo:
    """
    Look up a zone name in the time-zone database.

    "" and "UTC" resolve to UTC, "Local" to the host zone.

    Raises:
        InvalidTimeZoneError: unknown or malformed name
    """
    if name in ("", UTC_KEY):
        return timezone.utc
    if name == LOCAL_ZONE_NAME:
        return datetime.now().astimezone().tzinfo

    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        log.debug(f"Zone lookup failed: {type(e).__name__}", zone=name)
        raise InvalidTimeZoneError(name) from e


class TimeZoneService:
    """Formats the current instant for a set of zones"""

    def __init__(self, clock: Optional[Clock] = None):
        """
        Args:
            clock: Returns the current instant as an aware datetime
                   (defaults to the system clock in UTC)
        """
        self._clock = clock or utc_now

    def now(self) -> datetime:
        return self._clock().astimezone(timezone.utc)

    def build_report(self, request: Union[TimeZoneRequest, Sequence[str]]) -> TimeZoneReport:
        """
        Format the current instant in every requested zone.

        The instant is read once, so all entries describe the same moment.
        With no zones requested, the report holds a single RFC 822 "UTC" entry.

        Raises:
            InvalidTimeZoneError: for the first name that does not resolve;
                nothing resolved before it is returned
        """
        if not isinstance(request, TimeZoneRequest):
            request = TimeZoneRequest.from_names(request)

        now = self.now()
        report = TimeZoneReport()

        if request.is_empty:
            report.add(UTC_KEY, format_rfc822(now))
            return report

        for name in request:
            zone = resolve_zone(name)
            report.add(name, format_default(now.astimezone(zone)))

        return report
