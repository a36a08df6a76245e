"""
API Service Layer

Services bridge between HTTP routes and the time-zone logic:
- Converting query strings to domain objects
- Resolving zones and formatting timestamps
- Raising domain errors that the exception handlers map to HTTP responses
"""

from .time_zone_service import (
    TimeZoneService,
    parse_time_zones_from_query,
    resolve_zone,
)

__all__ = [
    "TimeZoneService",
    "parse_time_zones_from_query",
    "resolve_zone",
]
