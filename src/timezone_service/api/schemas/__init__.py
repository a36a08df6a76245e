"""
Pydantic schemas for API responses
"""

from .time import TimeZoneReportResponse, HealthResponse

__all__ = ["TimeZoneReportResponse", "HealthResponse"]
