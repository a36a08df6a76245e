"""
Time schemas - Pydantic models for /time and /health responses
"""

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class TimeZoneReportResponse(BaseModel):
    """Current time per requested zone"""
    model_config = ConfigDict(
        strict=True,
        json_schema_extra={
            "example": {
                "timezones": {
                    "America/New_York": "2023-12-31 19:00:00 -0500 EST",
                    "Europe/London": "2024-01-01 00:00:00 +0000 GMT",
                }
            }
        },
    )

    timezones: Dict[str, str] = Field(
        description="Zone name -> formatted timestamp ('UTC' when no zone was requested)"
    )


class HealthResponse(BaseModel):
    """Liveness probe payload"""
    status: str = Field(description="Always 'healthy' while the app is serving")
    service: str
    version: str
