"""
Models package - Data models for the timezone service
"""

from .enums import LogLevel, LogCategory
from .time_zone import TimeZoneRequest, TimeZoneReport

__all__ = [
    'LogLevel',
    'LogCategory',
    'TimeZoneRequest',
    'TimeZoneReport',
]
