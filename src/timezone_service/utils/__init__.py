"""
Utility helpers for the timezone service
"""

from .logger import get_logger, get_category_logger, configure_logger
from .time_format import format_rfc822, format_default

__all__ = [
    'get_logger',
    'get_category_logger',
    'configure_logger',
    'format_rfc822',
    'format_default',
]
