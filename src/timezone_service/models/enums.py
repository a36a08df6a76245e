"""
Enums shared across the timezone service
"""

from enum import Enum, auto


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()      # Configuration loading, validation
    API = auto()         # Requests, error responses
    ZONE = auto()        # Zone resolution
    SYSTEM = auto()      # Startup, exit
    SHUTDOWN = auto()    # Shutdown handlers
    LIFECYCLE = auto()   # Listener start/stop

    GENERAL = auto()     # Default general category
