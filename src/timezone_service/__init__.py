"""
Timezone Service

HTTP endpoint reporting the current time in one or more named time zones.

Entry point:
    timezone-service            (console script)
    python -m timezone_service
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
