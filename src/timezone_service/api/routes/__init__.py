"""
API Routes - HTTP endpoint handlers

Routes receive HTTP requests, call services, and return HTTP responses.
Each router is included in the main FastAPI app under the configured base path.
"""

from . import time

__all__ = ["time"]
