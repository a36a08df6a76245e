"""
Lifecycle subsystem
-------------------

Exports the public API for:
- running the API server in the background
- graceful shutdown on SIGINT/SIGTERM
- shutdown handlers

External code should import from:
    from timezone_service.lifecycle import ShutdownCoordinator, APIServerWrapper
    from timezone_service.lifecycle.handlers import APIServerShutdownHandler
"""

from .api_server_wrapper import APIServerWrapper, ListenerError
from .shutdown_coordinator import ShutdownCoordinator
from .shutdown_protocol import IShutdownHandler
from . import handlers

__all__ = [
    "APIServerWrapper",
    "ListenerError",
    "ShutdownCoordinator",
    "IShutdownHandler",
    "handlers",
]
