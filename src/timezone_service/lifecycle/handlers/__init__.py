from .api_server_shutdown_handler import APIServerShutdownHandler

__all__ = [
    "APIServerShutdownHandler",
]
