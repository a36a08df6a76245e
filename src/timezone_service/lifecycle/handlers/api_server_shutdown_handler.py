from __future__ import annotations
from typing import TYPE_CHECKING, Optional

from timezone_service.lifecycle.shutdown_protocol import IShutdownHandler
from timezone_service.utils.logger import get_logger
from timezone_service.models.enums import LogCategory

if TYPE_CHECKING:
    from timezone_service.lifecycle.api_server_wrapper import APIServerWrapper

log = get_logger().for_category(LogCategory.SHUTDOWN)


class APIServerShutdownHandler(IShutdownHandler):
    """
    Shutdown handler for the API server (FastAPI + Uvicorn).

    Stops accepting connections and lets in-flight requests finish within
    the wrapper's drain deadline. Missing the deadline is logged but is not
    an error for the process: connections are closed and shutdown continues.

    Priority: 90
    """

    def __init__(self, api_wrapper: "APIServerWrapper", drain_timeout: Optional[float] = None):
        """
        Args:
            api_wrapper: APIServerWrapper instance managing the API server
            drain_timeout: Override for the wrapper's shutdown_timeout
        """
        self.api_wrapper = api_wrapper
        self.drain_timeout = drain_timeout
        self.drained: Optional[bool] = None

    @property
    def shutdown_priority(self) -> int:
        return 90

    async def shutdown(self) -> None:
        log.info("Stopping API server...")

        if self.api_wrapper.server is None:
            log.debug("API server not running")
            return

        try:
            self.drained = await self.api_wrapper.stop(timeout=self.drain_timeout)
        except Exception as e:
            self.drained = False
            log.error(f"Error shutting down the server: {e}", exc_info=True)
            return

        if not self.drained:
            log.error("Error shutting down the server: drain deadline exceeded")
