from __future__ import annotations
import asyncio
import contextlib
import uvicorn
from fastapi import FastAPI
from typing import Optional
from timezone_service.utils.logger import get_logger
from timezone_service.models.enums import LogCategory

log = get_logger().for_category(LogCategory.LIFECYCLE)

# Extra time granted after force_exit for uvicorn to close its sockets
FORCE_EXIT_GRACE = 2.0


class ListenerError(Exception):
    """The HTTP listener failed to start or stopped without being asked to."""
    pass


class APIServerWrapper:
    """
    Wrapper for running Uvicorn inside an asyncio task without Uvicorn's
    signal handlers interfering with the shutdown coordinator.

    Behaviour:
      - start() launches uvicorn.Server.serve() as a background task and
        returns once uvicorn reports it is listening. A bind error or an
        early exit raises ListenerError instead.
      - stop() asks uvicorn to exit, lets in-flight requests drain for up to
        shutdown_timeout seconds, then forces the listener closed.
      - If the listener dies on its own, the serve task finishes with
        ListenerError; the shutdown coordinator watches for that.
    """

    def __init__(
        self,
        app: FastAPI,
        host: str = "0.0.0.0",
        port: int = 8080,
        idle_timeout: float = 5.0,
        shutdown_timeout: float = 30.0,
    ):
        self.app = app
        self.host = host
        self.port = port
        self.idle_timeout = idle_timeout
        self.shutdown_timeout = shutdown_timeout
        self._server: Optional[uvicorn.Server] = None
        self._serve_task: Optional[asyncio.Task] = None
        self._stop_requested = False

    # ----------------------------------------------------------------------
    # INTERNAL
    # ----------------------------------------------------------------------
    def _create_server(self) -> uvicorn.Server:
        """Create a uvicorn.Server instance with signal handling disabled."""
        config = uvicorn.Config(
            app=self.app,
            host=self.host,
            port=self.port,
            loop="asyncio",
            log_level="info",
            access_log=False,
            server_header=False,
            timeout_keep_alive=self.idle_timeout,
        )

        server = uvicorn.Server(config)

        # Older uvicorn installs handlers in install_signal_handlers(),
        # newer releases in the capture_signals() context manager.
        server.install_signal_handlers = lambda: None  # type: ignore
        server.capture_signals = contextlib.nullcontext  # type: ignore

        return server

    async def _serve(self) -> None:
        """Run uvicorn and turn any exit we didn't ask for into ListenerError."""
        try:
            await self._server.serve()
        except SystemExit as e:
            # uvicorn calls sys.exit(1) when it can't bind or lifespan startup fails
            raise ListenerError(
                f"listener on {self.host}:{self.port} failed to start (exit code {e.code})"
            ) from None

        if not self._stop_requested:
            raise ListenerError(f"listener on {self.host}:{self.port} stopped unexpectedly")

    # ----------------------------------------------------------------------
    # PUBLIC API
    # ----------------------------------------------------------------------
    async def start(self, *, wait_started_timeout: float = 5.0) -> None:
        """
        Start uvicorn in the background and wait until it is listening.

        Raises:
            RuntimeError: if already running
            ListenerError: if the listener could not start in time
        """
        if self.is_running:
            raise RuntimeError("API server already started")

        self._server = self._create_server()
        self._stop_requested = False

        log.info(f"🌐 Launching API server on http://{self.host}:{self.port}")

        self._serve_task = asyncio.create_task(self._serve(), name="UvicornServe")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + wait_started_timeout
        while loop.time() < deadline:
            if getattr(self._server, "started", False):
                log.info(f"🌐 Listening on port: {self.port}")
                return
            if self._serve_task.done():
                break
            await asyncio.sleep(0.05)

        if self._serve_task.done():
            error = self._serve_task.exception()
            self._reset()
            if isinstance(error, ListenerError):
                raise error
            raise ListenerError(f"listener on {self.host}:{self.port} failed to start: {error}") from error

        await self.stop(timeout=FORCE_EXIT_GRACE)
        raise ListenerError(f"listener did not start within {wait_started_timeout}s")

    async def stop(self, *, timeout: Optional[float] = None) -> bool:
        """
        Stop the API server gracefully.

        Steps:
          1. set should_exit: uvicorn stops accepting and drains connections
          2. wait up to `timeout` (default shutdown_timeout) for serve() to return
          3. past the deadline set force_exit, then cancel the serve task

        Returns:
            True if the server drained within the deadline, False otherwise
        """
        if self._server is None or self._serve_task is None:
            log.warn("API server stop() called but server was not running")
            return True

        timeout = self.shutdown_timeout if timeout is None else timeout
        clean = True

        log.info(f"🌐 Stopping API server (drain deadline {timeout}s)...")
        self._stop_requested = True
        self._server.should_exit = True

        try:
            await asyncio.wait_for(asyncio.shield(self._serve_task), timeout=timeout)
            log.info("🌐 API server shutdown completed")
        except asyncio.TimeoutError:
            clean = False
            log.error(f"🌐 API server shutdown exceeded {timeout}s; closing remaining connections")
            self._server.force_exit = True
            with contextlib.suppress(asyncio.TimeoutError, ListenerError):
                await asyncio.wait_for(asyncio.shield(self._serve_task), timeout=FORCE_EXIT_GRACE)
        except ListenerError as e:
            log.error(f"Error during API server shutdown: {e}")

        if not self._serve_task.done():
            self._serve_task.cancel()
            with contextlib.suppress(asyncio.CancelledError, asyncio.TimeoutError):
                await asyncio.wait_for(self._serve_task, timeout=1.0)
            log.debug("Uvicorn serve task cancelled")

        self._reset()
        log.info("🌐 API server stopped and port released")
        return clean

    def _reset(self) -> None:
        self._server = None
        self._serve_task = None

    # ----------------------------------------------------------------------
    # PROPERTIES
    # ----------------------------------------------------------------------
    @property
    def is_running(self) -> bool:
        """Return whether a uvicorn serve task is active."""
        return self._serve_task is not None and not self._serve_task.done()

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._serve_task

    @property
    def server(self) -> Optional[uvicorn.Server]:
        return self._server
