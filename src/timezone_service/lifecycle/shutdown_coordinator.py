"""
Shutdown coordinator that orchestrates graceful shutdown of all components.

Manages signal handlers, critical task monitoring, shutdown sequencing and
error handling across multiple shutdown handlers in priority order.
"""

import asyncio
import signal
from typing import Dict, List, Optional, Set
from timezone_service.utils.logger import get_logger
from timezone_service.models.enums import LogCategory

log = get_logger().for_category(LogCategory.SHUTDOWN)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownCoordinator:
    """
    Coordinates graceful shutdown of multiple components.

    Keeps a list of shutdown handlers and runs them in priority order once
    shutdown is triggered, either by SIGINT/SIGTERM or by the failure of a
    watched critical task (the HTTP listener).

    Example:
        coordinator = ShutdownCoordinator(timeout_per_handler=35.0, total_timeout=40.0)
        coordinator.register(APIServerShutdownHandler(api_wrapper))
        coordinator.watch(api_wrapper.task, "HTTP listener")

        coordinator.setup_signal_handlers(loop)
        await coordinator.wait_for_shutdown()
        await coordinator.shutdown_all()
        exit_code = 1 if coordinator.failed else 0
    """

    def __init__(self, timeout_per_handler: float = 5.0, total_timeout: float = 15.0):
        """
        Initialize shutdown coordinator.

        Args:
            timeout_per_handler: Timeout for each individual handler (seconds)
            total_timeout: Total timeout for entire shutdown sequence (seconds)
        """
        self._handlers: List = []
        self._watched: Dict[asyncio.Task, str] = {}
        self._shutdown_event: Optional[asyncio.Event] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._timeout_per_handler = timeout_per_handler
        self._total_timeout = total_timeout
        self._shutdown_trigger: Dict[str, Optional[str]] = {"reason": None}
        self._failed = False
        self._deadline_exceeded = False

    def register(self, handler) -> None:
        """
        Register a shutdown handler.

        Handler must have:
        - shutdown_priority property (int)
        - async shutdown() method

        Args:
            handler: Object implementing IShutdownHandler protocol
        """
        if not hasattr(handler, "shutdown_priority"):
            raise ValueError(f"Handler {handler} missing shutdown_priority property")
        if not hasattr(handler, "shutdown"):
            raise ValueError(f"Handler {handler} missing shutdown() method")

        self._handlers.append(handler)
        log.debug(f"Registered shutdown handler: {handler.__class__.__name__}")

    def watch(self, task: asyncio.Task, description: str) -> None:
        """
        Monitor a critical task. If it fails, wait_for_shutdown() returns
        and the coordinator is marked as failed.
        """
        self._watched[task] = description
        log.debug(f"Watching critical task: {description}")

    def setup_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        """
        Install OS signal handlers for graceful shutdown.

        Registers SIGINT (Ctrl+C) and SIGTERM.

        Args:
            loop: Running asyncio event loop
        """
        self._ensure_event()
        self._loop = loop

        for sig in HANDLED_SIGNALS:
            loop.add_signal_handler(sig, lambda s=sig: self.trigger(s.name))

        log.info("Signal handlers installed (SIGINT, SIGTERM)")

    def remove_signal_handlers(self) -> None:
        if self._loop is None:
            return
        for sig in HANDLED_SIGNALS:
            self._loop.remove_signal_handler(sig)
        self._loop = None

    def trigger(self, reason: str) -> None:
        """Request shutdown (called from the signal handler)."""
        self._ensure_event()
        if self._shutdown_event.is_set():
            log.debug(f"Shutdown already in progress, ignoring {reason}")
            return
        self._shutdown_trigger["reason"] = reason
        log.info(f"Shutdown signal received: {reason}, attempting to shut down the server")
        self._shutdown_event.set()

    def _ensure_event(self) -> None:
        if self._shutdown_event is None:
            self._shutdown_event = asyncio.Event()

    def _handle_critical_task_completion(self, completed_task: asyncio.Task) -> bool:
        """
        Handle the completion of a critical task.

        ONLY triggers shutdown if the task FAILED (raised).
        Clean completion is logged and the task is no longer watched.

        Returns:
            True if task failed (should trigger shutdown), False otherwise
        """
        description = self._watched.pop(completed_task, completed_task.get_name())

        if completed_task.cancelled():
            log.debug(f"Critical task cancelled: {description}")
            return False

        error = completed_task.exception()
        if error is not None:
            log.error(f"FATAL: critical task failed: {description} - {error}")
            self._shutdown_trigger["reason"] = f"Task failure: {description}"
            self._failed = True
            return True

        log.debug(f"ℹ️  Critical task completed cleanly: {description}")
        return False

    def _check_critical_task_failures(self) -> bool:
        """Check watched tasks that already finished."""
        for task in [t for t in self._watched if t.done()]:
            if self._handle_critical_task_completion(task):
                return True
        return False

    async def wait_for_shutdown(self) -> Optional[str]:
        """
        Wait for shutdown signal or critical task failure.

        Returns:
            The shutdown reason (signal name or task failure)

        Raises:
            RuntimeError: If signal handlers weren't set up
        """
        if self._shutdown_event is None:
            raise RuntimeError("Call setup_signal_handlers() first")

        while not self._shutdown_event.is_set():
            if self._check_critical_task_failures():
                break

            wait_set: Set[asyncio.Future] = set(self._watched)
            shutdown_waiter = asyncio.create_task(self._shutdown_event.wait())
            wait_set.add(shutdown_waiter)

            try:
                await asyncio.wait(wait_set, return_when=asyncio.FIRST_COMPLETED)
            finally:
                # Only cancel our own waiter; the watched tasks keep running
                if not shutdown_waiter.done():
                    shutdown_waiter.cancel()

        log.debug("Shutdown triggered", reason=self.reason)
        return self.reason

    async def shutdown_all(self) -> None:
        """
        Execute graceful shutdown of all handlers in priority order.

        Handlers are called in descending priority order (highest first).
        Each handler has its own timeout (timeout_per_handler) and the entire
        sequence has a global timeout (total_timeout). Exceeding a timeout is
        logged and does not stop the remaining handlers.
        """
        log.info("🛑 Initiating graceful shutdown sequence...")
        log.info(f"   Reason: {self.reason or 'UNKNOWN'}")

        sorted_handlers = sorted(
            self._handlers, key=lambda h: h.shutdown_priority, reverse=True
        )

        loop = asyncio.get_running_loop()
        start_time = loop.time()

        for handler in sorted_handlers:
            handler_name = handler.__class__.__name__
            priority = handler.shutdown_priority

            elapsed = loop.time() - start_time
            remaining = self._total_timeout - elapsed
            if remaining <= 0:
                self._deadline_exceeded = True
                log.error(
                    f"⚠️  Total shutdown timeout exceeded ({elapsed:.1f}s > {self._total_timeout}s)"
                )
                break

            try:
                log.debug(f"Shutting down {handler_name} (priority={priority})...")

                await asyncio.wait_for(
                    handler.shutdown(), timeout=min(self._timeout_per_handler, remaining)
                )

                log.debug(f"✓ {handler_name} shutdown complete")

            except asyncio.TimeoutError:
                self._deadline_exceeded = True
                log.error(f"⚠️  {handler_name} shutdown timeout")

            except asyncio.CancelledError:
                log.debug(f"{handler_name} shutdown was cancelled")
                raise

            except Exception as e:
                log.error(f"❌ Error shutting down {handler_name}: {e}", exc_info=True)

        self.remove_signal_handlers()
        log.info("✓ Shutdown sequence complete")

    @property
    def reason(self) -> Optional[str]:
        return self._shutdown_trigger["reason"]

    @property
    def failed(self) -> bool:
        """True when shutdown was caused by a critical task failure."""
        return self._failed

    @property
    def deadline_exceeded(self) -> bool:
        return self._deadline_exceeded

    def get_handler(self, handler_type: type):
        """
        Get a registered handler by type.

        Args:
            handler_type: The handler class to find

        Returns:
            Handler instance or None if not found
        """
        for handler in self._handlers:
            if isinstance(handler, handler_type):
                return handler
        return None
