"""
main_asyncio.py — Application entry point for the timezone service
-------------------------------------------------------------------

Responsible for:
- loading configuration and configuring the logger
- building the FastAPI app and starting the listener in the background
- waiting for SIGINT/SIGTERM (or a listener failure)
- graceful shutdown with a bounded drain deadline

Exit status:
    0  graceful shutdown (also when the drain deadline was exceeded)
    1  the listener failed to start or stopped unexpectedly
    2  invalid configuration
"""

import sys

# Set UTF-8 encoding for output (log symbols)
if hasattr(sys.stdout, 'reconfigure') and sys.stdout.encoding != 'UTF-8':
    sys.stdout.reconfigure(encoding='utf-8')  # type: ignore

import asyncio

from timezone_service.api.main import create_app
from timezone_service.lifecycle import APIServerWrapper, ListenerError, ShutdownCoordinator
from timezone_service.lifecycle.handlers import APIServerShutdownHandler
from timezone_service.managers.config_manager import ConfigError, ConfigManager, ServerSettings
from timezone_service.models.enums import LogCategory
from timezone_service.utils.logger import configure_logger, get_logger

log = get_logger().for_category(LogCategory.SYSTEM)

EXIT_OK = 0
EXIT_LISTENER_FAILURE = 1
EXIT_CONFIG_ERROR = 2

# Slack on top of the drain deadline for force-closing connections
SHUTDOWN_SLACK = 5.0


async def main(settings: ServerSettings) -> int:
    """Run the service until a signal or a listener failure; return the exit status."""
    log.info("Starting timezone service...")

    app = create_app(settings)
    api_wrapper = APIServerWrapper(
        app,
        host=settings.host,
        port=settings.port,
        idle_timeout=settings.idle_timeout,
        shutdown_timeout=settings.shutdown_timeout,
    )

    coordinator = ShutdownCoordinator(
        timeout_per_handler=settings.shutdown_timeout + SHUTDOWN_SLACK,
        total_timeout=settings.shutdown_timeout + SHUTDOWN_SLACK,
    )
    loop = asyncio.get_running_loop()
    coordinator.setup_signal_handlers(loop)

    try:
        await api_wrapper.start()
    except ListenerError as e:
        log.error(f"FATAL: error starting server: {e}")
        coordinator.remove_signal_handlers()
        return EXIT_LISTENER_FAILURE

    api_handler = APIServerShutdownHandler(api_wrapper)
    coordinator.register(api_handler)
    coordinator.watch(api_wrapper.task, "HTTP listener")

    log.info("🏁 Service ready. Waiting for exit signal...")

    await coordinator.wait_for_shutdown()
    await coordinator.shutdown_all()

    if coordinator.failed:
        log.error(f"FATAL: {coordinator.reason}")
        return EXIT_LISTENER_FAILURE

    if coordinator.deadline_exceeded or api_handler.drained is False:
        log.warn("Shutdown finished after the drain deadline; remaining connections were closed")

    log.info("👋 Timezone service shut down cleanly.")
    return EXIT_OK


def load_settings() -> ServerSettings:
    settings = ConfigManager().load()
    configure_logger(min_level=settings.log_level)
    return settings


def run() -> None:
    """Console-script entry point."""
    try:
        settings = load_settings()
    except ConfigError as e:
        log.error(f"FATAL: invalid configuration: {e}")
        sys.exit(EXIT_CONFIG_ERROR)

    try:
        exit_code = asyncio.run(main(settings))
    except KeyboardInterrupt:
        log.info("Keyboard interrupt received")
        exit_code = EXIT_OK

    sys.exit(exit_code)


if __name__ == "__main__":
    run()
