import pytest
from datetime import datetime, timezone
from fastapi.testclient import TestClient

from timezone_service.api.main import create_app
from timezone_service.api.services.time_zone_service import TimeZoneService
from timezone_service.models.enums import LogLevel
from timezone_service.utils.logger import configure_logger, get_logger


# 2024-01-01T00:00:00Z, the instant used in the endpoint examples
FIXED_NOW = datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def quiet_logger():
    """Plain output during tests; restore the singleton afterwards."""
    logger = get_logger()
    saved = (logger.min_level, logger.use_colors)
    configure_logger(min_level=LogLevel.INFO, use_colors=False)
    yield logger
    configure_logger(min_level=saved[0], use_colors=saved[1])


@pytest.fixture
def fixed_service():
    return TimeZoneService(clock=lambda: FIXED_NOW)


@pytest.fixture
def app(fixed_service):
    return create_app(service=fixed_service, docs_enabled=False)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
