"""
Endpoint tests for GET /api/time using FastAPI's TestClient.
"""

import asyncio
import threading
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from timezone_service.api.dependencies import get_time_zone_service
from timezone_service.api.main import create_app
from timezone_service.api.services.time_zone_service import TimeZoneService
from timezone_service.managers.config_manager import ServerSettings
from timezone_service.models.time_zone import TimeZoneReport


def test_no_tz_returns_single_utc_entry(client):
    response = client.get("/api/time")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"timezones": {"UTC": "01 Jan 24 00:00 UTC"}}


def test_single_zone(client):
    response = client.get("/api/time", params={"tz": "America/New_York"})

    assert response.status_code == 200
    assert response.json() == {
        "timezones": {"America/New_York": "2023-12-31 19:00:00 -0500 EST"}
    }


def test_two_zones(client):
    response = client.get("/api/time?tz=America/New_York,Europe/London")

    assert response.status_code == 200
    assert response.json()["timezones"] == {
        "America/New_York": "2023-12-31 19:00:00 -0500 EST",
        "Europe/London": "2024-01-01 00:00:00 +0000 GMT",
    }


def test_duplicate_zone_collapses(client):
    response = client.get("/api/time?tz=Asia/Tokyo,Asia/Tokyo")

    assert response.status_code == 200
    assert list(response.json()["timezones"]) == ["Asia/Tokyo"]


@pytest.mark.parametrize("tz", ["Not/AZone", "Europe/London,Not/AZone", "Not/AZone,Europe/London"])
def test_invalid_zone_returns_404_naming_it(client, tz):
    response = client.get("/api/time", params={"tz": tz})

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == 'timezone: "Not/AZone" is invalid\n'


def test_only_first_tz_parameter_is_read(client):
    response = client.get("/api/time?tz=Europe/London&tz=Not/AZone")

    assert response.status_code == 200
    assert list(response.json()["timezones"]) == ["Europe/London"]


@pytest.mark.parametrize(
    "tz, body",
    [
        ('a"b', 'timezone: "a\\"b" is invalid\n'),
        ("a\\b", 'timezone: "a\\\\b" is invalid\n'),
        ("a\tb", 'timezone: "a\\tb" is invalid\n'),
    ],
)
def test_invalid_zone_name_is_escaped_in_404(client, tz, body):
    response = client.get("/api/time", params={"tz": tz})

    assert response.status_code == 404
    assert response.text == body


def test_apps_keep_their_own_service():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    later = start + timedelta(hours=6)
    first = create_app(service=TimeZoneService(clock=lambda: start), docs_enabled=False)
    second = create_app(service=TimeZoneService(clock=lambda: later), docs_enabled=False)

    with TestClient(first) as c1, TestClient(second) as c2:
        r1 = c1.get("/api/time")
        r2 = c2.get("/api/time")

    assert r1.json() == {"timezones": {"UTC": "01 Jan 24 00:00 UTC"}}
    assert r2.json() == {"timezones": {"UTC": "01 Jan 24 06:00 UTC"}}


@pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "PATCH"])
def test_other_methods_are_rejected(client, method):
    response = client.request(method, "/api/time")

    assert response.status_code == 405
    assert response.headers["allow"] == "GET"
    assert response.text == "Method Not Allowed\n"


def test_unknown_path_is_plain_text_404(client):
    response = client.get("/api/clock")

    assert response.status_code == 404
    assert response.text == "Not Found\n"


def test_unserializable_report_returns_500(app, client):
    class BrokenService:
        def build_report(self, request):
            return TimeZoneReport(entries={"UTC": 1704067200})

    app.dependency_overrides[get_time_zone_service] = lambda: BrokenService()

    response = client.get("/api/time")

    assert response.status_code == 500
    assert response.text == "internal server error\n"


def test_zone_lookup_runs_off_the_event_loop(app, client, fixed_service):
    threads = {}

    class RecordingService:
        def build_report(self, request):
            threads["handler"] = threading.get_ident()
            return fixed_service.build_report(request)

    async def recording_dependency():
        threads["loop"] = threading.get_ident()
        return RecordingService()

    app.dependency_overrides[get_time_zone_service] = recording_dependency

    response = client.get("/api/time?tz=Asia/Tokyo")

    assert response.status_code == 200
    assert threads["handler"] != threads["loop"]


def test_successive_requests_agree_on_system_clock():
    app = create_app(docs_enabled=False)

    with TestClient(app) as c:
        first = c.get("/api/time").json()["timezones"]["UTC"]
        second = c.get("/api/time").json()["timezones"]["UTC"]

    parsed = [datetime.strptime(v, "%d %b %y %H:%M UTC") for v in (first, second)]
    assert parsed[1] - parsed[0] <= timedelta(minutes=1)


def test_custom_base_path(fixed_service):
    app = create_app(ServerSettings(base_path="/v2"), service=fixed_service, docs_enabled=False)

    with TestClient(app) as c:
        assert c.get("/v2/time").status_code == 200
        assert c.get("/api/time").status_code == 404


def test_slow_request_hits_write_timeout(fixed_service):
    app = create_app(ServerSettings(write_timeout=0.05), service=fixed_service, docs_enabled=False)

    async def slow_service():
        await asyncio.sleep(0.5)
        return fixed_service

    app.dependency_overrides[get_time_zone_service] = slow_service

    with TestClient(app) as c:
        response = c.get("/api/time")

    assert response.status_code == 503
    assert response.text == "request timed out\n"


def test_every_request_is_logged(client, capsys):
    client.get("/api/time?tz=Asia/Tokyo")
    client.post("/api/time")

    out = capsys.readouterr().out
    assert "method:GET, path:/api/time" in out
    assert "method:POST, path:/api/time" in out


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["service"] == "timezone-service"
