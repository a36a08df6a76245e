import asyncio
import socket

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from timezone_service.api.main import create_app
from timezone_service.lifecycle.api_server_wrapper import APIServerWrapper, ListenerError


def _slow_app(delay: float) -> FastAPI:
    app = FastAPI()

    @app.get("/slow")
    async def slow():
        await asyncio.sleep(delay)
        return {"ok": True}

    return app


@pytest_asyncio.fixture
async def api_wrapper():
    wrapper = APIServerWrapper(create_app(docs_enabled=False), host="127.0.0.1", port=8010)
    yield wrapper
    if wrapper.server is not None:
        await wrapper.stop(timeout=1.0)


@pytest.mark.asyncio
async def test_start_and_stop(api_wrapper):
    await api_wrapper.start()

    assert api_wrapper.is_running
    assert api_wrapper.server is not None

    clean = await api_wrapper.stop()

    assert clean is True
    assert not api_wrapper.is_running
    assert api_wrapper.server is None


@pytest.mark.asyncio
async def test_serves_time_endpoint(api_wrapper):
    await api_wrapper.start()

    async with httpx.AsyncClient() as client:
        response = await client.get("http://127.0.0.1:8010/api/time", params={"tz": "UTC"})

    assert response.status_code == 200
    assert list(response.json()["timezones"]) == ["UTC"]


@pytest.mark.asyncio
async def test_stop_without_start(api_wrapper):
    # Should not crash
    assert await api_wrapper.stop() is True


@pytest.mark.asyncio
async def test_start_twice_raises(api_wrapper):
    await api_wrapper.start()

    with pytest.raises(RuntimeError):
        await api_wrapper.start()


@pytest.mark.asyncio
async def test_stop_releases_port():
    wrapper = APIServerWrapper(FastAPI(), host="127.0.0.1", port=8011)

    await wrapper.start()
    await wrapper.stop()

    # port must be free now
    s = socket.socket()
    s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    s.bind(("127.0.0.1", 8011))
    s.close()


@pytest.mark.asyncio
async def test_port_in_use_raises_listener_error():
    blocker = socket.socket()
    blocker.bind(("127.0.0.1", 8012))
    blocker.listen()

    wrapper = APIServerWrapper(FastAPI(), host="127.0.0.1", port=8012)
    try:
        with pytest.raises(ListenerError):
            await wrapper.start()
        assert not wrapper.is_running
    finally:
        blocker.close()


@pytest.mark.asyncio
async def test_unexpected_exit_fails_serve_task():
    wrapper = APIServerWrapper(FastAPI(), host="127.0.0.1", port=8013)
    await wrapper.start()
    task = wrapper.task

    # Simulate the listener going away without stop() being called
    wrapper.server.should_exit = True

    with pytest.raises(ListenerError):
        await asyncio.wait_for(asyncio.shield(task), timeout=5.0)

    await wrapper.stop()


@pytest.mark.asyncio
async def test_in_flight_request_drains_before_stop():
    wrapper = APIServerWrapper(_slow_app(0.3), host="127.0.0.1", port=8014, shutdown_timeout=5.0)
    await wrapper.start()

    async with httpx.AsyncClient() as client:
        request = asyncio.create_task(client.get("http://127.0.0.1:8014/slow"))
        await asyncio.sleep(0.1)

        clean = await wrapper.stop()
        response = await request

    assert clean is True
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_drain_deadline_exceeded_returns_false():
    wrapper = APIServerWrapper(_slow_app(5.0), host="127.0.0.1", port=8015)
    await wrapper.start()

    async with httpx.AsyncClient() as client:
        request = asyncio.create_task(client.get("http://127.0.0.1:8015/slow"))
        await asyncio.sleep(0.1)

        clean = await wrapper.stop(timeout=0.2)

        request.cancel()
        with pytest.raises((asyncio.CancelledError, httpx.HTTPError)):
            await request

    assert clean is False
    assert wrapper.server is None
