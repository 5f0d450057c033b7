from __future__ import annotations

import asyncio

import pytest

from fakes import FakeServer, wait_until
from tw_bridge.connection import ConnectionManager
from tw_bridge.errors import TransportError
from tw_bridge.models import TransportState
from tw_bridge.protocol import DEFAULT_WS_URL


class Recorder:
    def __init__(self) -> None:
        self.messages: list[str | bytes] = []
        self.closures = 0

    def on_message(self, raw: str | bytes) -> None:
        self.messages.append(raw)

    def on_close(self) -> None:
        self.closures += 1


def _manager(server: FakeServer, recorder: Recorder, **kwargs) -> ConnectionManager:
    return ConnectionManager(server, on_message=recorder.on_message, on_close=recorder.on_close, **kwargs)


def test_concurrent_ensure_open_creates_one_transport() -> None:
    async def _run():
        server = FakeServer(open_delay=0.02)
        manager = _manager(server, Recorder())
        await asyncio.gather(manager.ensure_open(), manager.ensure_open(), manager.ensure_open())
        await manager.ensure_open()
        state = manager.state
        await manager.close()
        return server, state

    server, state = asyncio.run(_run())

    assert server.connect_count == 1
    assert len(server.transports) == 1
    assert state is TransportState.OPEN


def test_default_url_is_used_and_remembered() -> None:
    async def _run():
        server = FakeServer()
        manager = _manager(server, Recorder())
        await manager.ensure_open()
        await manager.close()
        await manager.ensure_open("ws://example.test:9000")
        await manager.close()
        await manager.ensure_open()
        await manager.close()
        return server.urls

    assert asyncio.run(_run()) == [DEFAULT_WS_URL, "ws://example.test:9000", "ws://example.test:9000"]


def test_open_failure_is_reported_to_every_waiter() -> None:
    async def _run():
        server = FakeServer(open_delay=0.01, fail_open=True)
        recorder = Recorder()
        manager = _manager(server, recorder)
        results = await asyncio.gather(manager.ensure_open(), manager.ensure_open(), return_exceptions=True)
        return server, recorder, manager, results

    server, recorder, manager, results = asyncio.run(_run())

    assert server.connect_count == 1
    assert all(isinstance(result, TransportError) for result in results)
    assert all(str(result) == "ws open failed" for result in results)
    assert manager.state is TransportState.CLOSED
    assert not manager.is_opening
    assert recorder.closures == 1


def test_open_timeout() -> None:
    async def _run():
        server = FakeServer(open_delay=1.0)
        manager = _manager(server, Recorder(), open_timeout_seconds=0.01)
        with pytest.raises(TransportError, match="ws open timeout"):
            await manager.ensure_open()
        server.open_delay = 0
        await manager.ensure_open()
        is_open = manager.is_open
        await manager.close()
        return is_open

    assert asyncio.run(_run()) is True


def test_inbound_messages_reach_handler_and_server_close_is_observed() -> None:
    async def _run():
        server = FakeServer()
        recorder = Recorder()
        manager = _manager(server, recorder)
        await manager.ensure_open()
        server.current.push({"hello": "twbridge"})
        await wait_until(lambda: len(recorder.messages) == 1)
        server.current.drop()
        await wait_until(lambda: not manager.is_open)
        return recorder, manager

    recorder, manager = asyncio.run(_run())

    assert recorder.messages == ['{"hello": "twbridge"}']
    assert recorder.closures == 1
    assert manager.state is TransportState.CLOSED


def test_close_is_idempotent_and_does_not_signal_peer_close() -> None:
    async def _run():
        server = FakeServer()
        recorder = Recorder()
        manager = _manager(server, recorder)
        await manager.close()
        await manager.ensure_open()
        await manager.close()
        await manager.close()
        await asyncio.sleep(0.01)
        with pytest.raises(TransportError, match="ws not open"):
            await manager.send("{}")
        return server, recorder, manager

    server, recorder, manager = asyncio.run(_run())

    assert server.current.closed is True
    assert recorder.closures == 0
    assert manager.state is TransportState.CLOSED
