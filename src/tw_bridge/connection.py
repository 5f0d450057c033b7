"""Lifecycle of the single socket used by a bridge."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from tw_bridge.adapters.transport import Connector, Transport
from tw_bridge.errors import TransportError
from tw_bridge.models import TransportState
from tw_bridge.protocol import DEFAULT_WS_URL


class ConnectionManager:
    """Owns at most one transport and opens it with single-flight semantics.

    Concurrent :meth:`ensure_open` callers share one in-flight attempt: the first
    caller opens the socket, the others await the same shielded future and
    either find the transport open or re-raise the leader's failure.
    """

    def __init__(
        self,
        connector: Connector,
        *,
        on_message: Callable[[str | bytes], None],
        on_close: Callable[[], None],
        default_url: str = DEFAULT_WS_URL,
        open_timeout_seconds: float = 3.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self._connector = connector
        self._on_message = on_message
        self._on_close = on_close
        self._url = default_url
        self._open_timeout_seconds = open_timeout_seconds
        self._logger = logger or logging.getLogger("tw_bridge.connection")

        self._transport: Transport | None = None
        self._state = TransportState.IDLE
        self._opening: asyncio.Future[TransportError | None] | None = None
        self._reader_task: asyncio.Task[None] | None = None

    @property
    def url(self) -> str:
        return self._url

    @property
    def state(self) -> TransportState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._transport is not None and self._state is TransportState.OPEN

    @property
    def is_opening(self) -> bool:
        return self._opening is not None

    async def ensure_open(self, url: str | None = None) -> None:
        """Guarantee an open transport, reusing the current one when possible."""
        while not self.is_open:
            opening = self._opening
            if opening is None:
                await self._open(url)
                return
            error = await asyncio.shield(opening)
            if error is not None:
                raise TransportError(str(error)) from error

    async def send(self, message: str) -> None:
        transport = self._transport
        if transport is None or not self.is_open:
            raise TransportError("ws not open")
        await transport.send(message)

    async def close(self) -> None:
        """Close the current transport, if any. Safe to call repeatedly."""
        transport, self._transport = self._transport, None
        reader, self._reader_task = self._reader_task, None
        if transport is None:
            return

        self._state = TransportState.CLOSED
        if reader is not None and reader is not asyncio.current_task():
            reader.cancel()
        try:
            await transport.close()
        except Exception:  # noqa: BLE001 - the socket is being discarded either way.
            self._logger.debug("transport_close_failed", exc_info=True)
        self._logger.info("transport_closed", extra={"url": self._url, "initiator": "client"})

    async def _open(self, url: str | None) -> None:
        opening: asyncio.Future[TransportError | None] = asyncio.get_running_loop().create_future()
        self._opening = opening
        self._url = url or self._url or DEFAULT_WS_URL
        self._state = TransportState.CONNECTING
        self._logger.info("transport_opening", extra={"url": self._url})

        try:
            transport = await asyncio.wait_for(self._connector(self._url), timeout=self._open_timeout_seconds)
        except asyncio.TimeoutError as exc:
            error = TransportError("ws open timeout")
            self._open_failed(opening, error)
            raise error from exc
        except asyncio.CancelledError:
            self._open_failed(opening, None)
            raise
        except Exception as exc:  # noqa: BLE001 - connector failures are reported as one transport error.
            error = TransportError("ws open failed")
            self._open_failed(opening, error)
            raise error from exc

        self._transport = transport
        self._state = TransportState.OPEN
        self._opening = None
        self._reader_task = asyncio.create_task(self._read_loop(transport), name="tw-bridge-reader")
        opening.set_result(None)
        self._logger.info("transport_opened", extra={"url": self._url})

    def _open_failed(self, opening: asyncio.Future[TransportError | None], error: TransportError | None) -> None:
        self._opening = None
        self._state = TransportState.CLOSED
        opening.set_result(error)
        self._logger.warning(
            "transport_open_failed",
            extra={"url": self._url, "error": str(error) if error else "cancelled"},
        )
        self._on_close()

    async def _read_loop(self, transport: Transport) -> None:
        try:
            async for raw in transport:
                self._on_message(raw)
        except asyncio.CancelledError:
            raise
        except Exception:  # noqa: BLE001 - a broken read is treated as a closed socket.
            self._logger.warning("transport_read_failed", exc_info=True)
        finally:
            self._closed_by_peer(transport)

    def _closed_by_peer(self, transport: Transport) -> None:
        if self._transport is not transport:
            return
        self._transport = None
        self._reader_task = None
        self._state = TransportState.CLOSED
        self._logger.info("transport_closed", extra={"url": self._url, "initiator": "server"})
        self._on_close()
