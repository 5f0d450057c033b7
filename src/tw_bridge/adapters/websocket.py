"""WebSocket transport backed by the ``websockets`` asyncio client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosedError

from tw_bridge.adapters.transport import Transport


@dataclass(slots=True)
class WebSocketTransport(Transport):
    """Adapter exposing a ``websockets`` client connection as a :class:`Transport`."""

    connection: ClientConnection

    async def send(self, message: str) -> None:
        await self.connection.send(message)

    def __aiter__(self) -> AsyncIterator[str | bytes]:
        return self._messages()

    async def _messages(self) -> AsyncIterator[str | bytes]:
        try:
            async for message in self.connection:
                yield message
        except ConnectionClosedError:
            return

    async def close(self) -> None:
        await self.connection.close()


async def connect_websocket(url: str) -> WebSocketTransport:
    """Open a websocket to ``url``; the caller bounds the wait."""
    connection = await connect(url, open_timeout=None)
    return WebSocketTransport(connection=connection)
