"""Boundary for the socket the bridge talks over."""

from typing import AsyncIterator, Awaitable, Protocol


class Transport(Protocol):
    """A single open, message-oriented, bidirectional connection."""

    async def send(self, message: str) -> None:
        """Transmit one text frame."""

    def __aiter__(self) -> AsyncIterator[str | bytes]:
        """Yield inbound frames until the connection closes."""

    async def close(self) -> None:
        """Close the connection; calling it on a closed transport is a no-op."""


class Connector(Protocol):
    """Opens a new transport against ``url``."""

    def __call__(self, url: str) -> Awaitable[Transport]:
        ...
