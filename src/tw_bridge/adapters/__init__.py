"""Socket adapters (websocket transport and test seams)."""

from .transport import Connector, Transport
from .websocket import WebSocketTransport, connect_websocket

__all__ = [
    "Connector",
    "Transport",
    "WebSocketTransport",
    "connect_websocket",
]
