"""Exception hierarchy for bridge failures.

Precondition and validation errors are raised before any network activity.
Transport and protocol errors surface from awaiting a connection or a request.
None of them leave the bridge unusable.
"""

from __future__ import annotations

from typing import Any


class BridgeError(Exception):
    """Base class for every error raised by the bridge."""


class PreconditionError(BridgeError):
    """A required session, bound player or argument is missing."""


class NotPairedError(PreconditionError):
    def __init__(self) -> None:
        super().__init__("not connected")


class PlayerNotBoundError(PreconditionError):
    def __init__(self) -> None:
        super().__init__("player not bound")


class MissingArgumentError(PreconditionError):
    def __init__(self, argument: str) -> None:
        super().__init__(f"{argument} required")
        self.argument = argument


class InvalidArgumentError(BridgeError, ValueError):
    """An argument is present but out of range, non-finite or not an accepted value."""

    def __init__(self, argument: str, message: str) -> None:
        super().__init__(message)
        self.argument = argument


class TransportError(BridgeError):
    """The socket could not be opened or written to."""


class ProtocolError(BridgeError):
    """A request did not produce a successful correlated response."""


class RequestTimeoutError(ProtocolError):
    def __init__(self) -> None:
        super().__init__("timeout")


class DisconnectedError(ProtocolError):
    def __init__(self) -> None:
        super().__init__("disconnected")


class RemoteCommandError(ProtocolError):
    """The server answered with ``ok: false``."""

    def __init__(self, reason: Any) -> None:
        super().__init__(reason if isinstance(reason, str) else repr(reason))
        self.reason = reason


class PairingError(ProtocolError):
    def __init__(self, reason: Any = None) -> None:
        message = "pairing failed" if reason is None else f"pairing failed: {reason}"
        super().__init__(message)
        self.reason = reason
