from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from tw_bridge.errors import DisconnectedError, ProtocolError, RemoteCommandError, RequestTimeoutError


class TransportState(str, Enum):
    """Lifecycle of the single socket owned by the connection manager."""

    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class BridgeState(str, Enum):
    DISCONNECTED = "disconnected"
    OPEN = "open"
    PAIRED = "paired"


@dataclass(slots=True, frozen=True)
class Session:
    """Identity issued by the server for a paired connection."""

    session_id: str
    bound_player: str | None = None


class FailureKind(str, Enum):
    REMOTE = "remote"
    TIMEOUT = "timeout"
    DISCONNECTED = "disconnected"


@dataclass(slots=True, frozen=True)
class Success:
    result: Any = field(default_factory=dict)
    session_id: str | None = None

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> Any:
        return self.result


@dataclass(slots=True, frozen=True)
class Failure:
    reason: Any = "error"
    kind: FailureKind = FailureKind.REMOTE

    @property
    def ok(self) -> bool:
        return False

    def error(self) -> ProtocolError:
        if self.kind is FailureKind.TIMEOUT:
            return RequestTimeoutError()
        if self.kind is FailureKind.DISCONNECTED:
            return DisconnectedError()
        return RemoteCommandError(self.reason)

    def unwrap(self) -> Any:
        raise self.error()

    @classmethod
    def timeout(cls) -> Failure:
        return cls(reason="timeout", kind=FailureKind.TIMEOUT)

    @classmethod
    def disconnected(cls) -> Failure:
        return cls(reason="disconnected", kind=FailureKind.DISCONNECTED)


Outcome = Union[Success, Failure]


@dataclass(slots=True)
class PendingRequest:
    """An in-flight request waiting for the response carrying its id."""

    request_id: str
    future: asyncio.Future[Outcome]
    deadline: float
    timer: asyncio.TimerHandle | None = None

    def resolve(self, outcome: Outcome) -> bool:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None
        if self.future.done():
            return False
        self.future.set_result(outcome)
        return True
