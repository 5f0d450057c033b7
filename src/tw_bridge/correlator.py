"""Matches inbound responses to the requests that produced them."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable
from uuid import uuid4

from tw_bridge.errors import ProtocolError, TransportError
from tw_bridge.models import Failure, Outcome, PendingRequest
from tw_bridge.protocol import decode_response, encode_envelope

Transmit = Callable[[str], Awaitable[None]]


class RequestCorrelator:
    """Tracks pending requests by id and resolves each one exactly once.

    A pending entry leaves the waiting set through one of three paths: a response
    carrying its id, its own timeout, or :meth:`fail_all`. Every removal is
    idempotent, so late responses and repeated cancellation are no-ops.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 5.0,
        id_factory: Callable[[], str] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._id_factory = id_factory or (lambda: str(uuid4()))
        self._logger = logger or logging.getLogger("tw_bridge.correlator")
        self._pending: dict[str, PendingRequest] = {}

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    @property
    def pending_ids(self) -> frozenset[str]:
        return frozenset(self._pending)

    def __len__(self) -> int:
        return len(self._pending)

    async def send(self, transmit: Transmit, payload: dict[str, Any], *, session_id: str | None) -> Outcome:
        """Transmit ``payload`` under a fresh id and wait for its outcome."""
        loop = asyncio.get_running_loop()
        request_id = self._id_factory()
        if request_id in self._pending:
            raise ProtocolError(f"duplicate request id: {request_id}")

        pending = PendingRequest(
            request_id=request_id,
            future=loop.create_future(),
            deadline=loop.time() + self._timeout_seconds,
        )
        pending.timer = loop.call_later(self._timeout_seconds, self._expire, request_id)
        self._pending[request_id] = pending

        try:
            await transmit(encode_envelope(request_id, session_id, payload))
        except TransportError:
            self._discard(request_id)
            raise
        except Exception as exc:  # noqa: BLE001 - any socket write failure maps to a transport error.
            self._discard(request_id)
            raise TransportError("ws send failed") from exc

        self._logger.debug("request_sent", extra={"request_id": request_id, "cmd": payload.get("cmd")})
        try:
            return await pending.future
        finally:
            self._discard(request_id)

    def handle_message(self, raw: str | bytes) -> None:
        """Resolve the waiter matching an inbound frame; anything else is dropped."""
        response = decode_response(raw)
        if response is None:
            self._logger.debug("inbound_message_dropped", extra={"reason": "unparsable"})
            return

        pending = self._pending.pop(response.request_id, None)
        if pending is None:
            self._logger.debug(
                "inbound_message_dropped",
                extra={"reason": "unknown_id", "request_id": response.request_id},
            )
            return

        pending.resolve(response.outcome)

    def fail_all(self) -> int:
        """Fail every pending request as disconnected and clear the waiting set."""
        pending = list(self._pending.values())
        self._pending.clear()
        for entry in pending:
            entry.resolve(Failure.disconnected())
        if pending:
            self._logger.info("pending_requests_failed", extra={"count": len(pending), "reason": "disconnected"})
        return len(pending)

    def _expire(self, request_id: str) -> None:
        pending = self._pending.pop(request_id, None)
        if pending is None:
            return
        pending.timer = None
        if pending.resolve(Failure.timeout()):
            loop = asyncio.get_running_loop()
            self._logger.warning(
                "request_timeout",
                extra={
                    "request_id": request_id,
                    "timeout_seconds": self._timeout_seconds,
                    "overdue_seconds": max(0.0, loop.time() - pending.deadline),
                },
            )

    def _discard(self, request_id: str) -> None:
        pending = self._pending.pop(request_id, None)
        if pending is not None and pending.timer is not None:
            pending.timer.cancel()
            pending.timer = None
