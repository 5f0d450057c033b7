"""Wire format for the bridge socket.

Outbound envelopes are JSON objects ``{"id", "sessionId", "cmd", ...}``; inbound
responses echo the ``id`` together with ``ok`` and either ``result`` or ``error``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, ClassVar, Protocol

from tw_bridge.models import Failure, Outcome, Success

DEFAULT_WS_URL = "ws://127.0.0.1:8787"

MOVE_DIRECTIONS = ("forward", "back", "left", "right", "up", "down")
TURN_DIRECTIONS = ("left", "right")

MIN_STEPS = 1
MAX_STEPS = 64
MIN_SLOT = 1
MAX_SLOT = 27
MIN_AMOUNT = 1
MAX_AMOUNT = 64


class BridgeRequest(Protocol):
    cmd: ClassVar[str]

    def to_payload(self) -> dict[str, Any]:
        """Return the command-specific envelope fields, including ``cmd``."""


@dataclass(slots=True, frozen=True)
class PairRequest:
    cmd: ClassVar[str] = "pair.start"

    code: str
    player: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"cmd": self.cmd, "code": self.code}
        if self.player:
            payload["player"] = self.player
        return payload


@dataclass(slots=True, frozen=True)
class RunCommandRequest:
    cmd: ClassVar[str] = "command.run"

    command: str

    def to_payload(self) -> dict[str, Any]:
        return {"cmd": self.cmd, "command": self.command}


@dataclass(slots=True, frozen=True)
class TeleportAgentRequest:
    cmd: ClassVar[str] = "agent.teleportToPlayer"

    agent_id: str

    def to_payload(self) -> dict[str, Any]:
        return {"cmd": self.cmd, "agentId": self.agent_id}


@dataclass(slots=True, frozen=True)
class DespawnAgentRequest:
    cmd: ClassVar[str] = "agent.despawn"

    agent_id: str

    def to_payload(self) -> dict[str, Any]:
        return {"cmd": self.cmd, "agentId": self.agent_id}


@dataclass(slots=True, frozen=True)
class MoveAgentRequest:
    cmd: ClassVar[str] = "agent.move"

    agent_id: str
    direction: str
    blocks: int

    def to_payload(self) -> dict[str, Any]:
        return {"cmd": self.cmd, "agentId": self.agent_id, "direction": self.direction, "blocks": self.blocks}


@dataclass(slots=True, frozen=True)
class RotateAgentRequest:
    cmd: ClassVar[str] = "agent.rotate"

    agent_id: str
    direction: str

    def to_payload(self) -> dict[str, Any]:
        return {"cmd": self.cmd, "agentId": self.agent_id, "direction": self.direction}


@dataclass(slots=True, frozen=True)
class ActivateSlotRequest:
    cmd: ClassVar[str] = "agent.slotActivate"

    agent_id: str
    slot: int

    def to_payload(self) -> dict[str, Any]:
        return {"cmd": self.cmd, "agentId": self.agent_id, "slot": self.slot}


@dataclass(slots=True, frozen=True)
class SetSlotBlockRequest:
    cmd: ClassVar[str] = "agent.slotAssignBlock"

    agent_id: str
    block: str
    amount: int
    slot: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "cmd": self.cmd,
            "agentId": self.agent_id,
            "block": self.block,
            "amount": self.amount,
            "slot": self.slot,
        }


@dataclass(slots=True, frozen=True)
class PlaceBlockRequest:
    cmd: ClassVar[str] = "agent.place"

    agent_id: str
    direction: str

    def to_payload(self) -> dict[str, Any]:
        return {"cmd": self.cmd, "agentId": self.agent_id, "direction": self.direction}


@dataclass(slots=True, frozen=True)
class Response:
    """A decoded inbound message that carries a request id."""

    request_id: str
    outcome: Outcome


def encode_envelope(request_id: str, session_id: str | None, payload: dict[str, Any]) -> str:
    envelope: dict[str, Any] = {"id": request_id, "sessionId": session_id}
    envelope.update(payload)
    return json.dumps(envelope)


def decode_response(raw: str | bytes) -> Response | None:
    """Decode an inbound frame, returning ``None`` for anything that cannot be correlated."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None
    try:
        message = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(message, dict):
        return None

    request_id = message.get("id")
    if not isinstance(request_id, str) or not request_id:
        return None

    if message.get("ok"):
        result = message.get("result")
        if result is None:
            result = {}
        return Response(request_id=request_id, outcome=Success(result=result, session_id=_session_id(message, result)))

    error = message.get("error")
    return Response(request_id=request_id, outcome=Failure(reason=error if error else "error"))


def _session_id(message: dict[str, Any], result: Any) -> str | None:
    candidate = result.get("sessionId") if isinstance(result, dict) else None
    if not candidate:
        candidate = message.get("sessionId")
    return candidate if isinstance(candidate, str) and candidate else None
