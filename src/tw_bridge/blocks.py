"""Block-opcode handler for visual-programming hosts.

Hosts hand over loosely typed block arguments (strings from text fields, numbers
from number slots). This handler coerces them the way a block runtime would and
reports failures as results instead of raising, so one failing block does not
stop the host.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Mapping

from tw_bridge.bridge import SessionBridge
from tw_bridge.errors import BridgeError

BlockArgs = Mapping[str, Any]


@dataclass(slots=True)
class BlockResult:
    opcode: str
    ok: bool
    value: Any = None
    error: str | None = None


@dataclass(slots=True)
class ScriptStep:
    opcode: str
    args: dict[str, Any]

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> ScriptStep:
        args = payload.get("args") or {}
        if not isinstance(args, Mapping):
            raise ValueError(f"Block arguments must be an object, got {type(args).__name__}")
        return cls(opcode=str(payload.get("opcode", "")), args=dict(args))


def _text(args: BlockArgs, key: str) -> str:
    value = args.get(key)
    return "" if value is None else str(value)


def _number(args: BlockArgs, key: str) -> float:
    value = args.get(key)
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


class BlockCommandHandler:
    """Maps block opcodes onto :class:`SessionBridge` operations."""

    def __init__(self, bridge: SessionBridge, logger: logging.Logger | None = None) -> None:
        self._bridge = bridge
        self._logger = logger or logging.getLogger("tw_bridge.blocks")
        self._opcodes: dict[str, Callable[[BlockArgs], Awaitable[Any]]] = {
            "connect": self.connect,
            "disconnect": self.disconnect,
            "isConnected": self.is_connected,
            "currentPlayer": self.current_player,
            "runCommand": self.run_command,
            "teleportAgent": self.teleport_agent,
            "despawnAgent": self.despawn_agent,
            "moveAgent": self.move_agent,
            "rotateAgent": self.rotate_agent,
            "activateSlot": self.activate_slot,
            "setSlotBlock": self.set_slot_block,
            "placeBlock": self.place_block,
        }

    @property
    def opcodes(self) -> list[str]:
        return list(self._opcodes)

    async def connect(self, args: BlockArgs) -> None:
        await self._bridge.pair(_text(args, "URL"), _text(args, "CODE"), _text(args, "PLAYER"))

    async def disconnect(self, args: BlockArgs) -> None:
        await self._bridge.disconnect()

    async def is_connected(self, args: BlockArgs) -> bool:
        return self._bridge.is_connected()

    async def current_player(self, args: BlockArgs) -> str:
        return self._bridge.current_player()

    async def run_command(self, args: BlockArgs) -> Any:
        return await self._bridge.run_command(_text(args, "CMD"))

    async def teleport_agent(self, args: BlockArgs) -> Any:
        return await self._bridge.teleport_agent(_text(args, "ID"))

    async def despawn_agent(self, args: BlockArgs) -> Any:
        return await self._bridge.despawn_agent(_text(args, "ID"))

    async def move_agent(self, args: BlockArgs) -> Any:
        direction = _text(args, "DIRECTION") or "forward"
        return await self._bridge.move_agent(_text(args, "ID"), direction, _number(args, "BLOCKS"))

    async def rotate_agent(self, args: BlockArgs) -> Any:
        return await self._bridge.rotate_agent(_text(args, "ID"), _text(args, "TURN") or "left")

    async def activate_slot(self, args: BlockArgs) -> Any:
        return await self._bridge.activate_slot(_text(args, "ID"), args.get("SLOT"))

    async def set_slot_block(self, args: BlockArgs) -> Any:
        return await self._bridge.set_slot_block(
            _text(args, "ID"),
            _text(args, "BLOCK"),
            args.get("COUNT"),
            args.get("SLOT"),
        )

    async def place_block(self, args: BlockArgs) -> Any:
        return await self._bridge.place_block(_text(args, "ID"), _text(args, "DIRECTION") or "forward")

    async def dispatch(self, opcode: str, args: BlockArgs | None = None) -> BlockResult:
        """Run one block and capture its value or error."""
        handler = self._opcodes.get(opcode)
        if handler is None:
            return BlockResult(opcode=opcode, ok=False, error=f"unknown opcode: {opcode}")

        try:
            value = await handler(args or {})
        except BridgeError as exc:
            self._logger.warning("block_failed", extra={"opcode": opcode, "error": str(exc)})
            return BlockResult(opcode=opcode, ok=False, error=str(exc))
        return BlockResult(opcode=opcode, ok=True, value=value)

    async def run_script(self, steps: Iterable[ScriptStep], *, keep_going: bool = False) -> list[BlockResult]:
        """Execute ``steps`` in order, stopping at the first failure unless ``keep_going``."""
        results: list[BlockResult] = []
        for step in steps:
            result = await self.dispatch(step.opcode, step.args)
            results.append(result)
            if not result.ok and not keep_going:
                break
        return results
