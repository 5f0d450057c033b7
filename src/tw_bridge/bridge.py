"""Session bridge: pairing and agent commands over one correlated socket."""

from __future__ import annotations

import logging
from typing import Any

from tw_bridge.adapters.transport import Connector
from tw_bridge.catalog import BlockCatalog
from tw_bridge.connection import ConnectionManager
from tw_bridge.correlator import RequestCorrelator
from tw_bridge.errors import NotPairedError, PairingError, PlayerNotBoundError
from tw_bridge.models import BridgeState, Failure, FailureKind, Session
from tw_bridge.protocol import (
    DEFAULT_WS_URL,
    MAX_AMOUNT,
    MAX_SLOT,
    MIN_AMOUNT,
    MIN_SLOT,
    MOVE_DIRECTIONS,
    TURN_DIRECTIONS,
    ActivateSlotRequest,
    BridgeRequest,
    DespawnAgentRequest,
    MoveAgentRequest,
    PairRequest,
    PlaceBlockRequest,
    RotateAgentRequest,
    RunCommandRequest,
    SetSlotBlockRequest,
    TeleportAgentRequest,
)
from tw_bridge.validation import (
    clamp_steps,
    optional_text,
    require_choice,
    require_int_in_range,
    require_text,
)


class SessionBridge:
    """Drives a player-bound agent on a remote server through a paired session.

    Every operation validates its arguments before touching the network, so a
    rejected call never produces socket traffic. The session is cleared together
    with the transport, whether the client disconnects or the server closes.

    ``require_player`` applies to pairing. ``require_bound_player`` applies to
    agent commands and defaults to the same value.
    """

    def __init__(
        self,
        connector: Connector,
        *,
        default_url: str = DEFAULT_WS_URL,
        open_timeout_seconds: float = 3.0,
        request_timeout_seconds: float = 5.0,
        require_player: bool = True,
        require_bound_player: bool | None = None,
        block_catalog: BlockCatalog | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._require_player = require_player
        self._require_bound_player = require_player if require_bound_player is None else require_bound_player
        self._block_catalog = block_catalog
        self._logger = logger or logging.getLogger("tw_bridge.bridge")
        self._session: Session | None = None
        self._correlator = RequestCorrelator(timeout_seconds=request_timeout_seconds)
        self._connection = ConnectionManager(
            connector,
            on_message=self._correlator.handle_message,
            on_close=self._handle_transport_closed,
            default_url=default_url,
            open_timeout_seconds=open_timeout_seconds,
        )

    @property
    def connection(self) -> ConnectionManager:
        return self._connection

    @property
    def correlator(self) -> RequestCorrelator:
        return self._correlator

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def session_id(self) -> str | None:
        return self._session.session_id if self._session else None

    @property
    def bound_player(self) -> str | None:
        return self._session.bound_player if self._session else None

    @property
    def require_player(self) -> bool:
        return self._require_player

    @property
    def require_bound_player(self) -> bool:
        return self._require_bound_player

    @property
    def block_catalog(self) -> BlockCatalog | None:
        return self._block_catalog

    @block_catalog.setter
    def block_catalog(self, catalog: BlockCatalog | None) -> None:
        self._block_catalog = catalog

    @property
    def state(self) -> BridgeState:
        if not self._connection.is_open:
            return BridgeState.DISCONNECTED
        if self._session is None:
            return BridgeState.OPEN
        return BridgeState.PAIRED

    def is_connected(self) -> bool:
        return self._connection.is_open

    def current_player(self) -> str:
        return self.bound_player or ""

    async def ensure_open(self, url: str | None = None) -> None:
        await self._connection.ensure_open(url)

    async def pair(self, url: str | None, code: Any, player: Any = None) -> Session:
        """Open the socket at ``url`` and exchange a one-time code for a session."""
        if self._require_player:
            player_name = require_text(player, "player")
        else:
            player_name = optional_text(player)
        request = PairRequest(code=optional_text(code), player=player_name or None)

        await self._connection.ensure_open(optional_text(url) or None)
        outcome = await self._correlator.send(
            self._connection.send,
            request.to_payload(),
            session_id=self.session_id,
        )
        if isinstance(outcome, Failure):
            if outcome.kind is not FailureKind.REMOTE:
                raise outcome.error()
            self._logger.warning("pairing_rejected", extra={"reason": outcome.reason})
            raise PairingError(outcome.reason)
        if not outcome.session_id:
            self._logger.warning("pairing_rejected", extra={"reason": "missing session id"})
            raise PairingError()
        if not self._connection.is_open:
            raise PairingError("connection closed during pairing")

        self._session = Session(session_id=outcome.session_id, bound_player=player_name or None)
        self._logger.info("session_paired", extra={"player": player_name, "url": self._connection.url})
        return self._session

    async def disconnect(self) -> None:
        """Drop the session, fail every pending request and close the socket."""
        self._clear_session(initiator="client")
        await self._connection.close()

    async def run_command(self, command: Any) -> Any:
        self._require_session()
        text = require_text(command, "command")
        return await self._dispatch(RunCommandRequest(command=text))

    async def teleport_agent(self, agent_id: Any) -> Any:
        self._require_agent_session()
        return await self._dispatch(TeleportAgentRequest(agent_id=require_text(agent_id, "agent id")))

    async def despawn_agent(self, agent_id: Any) -> Any:
        self._require_agent_session()
        return await self._dispatch(DespawnAgentRequest(agent_id=require_text(agent_id, "agent id")))

    async def move_agent(self, agent_id: Any, direction: Any, distance: Any) -> Any:
        self._require_agent_session()
        request = MoveAgentRequest(
            agent_id=require_text(agent_id, "agent id"),
            direction=require_choice(direction, "direction", MOVE_DIRECTIONS),
            blocks=clamp_steps(distance),
        )
        return await self._dispatch(request)

    async def rotate_agent(self, agent_id: Any, turn: Any) -> Any:
        self._require_agent_session()
        request = RotateAgentRequest(
            agent_id=require_text(agent_id, "agent id"),
            direction=require_choice(turn, "turn", TURN_DIRECTIONS),
        )
        return await self._dispatch(request)

    async def activate_slot(self, agent_id: Any, slot: Any) -> Any:
        self._require_agent_session()
        request = ActivateSlotRequest(
            agent_id=require_text(agent_id, "agent id"),
            slot=require_int_in_range(slot, "slot", MIN_SLOT, MAX_SLOT),
        )
        return await self._dispatch(request)

    async def set_slot_block(self, agent_id: Any, block: Any, count: Any, slot: Any) -> Any:
        self._require_agent_session()
        agent = require_text(agent_id, "agent id")
        block_id = require_text(block, "block")
        if self._block_catalog is not None:
            block_id = self._block_catalog.resolve(block_id)
        request = SetSlotBlockRequest(
            agent_id=agent,
            block=block_id,
            amount=require_int_in_range(count, "count", MIN_AMOUNT, MAX_AMOUNT),
            slot=require_int_in_range(slot, "slot", MIN_SLOT, MAX_SLOT),
        )
        return await self._dispatch(request)

    async def place_block(self, agent_id: Any, direction: Any) -> Any:
        self._require_agent_session()
        request = PlaceBlockRequest(
            agent_id=require_text(agent_id, "agent id"),
            direction=require_choice(direction, "direction", MOVE_DIRECTIONS),
        )
        return await self._dispatch(request)

    async def _dispatch(self, request: BridgeRequest) -> Any:
        if not self._connection.is_open:
            await self._connection.ensure_open()
        outcome = await self._correlator.send(
            self._connection.send,
            request.to_payload(),
            session_id=self.session_id,
        )
        return outcome.unwrap()

    def _require_session(self) -> None:
        if self._session is None:
            raise NotPairedError()

    def _require_agent_session(self) -> None:
        self._require_session()
        if self._require_bound_player and not self.bound_player:
            raise PlayerNotBoundError()

    def _handle_transport_closed(self) -> None:
        self._clear_session(initiator="transport")

    def _clear_session(self, *, initiator: str) -> None:
        had_session = self._session is not None
        self._session = None
        failed = self._correlator.fail_all()
        if had_session or failed:
            self._logger.info("session_cleared", extra={"initiator": initiator, "failed_requests": failed})
