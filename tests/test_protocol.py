import json

from tw_bridge.models import Failure, FailureKind, Success
from tw_bridge.protocol import PairRequest, SetSlotBlockRequest, decode_response, encode_envelope


def test_encode_envelope_carries_id_session_and_fields() -> None:
    envelope = json.loads(encode_envelope("req-1", None, {"cmd": "command.run", "command": "say hi"}))

    assert envelope == {"id": "req-1", "sessionId": None, "cmd": "command.run", "command": "say hi"}


def test_pair_request_omits_empty_player() -> None:
    assert PairRequest(code="123456").to_payload() == {"cmd": "pair.start", "code": "123456"}
    assert PairRequest(code="1", player="Steve").to_payload()["player"] == "Steve"


def test_set_slot_block_payload_uses_wire_names() -> None:
    payload = SetSlotBlockRequest(agent_id="agent1", block="stone", amount=10, slot=3).to_payload()

    assert payload == {"cmd": "agent.slotAssignBlock", "agentId": "agent1", "block": "stone", "amount": 10, "slot": 3}


def test_decode_drops_uncorrelatable_messages() -> None:
    for raw in ("not json", "[1, 2]", '"text"', json.dumps({"hello": "twbridge", "pairing": True}), '{"id": 5}'):
        assert decode_response(raw) is None


def test_decode_success_defaults_result() -> None:
    response = decode_response(json.dumps({"id": "a", "ok": True}))

    assert response is not None
    assert response.request_id == "a"
    assert response.outcome == Success(result={})


def test_decode_failure_defaults_error() -> None:
    response = decode_response(json.dumps({"id": "a", "ok": False}))

    assert isinstance(response.outcome, Failure)
    assert response.outcome.reason == "error"
    assert response.outcome.kind is FailureKind.REMOTE


def test_decode_reads_session_id_from_result_or_envelope() -> None:
    nested = decode_response(json.dumps({"id": "a", "ok": True, "result": {"sessionId": "abc"}}))
    top_level = decode_response(json.dumps({"id": "b", "ok": True, "sessionId": "xyz"}))

    assert nested.outcome.session_id == "abc"
    assert top_level.outcome.session_id == "xyz"


def test_decode_accepts_binary_frames() -> None:
    response = decode_response(b'{"id": "a", "ok": true, "result": {"n": 1}}')

    assert response.outcome.unwrap() == {"n": 1}


def test_decode_drops_invalid_utf8_frames() -> None:
    assert decode_response(b"\xff\xfe{") is None
