import math

import pytest

from tw_bridge.errors import InvalidArgumentError, MissingArgumentError
from tw_bridge.protocol import MOVE_DIRECTIONS, TURN_DIRECTIONS
from tw_bridge.validation import clamp_steps, require_choice, require_int_in_range, require_text


@pytest.mark.parametrize(
    ("distance", "steps"),
    [(-200, 64), (0.4, 1), (7.5, 8), (0, 1), (2.5, 3), (64.4, 64), (-3, 3), ("5", 5)],
)
def test_clamp_steps(distance, steps) -> None:
    assert clamp_steps(distance) == steps


@pytest.mark.parametrize("distance", [math.nan, math.inf, -math.inf, "abc", None, True])
def test_clamp_steps_rejects_non_finite(distance) -> None:
    with pytest.raises(InvalidArgumentError) as excinfo:
        clamp_steps(distance)
    assert excinfo.value.argument == "distance"
    assert "distance" in str(excinfo.value)


def test_require_choice_normalizes_case_and_whitespace() -> None:
    assert require_choice(" FORWARD ", "direction", MOVE_DIRECTIONS) == "forward"
    assert require_choice("Right", "turn", TURN_DIRECTIONS) == "right"


def test_require_choice_names_the_argument() -> None:
    with pytest.raises(InvalidArgumentError) as excinfo:
        require_choice("north", "direction", MOVE_DIRECTIONS)
    assert excinfo.value.argument == "direction"
    assert "north" in str(excinfo.value)


def test_require_text_trims_and_rejects_blank() -> None:
    assert require_text("  agent1 ", "agent id") == "agent1"
    with pytest.raises(MissingArgumentError, match="agent id required"):
        require_text("   ", "agent id")
    with pytest.raises(MissingArgumentError):
        require_text(None, "command")


def test_require_int_in_range() -> None:
    assert require_int_in_range(1, "slot", 1, 27) == 1
    assert require_int_in_range(27.0, "slot", 1, 27) == 27
    assert require_int_in_range(" 5 ", "slot", 1, 27) == 5

    for bad in (0, 28, 2.5, "two", True, None):
        with pytest.raises(InvalidArgumentError) as excinfo:
            require_int_in_range(bad, "slot", 1, 27)
        assert excinfo.value.argument == "slot"
