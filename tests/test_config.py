from tw_bridge.config import Settings
from tw_bridge.protocol import DEFAULT_WS_URL


def test_settings_defaults() -> None:
    config = Settings(_env_file=None)

    assert config.ws_url == DEFAULT_WS_URL
    assert config.open_timeout_seconds == 3.0
    assert config.request_timeout_seconds == 5.0
    assert config.require_player is True


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("TW_BRIDGE_WS_URL", "ws://10.0.0.5:8787")
    monkeypatch.setenv("TW_BRIDGE_REQUIRE_PLAYER", "false")

    config = Settings(_env_file=None)

    assert config.ws_url == "ws://10.0.0.5:8787"
    assert config.require_player is False


def test_bound_player_policy_is_configurable(monkeypatch) -> None:
    assert Settings(_env_file=None).require_bound_player is None

    monkeypatch.setenv("TW_BRIDGE_REQUIRE_PLAYER", "false")
    monkeypatch.setenv("TW_BRIDGE_REQUIRE_BOUND_PLAYER", "true")
    config = Settings(_env_file=None)

    assert config.require_player is False
    assert config.require_bound_player is True
