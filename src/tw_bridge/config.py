"""Runtime configuration for the bridge client."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tw_bridge.protocol import DEFAULT_WS_URL


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="TW_BRIDGE_", env_file=".env", extra="ignore")

    app_name: str = "tw-bridge"
    log_level: str = "INFO"
    ws_url: str = Field(default=DEFAULT_WS_URL, description="Bridge server websocket endpoint.")
    open_timeout_seconds: float = Field(default=3.0, gt=0)
    request_timeout_seconds: float = Field(default=5.0, gt=0)
    require_player: bool = Field(
        default=True,
        description="Require a player name when pairing.",
    )
    require_bound_player: bool | None = Field(
        default=None,
        description="Require a bound player for agent commands; defaults to require_player.",
    )
    block_catalog_path: str | None = Field(
        default=None,
        description="JSON file with [name, id] pairs or an {id: name} mapping of placeable blocks.",
    )


settings = Settings()
