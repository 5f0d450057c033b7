"""CLI entrypoint for the bridge client."""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict
from pathlib import Path

import typer
from rich import print

from tw_bridge.adapters import connect_websocket
from tw_bridge.blocks import BlockCommandHandler, BlockResult, ScriptStep
from tw_bridge.bridge import SessionBridge
from tw_bridge.catalog import BlockCatalog
from tw_bridge.config import Settings, settings
from tw_bridge.telemetry import configure_logging

app = typer.Typer(help="Drive a paired Minecraft agent over the bridge websocket")


def _build_catalog(config: Settings) -> BlockCatalog | None:
    if not config.block_catalog_path:
        return None
    return BlockCatalog.load(config.block_catalog_path)


def _build_bridge(config: Settings = settings) -> SessionBridge:
    return SessionBridge(
        connect_websocket,
        default_url=config.ws_url,
        open_timeout_seconds=config.open_timeout_seconds,
        request_timeout_seconds=config.request_timeout_seconds,
        require_player=config.require_player,
        require_bound_player=config.require_bound_player,
        block_catalog=_build_catalog(config),
    )


def _parse_block_args(pairs: list[str] | None) -> dict[str, str]:
    args: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected KEY=VALUE, got {pair!r}")
        args[key.strip().upper()] = value
    return args


def _load_script(path: Path) -> list[ScriptStep]:
    steps: list[ScriptStep] = []
    with path.open("r", encoding="utf-8") as handle:
        for number, line in enumerate(handle, start=1):
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            try:
                steps.append(ScriptStep.from_dict(json.loads(line)))
            except (ValueError, AttributeError) as exc:
                raise typer.BadParameter(f"{path}:{number}: {exc}") from exc
    return steps


def _connect_step(url: str | None, code: str | None, player: str | None) -> list[ScriptStep]:
    if code is None:
        return []
    return [ScriptStep(opcode="connect", args={"URL": url or settings.ws_url, "CODE": code, "PLAYER": player or ""})]


def _run_steps(steps: list[ScriptStep], *, keep_going: bool = False) -> list[BlockResult]:
    async def _run() -> list[BlockResult]:
        handler = BlockCommandHandler(_build_bridge())
        try:
            return await handler.run_script(steps, keep_going=keep_going)
        finally:
            await handler.disconnect({})

    return asyncio.run(_run())


def _report(results: list[BlockResult]) -> None:
    print({"results": [asdict(result) for result in results]})
    if any(not result.ok for result in results):
        raise typer.Exit(code=1)


@app.callback()
def _main() -> None:
    configure_logging(settings.log_level)


@app.command()
def start() -> None:
    """Show runtime configuration."""
    print(
        {
            "app_name": settings.app_name,
            "ws_url": settings.ws_url,
            "open_timeout_seconds": settings.open_timeout_seconds,
            "request_timeout_seconds": settings.request_timeout_seconds,
            "require_player": settings.require_player,
            "require_bound_player": settings.require_bound_player,
            "block_catalog_path": settings.block_catalog_path,
        }
    )


@app.command("exec")
def exec_command(
    command: str,
    code: str = typer.Option(..., help="One-time pairing code shown by the server"),
    player: str = typer.Option(None, help="Player the session is bound to"),
    url: str = typer.Option(None, help="Bridge websocket URL"),
) -> None:
    """Pair, run one server command and disconnect."""
    steps = _connect_step(url, code, player) + [ScriptStep(opcode="runCommand", args={"CMD": command})]
    _report(_run_steps(steps))


@app.command("block")
def run_block(
    opcode: str,
    arg: list[str] = typer.Option(None, "--arg", "-a", help="Block argument as KEY=VALUE (repeatable)"),
    code: str = typer.Option(None, help="Pairing code; when given, pair before running the block"),
    player: str = typer.Option(None, help="Player the session is bound to"),
    url: str = typer.Option(None, help="Bridge websocket URL"),
) -> None:
    """Run a single block opcode, e.g. ``block moveAgent -a ID=agent1 -a DIRECTION=up -a BLOCKS=3``."""
    steps = _connect_step(url, code, player) + [ScriptStep(opcode=opcode, args=_parse_block_args(arg))]
    _report(_run_steps(steps))


@app.command("run-script")
def run_script(
    script: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON lines of {opcode, args}"),
    code: str = typer.Option(None, help="Pairing code; when given, pair before the script"),
    player: str = typer.Option(None, help="Player the session is bound to"),
    url: str = typer.Option(None, help="Bridge websocket URL"),
    keep_going: bool = typer.Option(False, help="Continue after a failing block"),
) -> None:
    """Run a block script against the bridge."""
    steps = _connect_step(url, code, player) + _load_script(script)
    _report(_run_steps(steps, keep_going=keep_going))


@app.command("blocks")
def list_blocks(
    catalog_file: str = typer.Option(None, help="Block catalog JSON; defaults to TW_BRIDGE_BLOCK_CATALOG_PATH"),
) -> None:
    """List the block catalog offered to scripts."""
    path = catalog_file or settings.block_catalog_path
    if not path:
        raise typer.BadParameter("Provide --catalog-file or set TW_BRIDGE_BLOCK_CATALOG_PATH")
    print({"blocks": BlockCatalog.load(path).menu_items()})


if __name__ == "__main__":
    app()
