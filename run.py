"""Main entry point for the solo pool tracker."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Optional

from agent.monitor import Monitor
from alerts.desktop import DesktopNotifier
from alerts.dispatcher import AlertDispatcher
from alerts.local_sound import LocalSoundNotifier
from connectors.pool_client import SoloPoolClient
from core.context import AppContext, resolve_address
from rules.config_loader import AppConfig, load_config
from ui.console import ConsolePresenter

LOGGER = logging.getLogger(__name__)

HELP_TEXT = "Commands: r=refresh  p=pause/resume  a <address>  n=notifications  t=test channels  e [dir]=export CSV  q=quit"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="BTC solo mining pool tracker")
    parser.add_argument("--address", help="BTC address to monitor (overrides the last used one)")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--once", action="store_true", help="Fetch and print stats once")
    parser.add_argument("--loop", action="store_true", help="Keep polling until interrupted")
    return parser.parse_args(argv)


def build_monitor(config: AppConfig, cli_address: Optional[str]) -> Monitor:
    context = AppContext.build(config)
    ConsolePresenter(context.event_bus)
    desktop = DesktopNotifier()
    sound_cfg = config.notifiers.local_sound
    sound = LocalSoundNotifier(
        enabled_flag=sound_cfg.enabled,
        sound_file=sound_cfg.sound_file,
        volume=sound_cfg.volume,
    )
    dispatcher = AlertDispatcher(
        event_bus=context.event_bus,
        history=context.history,
        desktop=desktop,
        sound=sound,
        ui=config.ui,
    )
    client = SoloPoolClient(config.endpoint, timeout=config.request_timeout)
    context.address = resolve_address(cli_address, context.store, config.default_address)
    return Monitor(context, client, dispatcher, desktop=desktop)


async def handle_command(monitor: Monitor, line: str) -> bool:
    """Apply one console command; return ``False`` when the user quits."""

    command, _, argument = line.strip().partition(" ")
    command = command.lower()
    if command in ("q", "quit", "exit"):
        return False
    if command in ("r", "refresh"):
        monitor.manual_refresh()
    elif command in ("p", "pause", "resume"):
        monitor.toggle_auto_refresh()
    elif command in ("a", "address"):
        monitor.change_address(argument)
    elif command in ("n", "notify"):
        await monitor.enable_notifications()
    elif command in ("t", "test"):
        await monitor.self_test_channels()
    elif command in ("e", "export"):
        monitor.export_csv(Path(argument.strip() or "."))
    elif command:
        print(HELP_TEXT)
    return True


def _pump_stdin(loop: asyncio.AbstractEventLoop, queue: "asyncio.Queue[Optional[str]]") -> None:
    try:
        for line in sys.stdin:
            loop.call_soon_threadsafe(queue.put_nowait, line)
        loop.call_soon_threadsafe(queue.put_nowait, None)
    except RuntimeError:
        # event loop already closed
        return


async def _read_commands(monitor: Monitor, stop_event: asyncio.Event) -> None:
    queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue()
    reader = threading.Thread(
        target=_pump_stdin, args=(asyncio.get_running_loop(), queue), name="stdin", daemon=True
    )
    reader.start()
    while not stop_event.is_set():
        line = await queue.get()
        if line is None:
            # stdin closed: keep polling until a signal arrives
            return
        if not await handle_command(monitor, line):
            stop_event.set()


async def run_once(config: AppConfig, cli_address: Optional[str]) -> None:
    monitor = build_monitor(config, cli_address)
    monitor.context.history.load()
    await monitor.refresh()


async def loop_forever(config: AppConfig, cli_address: Optional[str]) -> None:
    monitor = build_monitor(config, cli_address)
    if config.notifiers.desktop.enabled:
        await monitor.enable_notifications()
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):  # pragma: no branch - OS dependent
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:  # pragma: no cover - Windows fallback
            pass

    monitor.start()
    LOGGER.info(
        "Tracking %s every %.1fs. %s", monitor.context.address, config.refresh_interval, HELP_TEXT
    )
    reader = asyncio.create_task(_read_commands(monitor, stop_event), name="commands")
    try:
        await stop_event.wait()
    finally:
        monitor.stop()
        reader.cancel()
        await monitor.scheduler.wait_idle()


def main() -> None:
    args = parse_args()
    config = load_config(config_path=args.config)
    configure_logging(config.log_level)
    if args.once and args.loop:
        raise SystemExit("--once and --loop cannot be combined")
    try:
        if args.once:
            asyncio.run(run_once(config, args.address))
        else:
            asyncio.run(loop_forever(config, args.address))
    except KeyboardInterrupt:
        LOGGER.info("Interrupted by user.")


if __name__ == "__main__":
    main()
