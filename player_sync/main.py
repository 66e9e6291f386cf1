from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal

from dotenv import load_dotenv

from .cache import CacheLayout, OfflineReader, clean_stale_cache
from .cloud import PlayerSyncClient, build_status
from .settings import Settings
from .utils.state_store import load_sync_state

load_dotenv()


def parse_args(settings: Settings, argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Keep a signage player's content cache in sync with the cloud.")
    parser.add_argument("--cache-dir", default=settings.cache_dir, help="Root of the on-disk content cache")
    parser.add_argument("--server-url", default=settings.server_url, help="Cloud server base URL")
    parser.add_argument("--device-token", default=settings.device_token, help="Bearer token for REST calls")
    parser.add_argument("--enrollment-file", default=settings.enrollment_file, help="Enrollment record written at provisioning")
    parser.add_argument("--once", action="store_true", help="Run a single sync cycle and exit")
    parser.add_argument("--player-id", default=None, help="Player id to use with --once (defaults to the persisted one)")
    parser.add_argument("--status", action="store_true", help="Print the player status and exit")
    parser.add_argument("--content", action="store_true", help="Print the renderer content and exit")
    parser.add_argument(
        "--clean-stale",
        type=float,
        metavar="DAYS",
        default=None,
        help="Delete stale files older than DAYS and exit",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (DEBUG, INFO, ...)")
    parser.add_argument("--debug", action="store_true", default=settings.debug, help="Shortcut for --log-level DEBUG")
    return parser.parse_args(argv)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    # engineio logs every packet at INFO
    logging.getLogger("engineio").setLevel(logging.WARNING)
    logging.getLogger("socketio").setLevel(logging.WARNING)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def run_offline_command(args: argparse.Namespace, settings: Settings) -> bool:
    """Handles the read-only modes straight from disk; returns ``False`` if none was requested.

    These never create cache directories or open network sessions.
    """

    layout = CacheLayout(settings.cache_dir)
    offline = OfflineReader(layout)
    if args.status:
        status = build_status(load_sync_state(layout.state_file), offline)
        _print_json(status.model_dump(by_alias=True))
        return True
    if args.content:
        content = offline.get_renderer_content()
        _print_json(content.model_dump(by_alias=True) if content else None)
        return True
    if args.clean_stale is not None:
        _print_json({"cleaned": clean_stale_cache(layout.stale_dir, args.clean_stale)})
        return True
    return False


async def run_once(client: PlayerSyncClient, player_id: str | None) -> bool:
    if player_id:
        client.state.player_id = player_id
    try:
        result = await client.do_sync("manual")
    finally:
        await client.stop()
    _print_json(result.model_dump(exclude_none=True))
    return result.success


async def run_agent(client: PlayerSyncClient) -> None:
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    if not await client.start():
        logging.warning("Player is not enrolled; nothing to sync")
        await client.stop()
        return

    logging.info("Player sync agent running (cache %s)", client.settings.cache_dir)
    await stop_event.wait()
    logging.info("Shutting down...")
    await client.stop()


def main() -> None:
    settings = Settings.from_env()
    args = parse_args(settings)
    settings = settings.model_copy(
        update={
            "cache_dir": args.cache_dir,
            "server_url": args.server_url,
            "device_token": args.device_token,
            "enrollment_file": args.enrollment_file,
            "log_level": "DEBUG" if args.debug else args.log_level,
        }
    )
    configure_logging(settings.log_level)

    if run_offline_command(args, settings):
        return

    client = PlayerSyncClient(settings)
    if args.once:
        if not asyncio.run(run_once(client, args.player_id)):
            raise SystemExit(1)
        return

    asyncio.run(run_agent(client))


if __name__ == "__main__":
    main()
