"""Command-line outage checker.

    nes-outage            check once and print nearby outages
    nes-outage --watch    re-check every POLL_INTERVAL minutes until Ctrl+C
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Callable
from datetime import datetime, timezone

from nes_outage.config import TrackerConfig, configure_logging, load_settings
from nes_outage.errors import ConfigError, FetchError
from nes_outage.schemas.outage import NearbyOutage
from nes_outage.services.nes_client import NesClient
from nes_outage.services.proximity import filter_nearby

logger = logging.getLogger(__name__)

CLEAR_SCREEN = "\033[2J\033[H"


def _plural(count: float, word: str) -> str:
    return word if count == 1 else f"{word}s"


def format_time_ago(updated: datetime, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    minutes = int((now - updated).total_seconds() // 60)
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


def render_outages(outages: list[NearbyOutage], config: TrackerConfig,
                   now: datetime | None = None) -> str:
    """Render the nearby-outage table and status summary as text."""
    radius = f"{config.radius_miles:g}"
    lines = [
        "",
        f"NES Outage Tracker - Checking area within {radius} "
        f"{_plural(config.radius_miles, 'mile')} of home...",
        "",
    ]

    if not outages:
        lines += ["No outages found nearby.", ""]
        return "\n".join(lines)

    lines += [f"Found {len(outages)} {_plural(len(outages), 'outage')} nearby:", ""]

    for o in outages:
        lines.append(
            f"  #{o.id} | {o.distance:.1f} mi | {o.num_people:>6,} people | "
            f"{o.status:<10} | Updated {format_time_ago(o.last_updated, now)}"
        )

    assigned = sum(1 for o in outages if o.status == "Assigned")
    lines += ["", f"Status: {assigned} Assigned, {len(outages) - assigned} Unassigned", ""]
    return "\n".join(lines)


async def check_outages(config: TrackerConfig, client: NesClient,
                        write: Callable[[str], None] = print) -> list[NearbyOutage] | None:
    """One fetch-filter-print cycle. Fetch failures are printed, not raised."""
    try:
        outages = await client.fetch_outages()
    except FetchError as e:
        logger.debug("Check failed: %s", e)
        write(f"Error fetching outages: {e}")
        return None
    nearby = filter_nearby(outages, config)
    write(render_outages(nearby, config))
    return nearby


async def watch(config: TrackerConfig, client: NesClient, stop: asyncio.Event,
                write: Callable[[str], None] = print, max_cycles: int | None = None,
                clear: bool = False):
    """Run check cycles every poll interval until `stop` is set.

    With clear=True each cycle starts on a cleared terminal.
    """
    prefix = CLEAR_SCREEN if clear else ""
    interval = config.poll_interval_minutes * 60
    every = f"{config.poll_interval_minutes:g} {_plural(config.poll_interval_minutes, 'minute')}"
    write(f"{prefix}Watch mode enabled - checking every {every}\nPress Ctrl+C to exit\n")

    cycles = 0
    while not stop.is_set():
        if cycles:
            write(f"{prefix}Watch mode - checking every {every}\n"
                  f"Last check: {datetime.now().strftime('%X')}\nPress Ctrl+C to exit")
        await check_outages(config, client, write)
        cycles += 1
        if max_cycles is not None and cycles >= max_cycles:
            break
        try:
            await asyncio.wait_for(stop.wait(), timeout=interval)
        except asyncio.TimeoutError:
            pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nes-outage",
        description="Show NES power outages near your home (HOME_LAT / HOME_LNG)",
    )
    parser.add_argument("--watch", "-w", action="store_true",
                        help="Keep checking every POLL_INTERVAL minutes")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
        config = TrackerConfig.from_settings(settings)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level)
    client = NesClient(settings.nes_api_url, timeout=settings.request_timeout)

    if not args.watch:
        asyncio.run(check_outages(config, client))
        return 0

    try:
        asyncio.run(watch(config, client, asyncio.Event(), clear=sys.stdout.isatty()))
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())
