"""Command-line entry point: add a local-time column to the schedule tables of an HTML file.

Usage:
    schedtz schedule.html -o schedule.local.html --tz Europe/Berlin
    python -m schedtz.cli schedule.html            # writes to stdout
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from bs4 import BeautifulSoup

from schedtz.config import DEFAULT_TIMEZONE, SETTINGS_FILE
from schedtz.panel import TimezonePanel
from schedtz.settings import JsonSettingsStore, MemorySettingsStore, SettingsStore
from schedtz.tables.pipeline import RenderCoordinator
from schedtz.tables.schema import InvalidTimezoneError, resolve_timezone

logger = logging.getLogger(__name__)


async def augment_html(html: str, store: SettingsStore, with_panel: bool = True) -> tuple[str, int]:
    """Augment *html* using the settings in *store*.  Returns (html, tables augmented)."""
    soup = BeautifulSoup(html, "html.parser")
    panel = TimezonePanel(store, default_timezone=store.default_timezone) if with_panel else None
    coordinator = RenderCoordinator(soup, store, panel)
    try:
        augmented = await coordinator.render_all()
    finally:
        coordinator.close()
    return str(soup), augmented


def _build_store(args: argparse.Namespace) -> SettingsStore:
    """Pick the settings store: an explicit --tz overrides the persisted settings file."""
    if args.tz:
        return MemorySettingsStore({"timezone": args.tz, "panelVisible": not args.no_panel})
    return JsonSettingsStore(args.settings)


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, augment the input file and write the result."""
    parser = argparse.ArgumentParser(description="Add a local-time column to the schedule tables of an HTML page")
    parser.add_argument("input", type=Path, help="HTML file to augment")
    parser.add_argument("-o", "--output", type=Path, help="Where to write the result (default: stdout)")
    parser.add_argument("--tz", help=f"IANA timezone to render in (default: stored setting or {DEFAULT_TIMEZONE})")
    parser.add_argument("--no-panel", action="store_true", help="Do not inject the timezone toggle/panel")
    parser.add_argument("--settings", type=Path, default=SETTINGS_FILE, help=f"Settings file (default: {SETTINGS_FILE})")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s", stream=sys.stderr)

    if args.tz:
        try:
            resolve_timezone(args.tz)
        except InvalidTimezoneError as exc:
            parser.exit(2, f"{parser.prog}: error: {exc}\n")

    html = args.input.read_text(encoding="utf-8")
    result, augmented = asyncio.run(augment_html(html, _build_store(args), with_panel=not args.no_panel))

    if args.output is None:
        sys.stdout.write(result)
    else:
        args.output.write_text(result, encoding="utf-8")
        logger.info("Wrote %s (%d tables augmented)", args.output, augmented)
    return 0


if __name__ == "__main__":
    sys.exit(main())
