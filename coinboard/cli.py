"""CLI interface for the coinboard market dashboard."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Callable, List, Optional

from coinboard.coingecko import CoinGeckoClient
from coinboard.config import Settings, load_settings
from coinboard.controller import (
    CloseDetail,
    Command,
    DashboardController,
    Refresh,
    SetFilter,
    SetSearch,
    SetSort,
    ShowDetail,
    ToggleFavorite,
    ToggleTheme,
)
from coinboard.favorites import FavoritesStore
from coinboard.output import CLIOutput, OutputFormat
from coinboard.preferences import PreferencesDB, ThemeStore
from coinboard.price_memory import PriceMemory
from coinboard.refresh_scheduler import RefreshScheduler
from coinboard.types import FilterMode, SortKey

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "Commands: /filter all|favorites|gainers|losers, /sort market_cap|price|change|volume, "
    "/search [text], /fav <id>, /detail <id>, /close, /theme, /refresh, /help, /quit. "
    "Any other text searches by name or symbol."
)

QUIT_COMMANDS = ("/quit", "/exit", "/q")


def parse_command(line: str) -> Optional[Command]:
    """Turn one line of user input into a controller command.

    Returns None for blank input and for quit/help, which the loop handles
    itself.

    Raises:
        ValueError: for unknown commands or bad arguments.
    """
    text = line.strip()
    if not text:
        return None
    if not text.startswith("/"):
        return SetSearch(text)

    name, _, arg = text.partition(" ")
    name = name.lower()
    arg = arg.strip()

    if name in QUIT_COMMANDS or name in ("/help", "/h"):
        return None
    if name == "/filter":
        return SetFilter(_choice(FilterMode, arg, name))
    if name == "/sort":
        return SetSort(_choice(SortKey, arg, name))
    if name == "/search":
        return SetSearch(arg)
    if name in ("/fav", "/favorite"):
        return ToggleFavorite(_required(arg, name))
    if name == "/detail":
        return ShowDetail(_required(arg, name))
    if name == "/close":
        return CloseDetail()
    if name == "/theme":
        return ToggleTheme()
    if name == "/refresh":
        return Refresh()
    raise ValueError(f"Unknown command: {name}")


def _required(arg: str, name: str) -> str:
    if not arg:
        raise ValueError(f"{name} needs a coin id")
    return arg.lower()


def _choice(enum_cls, arg: str, name: str):
    try:
        return enum_cls(arg.lower())
    except ValueError:
        options = "|".join(member.value for member in enum_cls)
        raise ValueError(f"{name} expects one of {options}") from None


async def run_interactive(
    controller: DashboardController,
    scheduler: RefreshScheduler,
    output: CLIOutput,
) -> None:
    """Run interactive command loop with background refresh."""
    output.info("coinboard - Interactive Mode")
    output.info(HELP_TEXT)
    output.render(controller.render())

    await scheduler.start()
    try:
        while True:
            try:
                line = await asyncio.to_thread(input, "\n> ")
            except (EOFError, KeyboardInterrupt):
                output.info("\nGoodbye!")
                break

            if line.strip().lower() in QUIT_COMMANDS:
                output.info("Goodbye!")
                break
            if line.strip().lower() in ("/help", "/h"):
                output.info(HELP_TEXT)
                continue

            try:
                command = parse_command(line)
            except ValueError as exc:
                output.warning(str(exc))
                continue
            if command is None:
                continue

            output.render(await controller.dispatch(command))
    finally:
        await scheduler.stop()


def cycle_renderer(
    controller: DashboardController,
    output: CLIOutput,
) -> Callable[[bool], None]:
    """Build the scheduler callback that redraws the grid after a refresh.

    Failed cycles print only their notifications so the last good grid stays
    on screen.
    """

    def on_cycle(ok: bool) -> None:
        model = controller.render()
        if ok:
            output.render(model)
        else:
            output.notifications(model)

    return on_cycle


async def run_once(
    controller: DashboardController,
    output: CLIOutput,
    commands: List[Command],
) -> bool:
    """Apply startup selectors to the loaded snapshot and render one frame."""
    for command in commands:
        await controller.apply(command)
    model = controller.render()
    output.render(model)
    return controller.state.last_updated is not None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coinboard",
        description="coinboard - Live cryptocurrency market dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m coinboard
  python -m coinboard --once --filter gainers
  python -m coinboard --once --output json --sort volume
  python -m coinboard --once --search bit
        """,
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Fetch one snapshot, print it and exit",
    )
    parser.add_argument(
        "-o", "--output",
        choices=["text", "json", "table"],
        default="table",
        help="Output format (default: table)",
    )
    parser.add_argument(
        "--filter",
        choices=[mode.value for mode in FilterMode],
        default=FilterMode.ALL.value,
        help="Initial filter (default: all)",
    )
    parser.add_argument(
        "--sort",
        choices=[key.value for key in SortKey],
        default=SortKey.MARKET_CAP.value,
        help="Initial sort key (default: market_cap)",
    )
    parser.add_argument(
        "--search",
        default="",
        help="Initial search text",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging",
    )
    return parser


def initial_commands(args: argparse.Namespace) -> List[Command]:
    commands: List[Command] = [
        SetFilter(FilterMode(args.filter)),
        SetSort(SortKey(args.sort)),
    ]
    if args.search:
        commands.append(SetSearch(args.search))
    return commands


async def async_main(argv: Optional[List[str]] = None) -> int:
    """Async CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    output = CLIOutput(format=OutputFormat(args.output), verbose=args.verbose)

    try:
        settings: Settings = load_settings()
    except Exception as exc:
        output.error(f"Failed to load settings: {exc}")
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db = PreferencesDB(settings.preferences_db_path)
    favorites = FavoritesStore(db)
    theme = ThemeStore(db)
    client = CoinGeckoClient(
        base_url=settings.coingecko_api_base,
        vs_currency=settings.vs_currency,
        per_page=settings.top_coins,
        timeout=settings.http_timeout_seconds,
    )
    controller = DashboardController(
        client=client,
        favorites=favorites,
        theme=theme,
        price_memory=PriceMemory(settings.move_alert_threshold_percent),
    )

    try:
        await favorites.load()
        await theme.load()
        await controller.refresh()

        if args.once:
            ok = await run_once(controller, output, initial_commands(args))
            return 0 if ok else 1

        for command in initial_commands(args):
            await controller.apply(command)

        scheduler = RefreshScheduler(
            controller.refresh,
            interval_seconds=settings.refresh_interval_seconds,
            on_cycle=cycle_renderer(controller, output),
        )
        await run_interactive(controller, scheduler, output)
        return 0
    except KeyboardInterrupt:
        output.info("\nInterrupted")
        return 130
    finally:
        await client.close()
        await db.close()


def main() -> None:
    """Synchronous wrapper for CLI entry."""
    sys.exit(asyncio.run(async_main()))


if __name__ == "__main__":
    main()
