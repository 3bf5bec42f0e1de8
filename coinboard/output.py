"""Terminal rendering of dashboard frames with table, text and JSON modes."""

from __future__ import annotations

import dataclasses
import json
import sys
from enum import Enum
from typing import Any, Dict, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from coinboard.controller import LoadStatus, Notification, NotificationLevel, RenderModel
from coinboard.preferences import Theme
from coinboard.presenter import CardModel, DetailModel

EMPTY_MESSAGE = "No cryptocurrencies found"
LOADING_MESSAGE = "Loading market data..."
FAILED_MESSAGE = "Failed to load market data"

_NOTIFICATION_ICONS = {
    NotificationLevel.SUCCESS: "✓",
    NotificationLevel.ERROR: "✕",
    NotificationLevel.WARNING: "⚠",
}

_PALETTES: Dict[Theme, Dict[str, str]] = {
    Theme.DARK: {"header": "bold cyan", "dim": "grey62", "up": "green", "down": "red"},
    Theme.LIGHT: {"header": "bold blue", "dim": "grey35", "up": "dark_green", "down": "dark_red"},
}


class OutputFormat(Enum):
    """Supported output formats."""

    TEXT = "text"
    JSON = "json"
    TABLE = "table"


class CLIOutput:
    """Unified output handler for CLI."""

    def __init__(
        self,
        format: OutputFormat = OutputFormat.TABLE,
        verbose: bool = False,
        stream: Any = None,
    ) -> None:
        self.format = format
        self.verbose = verbose
        self.stream = stream or sys.stdout
        self._console: Optional[Console] = None
        if format == OutputFormat.TABLE:
            self._console = Console(file=self.stream)

    def render(self, model: RenderModel) -> None:
        """Output a full dashboard frame."""
        if self.format == OutputFormat.JSON:
            self._json_render(model)
        elif self.format == OutputFormat.TABLE:
            self._table_render(model)
        else:
            self._text_render(model)

    # --- JSON ---

    def _json_render(self, model: RenderModel) -> None:
        """JSON output for scripting."""
        payload = dataclasses.asdict(model)
        payload["is_empty"] = model.is_empty
        print(json.dumps(payload, indent=2, default=str), file=self.stream)

    # --- Text ---

    def _text_render(self, model: RenderModel) -> None:
        """Plain text output."""
        for note in model.notifications:
            print(self._notification_line(note), file=self.stream)

        if model.global_stats:
            stats = model.global_stats
            print(
                f"Market Cap {stats.total_market_cap} | Volume {stats.total_volume} | "
                f"BTC {stats.btc_dominance} | Coins {stats.active_cryptocurrencies}",
                file=self.stream,
            )

        message = self._status_message(model)
        if message:
            print(message, file=self.stream)
        else:
            for card in model.cards:
                print(self._card_line(card), file=self.stream)

        if model.detail:
            self._text_detail(model.detail)

    def _card_line(self, card: CardModel) -> str:
        stats = "  ".join(f"{item.label}: {item.value}" for item in card.stats)
        return (
            f"{card.favorite_icon} {card.name} ({card.symbol}) [{card.coin_id}]  "
            f"{card.price}  {card.change}  {stats}"
        )

    def _text_detail(self, detail: DetailModel) -> None:
        print("", file=self.stream)
        print(f"{detail.name} - {detail.subtitle}", file=self.stream)
        print(f"{detail.price}  {detail.change}", file=self.stream)
        for item in detail.stats:
            print(f"  {item.label}: {item.value}", file=self.stream)
        if detail.description:
            print(f"\nAbout {detail.name}: {detail.description}", file=self.stream)
        for link in detail.links:
            print(f"  {link.label}: {link.value}", file=self.stream)

    # --- Table ---

    def _table_render(self, model: RenderModel) -> None:
        """Rich terminal output with tables."""
        if not self._console:
            self._text_render(model)
            return

        palette = _PALETTES[model.theme]

        for note in model.notifications:
            self._console.print(self._styled_notification(note))

        if model.global_stats:
            stats = model.global_stats
            self._console.print(
                f"[{palette['header']}]Market Cap[/] {stats.total_market_cap}   "
                f"[{palette['header']}]Volume 24h[/] {stats.total_volume}   "
                f"[{palette['header']}]BTC Dominance[/] {stats.btc_dominance}   "
                f"[{palette['header']}]Active[/] {stats.active_cryptocurrencies}"
            )

        message = self._status_message(model)
        if message:
            self._console.print(f"[{palette['dim']}]{message}[/]")
        else:
            self._console.print(self._grid_table(model, palette))

        if model.detail:
            self._console.print(self._detail_panel(model.detail, palette))

    def _grid_table(self, model: RenderModel, palette: Dict[str, str]) -> Table:
        view = model.view
        title = f"filter={view.filter_mode.value} sort={view.sort_key.value}"
        if view.search_text.strip():
            title = f"search={view.search_text.strip()!r}"

        table = Table(title=title, show_header=True, header_style=palette["header"], expand=False)
        table.add_column("", no_wrap=True)
        table.add_column("Coin", overflow="fold")
        table.add_column("Price", justify="right")
        table.add_column("24h", justify="right")
        for label in ("Market Cap", "Volume 24h", "Rank", "Supply"):
            table.add_column(label, justify="right")
        table.add_column("7d", no_wrap=True)

        for card in model.cards:
            color = palette["up"] if card.is_positive else palette["down"]
            table.add_row(
                card.favorite_icon,
                f"{escape(card.name)} [{palette['dim']}]{escape(card.symbol)} · {escape(card.coin_id)}[/]",
                card.price,
                f"[{color}]{card.change}[/]",
                *[item.value for item in card.stats],
                f"[{color}]{card.sparkline.blocks() if card.sparkline else ''}[/]",
            )
        return table

    def _detail_panel(self, detail: DetailModel, palette: Dict[str, str]) -> Panel:
        color = palette["up"] if detail.is_positive else palette["down"]
        lines = [
            f"[{palette['dim']}]{detail.subtitle}[/]",
            f"[bold]{detail.price}[/]  [{color}]{detail.change}[/]",
            "",
        ]
        lines.extend(f"{item.label}: {item.value}" for item in detail.stats)
        if detail.description:
            lines.extend(["", f"[bold]About {escape(detail.name)}[/]", escape(detail.description)])
        if detail.links:
            lines.append("")
            lines.extend(f"{link.label}: {link.value}" for link in detail.links)
        return Panel("\n".join(lines), title=detail.name, expand=False)

    # --- Shared ---

    @staticmethod
    def _status_message(model: RenderModel) -> Optional[str]:
        if model.status == LoadStatus.LOADING:
            return LOADING_MESSAGE
        if model.status == LoadStatus.FAILED:
            return FAILED_MESSAGE
        if model.is_empty:
            return EMPTY_MESSAGE
        return None

    @staticmethod
    def _notification_line(note: Notification) -> str:
        return f"{_NOTIFICATION_ICONS[note.level]} {note.message}"

    def _styled_notification(self, note: Notification) -> str:
        style = {
            NotificationLevel.SUCCESS: "green",
            NotificationLevel.WARNING: "yellow",
            NotificationLevel.ERROR: "red",
        }[note.level]
        return f"[{style}]{escape(self._notification_line(note))}[/{style}]"

    def notifications(self, model: RenderModel) -> None:
        """Output only the notifications of a frame."""
        for note in model.notifications:
            if self.format == OutputFormat.JSON:
                print(json.dumps({"notification": note.message, "level": note.level.value}), file=self.stream)
            elif self._console:
                self._console.print(self._styled_notification(note))
            else:
                print(self._notification_line(note), file=self.stream)

    def info(self, message: str) -> None:
        """Output an info message."""
        if self.format == OutputFormat.JSON:
            return
        if self._console:
            self._console.print(f"[blue]ℹ️  {message}[/blue]")
        else:
            print(f"ℹ️  {message}", file=self.stream)

    def warning(self, message: str) -> None:
        """Output a warning message."""
        if self.format == OutputFormat.JSON:
            print(json.dumps({"warning": message}), file=sys.stderr)
            return
        if self._console:
            self._console.print(f"[yellow]⚠️  {message}[/yellow]")
        else:
            print(f"⚠️  {message}", file=sys.stderr)

    def error(self, message: str) -> None:
        """Output an error message."""
        if self.format == OutputFormat.JSON:
            print(json.dumps({"error": message}), file=sys.stderr)
            return
        if self._console:
            self._console.print(f"[red]❌ {message}[/red]")
        else:
            print(f"❌ {message}", file=sys.stderr)
