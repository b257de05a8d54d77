"""
Rich-based console utilities for the kgmap CLI.

Provides consistent terminal output with:
- kgmap logo/branding
- Styled messages (info, success, warning, error)
- Result tables for facilities, stats and insights
"""

import math
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

KGMAP_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "highlight": "magenta",
        "muted": "dim",
        "brand": "bold blue",
        "path": "cyan underline",
        "command": "bold green",
    }
)

console = Console(theme=KGMAP_THEME)

KGMAP_LOGO = r"""
    _
   | | ____ _ _ __ ___   __ _ _ __
   | |/ / _` | '_ ` _ \ / _` | '_ \
   |   < (_| | | | | | | (_| | |_) |
   |_|\_\__, |_| |_| |_|\__,_| .__/
        |___/                |_|
"""

KGMAP_TAGLINE = "Knowledge Graph Explorer"


def print_logo(show_tagline: bool = True, show_version: bool = True) -> None:
    """Print the kgmap logo with optional tagline and version."""
    from kgmap import __version__

    logo_text = Text(KGMAP_LOGO, style="bold blue")

    if show_tagline:
        logo_text.append(Text(f"\n  {KGMAP_TAGLINE}", style="italic cyan"))

    if show_version:
        logo_text.append(Text(f"\n  v{__version__}", style="dim"))

    console.print(logo_text)


def print_banner(title: str, subtitle: str | None = None) -> None:
    """Print a styled banner for section headers."""
    content = f"[bold]{title}[/bold]"
    if subtitle:
        content += f"\n[dim]{subtitle}[/dim]"
    console.print(Panel(content, style="blue", padding=(0, 2)))


def info(message: str, prefix: str = "info") -> None:
    console.print(f"[info]{prefix}:[/info] {message}")


def success(message: str, prefix: str = "done") -> None:
    console.print(f"[success]{prefix}:[/success] {message}")


def warning(message: str, prefix: str = "warning") -> None:
    console.print(f"[warning]{prefix}:[/warning] {message}")


def print_key_value(key: str, value: Any, indent: int = 2) -> None:
    spaces = " " * indent
    console.print(f"{spaces}[muted]{key}:[/muted] {value}")


def print_error_panel(title: str, message: str, hint: str | None = None) -> None:
    """Print an error in a styled panel."""
    content = f"[error]{message}[/error]"
    if hint:
        content += f"\n\n[dim]Hint: {hint}[/dim]"
    console.print(Panel(content, title=f"[error]{title}[/error]", padding=(1, 2)))


def _table(title: str | None = None) -> Table:
    return Table(
        title=title,
        show_header=True,
        header_style="bold",
        border_style="dim",
        padding=(0, 1),
    )


def print_facilities_table(rows: list[dict[str, Any]], title: str | None = None) -> None:
    """
    Print a table of facilities.

    Args:
        rows: dicts with keys name, type, area, render and optionally
              distance_m
        title: Optional table title
    """
    table = _table(title)
    table.add_column("Name", style="bold")
    table.add_column("Type")
    table.add_column("Area")
    table.add_column("Drawn as", justify="center")
    with_distance = any("distance_m" in r for r in rows)
    if with_distance:
        table.add_column("Distance", justify="right")

    for row in rows:
        render = row.get("render", "")
        render_str = f"[muted]{render}[/muted]" if render == "skip" else render
        cells = [row.get("name", ""), row.get("type", ""), row.get("area", ""), render_str]
        if with_distance:
            distance = row.get("distance_m")
            known = distance is not None and not math.isnan(distance)
            cells.append(f"{distance:,.0f} m" if known else "[muted]-[/muted]")
        table.add_row(*cells)

    console.print(table)


def print_distribution_table(entries: list[dict[str, Any]], title: str | None = None) -> None:
    table = _table(title)
    table.add_column("Area", style="bold")
    table.add_column("Count", justify="right")
    for entry in entries:
        table.add_row(str(entry["area"]), str(entry["count"]))
    console.print(table)


def print_viewport(viewport: dict[str, Any]) -> None:
    """Print a viewport dict as produced by Viewport.to_dict()."""
    if viewport.get("mode") == "fit":
        (south, west), (north, east) = viewport["bounds"]
        print_key_value("Mode", "fit to results")
        print_key_value("South-west", f"{south:.6f}, {west:.6f}")
        print_key_value("North-east", f"{north:.6f}, {east:.6f}")
        print_key_value("Max zoom", viewport["maxZoom"])
    else:
        lat, lon = viewport["center"]
        print_key_value("Mode", "default view")
        print_key_value("Center", f"{lat:.4f}, {lon:.4f}")
        print_key_value("Zoom", viewport["zoom"])
