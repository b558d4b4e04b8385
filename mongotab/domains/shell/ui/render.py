"""Turn the core's draw-region tree into Rich renderables."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from mongotab.core.component import Line, Region

LINE_STYLES: dict[str, str] = {
    "": "",
    "muted": "dim",
    "cursor": "reverse",
    "selected": "bold cyan",
    "editing": "bold",
    "label": "bold",
    "tab": "",
    "tab-active": "bold reverse",
    "info": "cyan",
    "success": "green",
    "error": "bold red",
}

FOCUSED_BORDER = "bright_cyan"
BLURRED_BORDER = "grey50"


def render_line(line: Line) -> Text:
    return Text(line.text, style=LINE_STYLES.get(line.style, line.style), no_wrap=True, overflow="ellipsis")


def _render_lines(region: Region) -> RenderableType:
    if region.layout == "inline":
        text = Text()
        for line in region.lines:
            text.append_text(render_line(line))
            text.append(" ")
        return text
    return Group(*(render_line(line) for line in region.lines))


def _render_children(region: Region) -> RenderableType:
    rendered = [render_region(child) for child in region.children]
    if region.lines:
        rendered.insert(0, _render_lines(region))
    if region.layout == "columns":
        grid = Table.grid(expand=True)
        for child in region.children:
            grid.add_column(ratio=child.weight)
        grid.add_row(*rendered[-len(region.children):])
        return grid
    if region.layout == "overlay":
        # No z-order in a terminal stream: the top layer goes first.
        return Group(rendered[-1], *rendered[:-1])
    return Group(*rendered)


def render_region(region: Region) -> RenderableType:
    body = _render_children(region) if region.children else _render_lines(region)
    if not region.border:
        return body
    return Panel(
        body,
        title=region.title or None,
        title_align="left",
        border_style=FOCUSED_BORDER if region.focused else BLURRED_BORDER,
    )
