from __future__ import annotations

from typing import Dict, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import GanttBlock


def render_gantt(blocks: Sequence[GanttBlock]) -> str:
    """
    Plain-text Gantt chart; idle stretches are drawn with dots.
    """
    if not blocks:
        return "(no execution)"

    line = "|"
    labels = ""
    time_marks = str(blocks[0].start)

    for block in blocks:
        width = max(1, block.duration)
        line += ("." if block.is_idle else "=") * width
        labels += block.name[:width].ljust(width)
        time_marks += f"{block.end:>{max(3, width)}}"

    line += "|"

    return "\n".join(
        [
            "Gantt Chart:",
            line,
            labels,
            time_marks,
        ]
    )


def build_rich_gantt(blocks: Sequence[GanttBlock], unit_width: int = 3) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not blocks:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    name_to_color: Dict[str, str] = {}

    def name_color(name: str) -> str:
        if name not in name_to_color:
            idx = len(name_to_color) % len(colors)
            name_to_color[name] = colors[idx]
        return name_to_color[name]

    timeline = Text()
    labels = Text()
    time_marks = str(blocks[0].start)

    for block in blocks:
        width = max(1, block.duration) * unit_width
        if block.is_idle:
            timeline.append("." * width, style="dim")
            labels.append(block.name[:width].ljust(width), style="dim")
        else:
            timeline.append(" " * width, style=f"on {name_color(block.name)}")
            labels.append(block.name[:width].ljust(width), style="bold")
        # marks sit under the block boundaries; a long mark just pushes the next one right
        time_marks += " " * (block.end * unit_width - len(time_marks)) + str(block.end)

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
