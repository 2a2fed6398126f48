"""
Output formatting for callboard.

Handles chart labels, ASCII tables, colors, and CLI output formatting.
All stdlib - no external dependencies.
"""

import math
import os
import re
import sys
from datetime import datetime
from typing import List, Optional, Any, Sequence

from callboard.models.entities import DurationPoint, OutcomeSlice

# Enable ANSI colors on Windows
if sys.platform == 'win32':
    os.system('')  # Triggers VT100 emulation

DATE_LABEL_FORMATS = ('%d %b %Y', '%d %B %Y', '%Y-%m-%d', '%b %d %Y', '%B %d %Y')

EVEN_FOOTER = "Evenly distributed failure patterns this week."


class Colors:
    """ANSI escape codes for terminal colors."""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    GRAY = '\033[90m'


def colorize(text: str, color: str, enabled: bool = True) -> str:
    """Apply color if enabled."""
    if not enabled:
        return text
    return f"{color}{text}{Colors.RESET}"


def bold(text: str, enabled: bool = True) -> str:
    """Make text bold."""
    if not enabled:
        return text
    return f"{Colors.BOLD}{text}{Colors.RESET}"


def format_number(value: float) -> str:
    """Format a chart value, dropping a trailing .0 on whole numbers."""
    if not math.isfinite(value):
        return "0"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_seconds(value: float) -> str:
    """Format a duration in seconds as e.g. '1h 2m 3s'."""
    try:
        raw = float(value)
    except (TypeError, ValueError):
        return "0s"
    if not math.isfinite(raw):
        return "0s"

    total = max(0, int(round(raw)))
    hours = total // 3600
    minutes = (total % 3600) // 60
    seconds = total % 60

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if seconds > 0 or not parts:
        parts.append(f"{seconds}s")
    return ' '.join(parts)


def parse_date_label(label: str) -> Optional[datetime]:
    for fmt in DATE_LABEL_FORMATS:
        try:
            return datetime.strptime(label.strip(), fmt)
        except ValueError:
            continue
    return None


def format_month_label(label: str) -> str:
    """'1 Jan 2024' -> 'Jan 24'. Unparsable labels are returned unchanged."""
    parsed = parse_date_label(label)
    if parsed is None:
        return label
    return parsed.strftime('%b %y')


def format_full_date_label(label: str) -> str:
    """'1 Jan 2024' -> 'Jan 1, 2024'. Unparsable labels are returned unchanged."""
    parsed = parse_date_label(label)
    if parsed is None:
        return label
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def leading_outcome(slices: Sequence[OutcomeSlice]) -> Optional[OutcomeSlice]:
    """Slice with the highest value; the first one wins ties."""
    if not slices:
        return None
    leading = slices[0]
    for candidate in slices[1:]:
        if candidate.value > leading.value:
            leading = candidate
    return leading


def outcome_footer(slices: Sequence[OutcomeSlice]) -> str:
    top = leading_outcome(slices)
    if top is None:
        return EVEN_FOOTER
    return f"{top.name} is the top driver at {format_number(top.value)}%."


def create_bar(value: float, max_value: float, width: int = 20) -> str:
    """Create ASCII progress bar."""
    if max_value == 0:
        return ' ' * width

    ratio = min(1.0, value / max_value)
    filled = int(ratio * width)

    return '█' * filled + '░' * (width - filled)


def format_table(
    headers: List[str],
    rows: List[List[Any]],
    alignments: Optional[List[str]] = None,
    color_enabled: bool = True
) -> str:
    """
    Format data as an ASCII table.

    Args:
        headers: Column headers
        rows: List of row tuples/lists
        alignments: List of 'l', 'r', or 'c' for each column
        color_enabled: Whether to apply colors to headers
    """
    if not rows:
        return "No data to display."

    str_rows = [[str(cell) for cell in row] for row in rows]

    col_widths = [len(h) for h in headers]
    for row in str_rows:
        for i, cell in enumerate(row):
            col_widths[i] = max(col_widths[i], len(strip_ansi(cell)))

    if alignments is None:
        alignments = ['l'] * len(headers)

    def align_cell(text: str, width: int, align: str) -> str:
        padding_needed = width - len(strip_ansi(text))
        if align == 'r':
            return ' ' * padding_needed + text
        elif align == 'c':
            left_pad = padding_needed // 2
            return ' ' * left_pad + text + ' ' * (padding_needed - left_pad)
        else:  # left
            return text + ' ' * padding_needed

    lines = []

    header_line = ' │ '.join(
        align_cell(h, col_widths[i], alignments[i]) for i, h in enumerate(headers)
    )
    lines.append(bold(header_line, color_enabled))
    lines.append('─┼─'.join('─' * w for w in col_widths))

    for row in str_rows:
        lines.append(' │ '.join(
            align_cell(cell, col_widths[i], alignments[i]) for i, cell in enumerate(row)
        ))

    return '\n'.join(lines)


def strip_ansi(text: str) -> str:
    """Remove ANSI escape codes from text."""
    ansi_escape = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')
    return ansi_escape.sub('', text)


def print_section(title: str, color_enabled: bool = True) -> str:
    """Create a section header."""
    return f"\n{bold(title, color_enabled)}\n{'-' * len(title)}"


def format_duration_table(points: Sequence[DurationPoint], color_enabled: bool = True) -> str:
    """Call duration chart as a table with a relative bar per month."""
    peak = max((p.value for p in points), default=0)
    rows = [
        [
            format_month_label(p.day),
            format_full_date_label(p.day),
            format_seconds(p.value),
            create_bar(p.value, peak),
        ]
        for p in points
    ]
    return format_table(
        ['Month', 'Date', 'Avg duration', ''], rows, ['l', 'l', 'r', 'l'], color_enabled
    )


def format_outcome_table(slices: Sequence[OutcomeSlice], color_enabled: bool = True) -> str:
    """Sad path chart as a table, followed by the footer line."""
    rows = [
        [s.name, f"{format_number(s.value)}%", create_bar(s.value, 100)]
        for s in slices
    ]
    table = format_table(['Outcome', 'Share', ''], rows, ['l', 'r', 'l'], color_enabled)
    return f"{table}\n\n{colorize(outcome_footer(slices), Colors.GRAY, color_enabled)}"
