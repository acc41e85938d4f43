"""Output formatting helpers for SQLDiag."""

from __future__ import annotations

from collections.abc import Sequence


def summarize_items(items: Sequence[str], limit: int = 10, separator: str = "; ") -> str:
    """Join the first ``limit`` items and state how many were left out.

    Args:
        items: Full list of offending entities.
        limit: How many to show.
        separator: Joiner between shown items.

    Returns:
        String like 'a; b; c ... and 4 more'.
    """
    shown = separator.join(items[:limit])
    hidden = len(items) - limit
    if hidden > 0:
        return f"{shown} ... and {hidden} more"
    return shown


def plural(count: int, singular: str, plural_form: str | None = None) -> str:
    """Return '1 table' / '3 tables'."""
    word = singular if count == 1 else (plural_form or singular + "s")
    return f"{count:,} {word}"


def format_size_mb(mb: float | None) -> str:
    """Format a size in MB as '850 MB' or '2.4 GB'."""
    if mb is None:
        return "N/A"
    if mb >= 1024:
        return f"{mb / 1024:.1f} GB"
    return f"{mb:.0f} MB"


def format_duration(ms: int) -> str:
    """Format milliseconds as '850 ms' or '2.4 s'."""
    if ms >= 1000:
        return f"{ms / 1000:.1f} s"
    return f"{ms} ms"


def status_color(status: str) -> str:
    """Return Rich color name for a check status."""
    colors = {
        "PASS": "green",
        "WARNING": "yellow",
        "FAIL": "bold red",
    }
    return colors.get(status.upper(), "white")


def truncate(text: str, max_length: int = 80) -> str:
    """Truncate text with ellipsis if longer than max_length."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."
