"""Match clock formatting."""

from __future__ import annotations

PLACEHOLDER = "--:--"


def format_timestamp(timestamp: str | None) -> str:
    """Format a tracking timestamp as a running match clock.

    ``HH:MM:SS(.mmm)`` becomes ``<total minutes>:SS`` and ``MM:SS(.mmm)``
    becomes ``MM:SS``; milliseconds are dropped.

    Examples:
        >>> format_timestamp("01:02:03.400")
        '62:03'
        >>> format_timestamp(None)
        '--:--'
    """
    if not timestamp:
        return PLACEHOLDER

    parts = timestamp.split(":")
    try:
        if len(parts) == 3:
            total_minutes = int(parts[0]) * 60 + int(parts[1])
            seconds = parts[2].split(".")[0]
            return f"{total_minutes}:{seconds}"
        if len(parts) == 2:
            seconds = parts[1].split(".")[0]
            return f"{parts[0]}:{seconds}"
    except ValueError:
        return PLACEHOLDER

    return PLACEHOLDER
