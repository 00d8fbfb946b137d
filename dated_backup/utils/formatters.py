"""Formatting utilities for backup log lines."""

from datetime import datetime


def format_duration(seconds: float) -> str:
    """Format an elapsed time in human readable format.

    Args:
        seconds: Elapsed time in seconds.

    Returns:
        Human readable duration string, such as ``850ms`` or ``1h 2m 3.4s``.
    """
    # Round first so a carry reaches the larger units
    milliseconds = round(seconds * 1000)
    if milliseconds < 1000:
        return f"{milliseconds}ms"

    tenths = round(seconds * 10)
    if tenths < 600:
        return f"{tenths / 10:.1f}s"

    minutes, tenths = divmod(tenths, 600)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m {tenths / 10:.1f}s"
    return f"{minutes}m {tenths / 10:.1f}s"


def format_date(dt: datetime, short: bool = False) -> str:
    """Format datetime for display.

    Args:
        dt: Datetime to format.
        short: If True, use short format.

    Returns:
        Formatted date string.
    """
    if short:
        return dt.strftime('%Y-%m-%d %H:%M')
    else:
        return dt.strftime('%Y-%m-%d %H:%M:%S %z')
