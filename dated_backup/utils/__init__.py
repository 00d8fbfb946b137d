"""Utility modules for dated backups."""

from .formatters import format_duration, format_date

__all__ = ["format_duration", "format_date"]
