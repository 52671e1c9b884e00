"""Shared helpers."""
from .logger import get_logger
from .formatting import format_currency, format_hours

__all__ = ["get_logger", "format_currency", "format_hours"]
