"""
Utility modules for the AVM engine.
"""

from .formatting import format_currency, format_percent, format_area, format_distance
from .config import Config
from .logging import setup_logging

__all__ = [
    "format_currency",
    "format_percent",
    "format_area",
    "format_distance",
    "Config",
    "setup_logging",
]
