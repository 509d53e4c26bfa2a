"""Utility functions for violinkit."""

from .logging import configure_logging, get_logger
from .profiling import ProfileEntry, StageProfiler

__all__ = [
    "ProfileEntry",
    "StageProfiler",
    "configure_logging",
    "get_logger",
]
