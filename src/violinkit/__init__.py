"""
violinkit: statistics, kernel density and layout for violin plots.

This package provides:
- build_view_model: samples -> fully resolved ViewModel (statistics, density
  curves, axis geometry, violin/box/barcode band geometry)
- resolve_layout: viewport-only relayout of an existing plot
- FigureGenerator: optional Plotly figure export of a ViewModel
- Logging utilities for library and application use

For logging configuration in standalone scripts/demos:
    ```python
    from violinkit.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```

When used as a library (imported by other applications), logging is
automatically handled by the parent application's configuration.
"""

import logging

from violinkit.utils.logging import configure_logging, get_logger

from violinkit.violin import (
    FigureGenerator,
    ViewModel,
    ViolinConfig,
    ViolinSettings,
    build_view_model,
    resolve_layout,
    samples_frame,
)

# Ensure violinkit logger has NullHandler so logs don't propagate to root
# when no application has configured logging. Applications/demos call
# configure_logging() to replace this with a real handler.
_logger = logging.getLogger("violinkit")
if not _logger.handlers:
    _logger.addHandler(logging.NullHandler())

__all__ = [
    "FigureGenerator",
    "ViewModel",
    "ViolinConfig",
    "ViolinSettings",
    "build_view_model",
    "configure_logging",
    "get_logger",
    "resolve_layout",
    "samples_frame",
]

__version__ = "0.1.0"
