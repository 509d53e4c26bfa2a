"""
Logging for violinkit: the package logger and an opt-in stderr handler.

Every module asks for its logger with get_logger(__name__), so all records
live under the "violinkit" logger, which carries a NullHandler and stays
silent until an application wires it up.

Pipeline functions (build_view_model, resolve_layout, estimate_density,
aggregate, estimate_bandwidth) also take a ``logger`` keyword defaulting to
their module logger. Pass your own to route one pipeline run elsewhere, for
example to a test's caplog or a per-request child logger:

    ```python
    run_logger = get_logger("violinkit.run.sales")
    vm = build_view_model(df, logger=run_logger)
    ```

Levels used by the pipeline:
    debug    stage timings, grid/searched convergence points, layout cascade
    info     unusable input, category limit truncation, figure placeholders
    warning  density did not converge, unknown settings values, bad config files

Scripts that want to see this output call configure_logging(level="DEBUG");
the level defaults to the VIOLINKIT_LOG_LEVEL environment variable.
Library code never calls it.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

# Default format for violinkit logs
DEFAULT_FMT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d:%(funcName)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER_NAME = "violinkit"


def configure_logging(
    level: Optional[Union[str, int]] = None,
    *,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Configure logging for the violinkit logger only (never root).

    Parameters
    ----------
    level:
        Logging level (e.g. "DEBUG", "INFO"). Defaults to VIOLINKIT_LOG_LEVEL
        env var, or "INFO" if unset.
    fmt:
        Log message format. Defaults to a standard format.
    datefmt:
        Date format. Defaults to "%Y-%m-%d %H:%M:%S".
    force:
        If True, remove existing handlers before adding new ones (allows
        reconfiguration). If False, skip if a stderr handler is already present.
    """
    if level is None:
        level = os.environ.get("VIOLINKIT_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    formatter = logging.Formatter(fmt=fmt or DEFAULT_FMT, datefmt=datefmt or DEFAULT_DATEFMT)

    if force:
        for h in logger.handlers[:]:
            h.close()
            logger.removeHandler(h)
    else:
        for h in logger.handlers:
            if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr:
                return

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger by name.

    If name is None, returns the 'violinkit' logger.
    Otherwise, returns logging.getLogger(name).
    """
    if name is None:
        name = ROOT_LOGGER_NAME
    return logging.getLogger(name)
