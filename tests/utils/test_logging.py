"""Tests for violinkit logging helpers."""

import logging
import sys

from violinkit.utils.logging import ROOT_LOGGER_NAME, configure_logging, get_logger
from violinkit.violin.algorithms.aggregate import samples_frame
from violinkit.violin.view_model import build_view_model


def _stderr_handlers(logger):
    return [
        h for h in logger.handlers
        if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr
    ]


def test_get_logger_default_name():
    assert get_logger().name == ROOT_LOGGER_NAME == "violinkit"
    assert get_logger("violinkit.violin.kde").name == "violinkit.violin.kde"


def test_configure_logging_is_idempotent_and_forceable():
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    saved_handlers = logger.handlers[:]
    saved_level = logger.level
    try:
        configure_logging(level="DEBUG", force=True)
        assert logger.level == logging.DEBUG
        assert len(_stderr_handlers(logger)) == 1

        configure_logging(level="DEBUG")
        assert len(_stderr_handlers(logger)) == 1

        configure_logging(level="WARNING", force=True)
        assert logger.level == logging.WARNING
        assert len(_stderr_handlers(logger)) == 1
    finally:
        for h in logger.handlers[:]:
            logger.removeHandler(h)
        for h in saved_handlers:
            logger.addHandler(h)
        logger.setLevel(saved_level)


def test_injected_logger_receives_pipeline_records(caplog):
    run_logger = get_logger("violinkit.run.test")
    with caplog.at_level(logging.DEBUG, logger="violinkit"):
        build_view_model(samples_frame([1.0, 2.0, 3.0]), logger=run_logger)
    names = {r.name for r in caplog.records}
    assert "violinkit.run.test" in names
    assert any("aggregate" in r.getMessage() for r in caplog.records if r.name == "violinkit.run.test")
