"""Tests for logging utilities."""

import logging
from io import StringIO

from qacademy.logging import (
    configure_logging,
    get_logger,
    set_log_level,
)


def test_get_logger_returns_namespaced_logger():
    logger = get_logger("test_module")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "qacademy.test_module"


def test_get_logger_keeps_package_names():
    assert get_logger("qacademy.circuit.core").name == "qacademy.circuit.core"
    assert get_logger().name == "qacademy"


def test_get_logger_caching():
    logger1 = get_logger("test_module")
    n_handlers = len(logger1.handlers)
    logger2 = get_logger("test_module")
    assert logger1 is logger2
    assert len(logger2.handlers) == n_handlers


def test_get_logger_different_modules():
    logger1 = get_logger("module1")
    logger2 = get_logger("module2")
    assert logger1 is not logger2
    assert logger1.name != logger2.name


def test_set_log_level_string():
    logger = get_logger("test_module")
    try:
        set_log_level("DEBUG")
        assert logger.level == logging.DEBUG

        set_log_level("ERROR")
        assert logger.level == logging.ERROR
    finally:
        set_log_level(logging.WARNING)


def test_configure_logging_redirects_output():
    logger = get_logger("test_module")
    stream = StringIO()
    try:
        configure_logging(level=logging.DEBUG, stream=stream)
        logger.debug("Debug message")
        output = stream.getvalue()
        assert "Debug message" in output
        assert "qacademy.test_module" in output
    finally:
        configure_logging(level=logging.WARNING)


def test_logger_does_not_propagate():
    logger = get_logger("test_module")
    assert logger.propagate is False


def test_zero_norm_collapse_logs_warning():
    """Collapsing onto an impossible outcome warns instead of raising."""
    import torch

    from qacademy.measurement import collapse

    logger = get_logger("qacademy.measurement.collapse")
    stream = StringIO()
    try:
        configure_logging(level=logging.WARNING, stream=stream)
        state = torch.tensor([1.0, 0.0], dtype=torch.complex128)
        norm = collapse(state, 0, 1)
        assert norm == 0.0
        assert "zero-norm" in stream.getvalue()
        assert logger.level == logging.WARNING
    finally:
        configure_logging(level=logging.WARNING)
