"""
Pytest configuration for the lazy stream tests.

This file ensures that the parent directory is in the Python path
so that test files can import lazy, utils, models and app.
"""

import sys
from pathlib import Path

# Add the parent directory to the Python path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import logging
import pytest

from lazy import cons, empty
from models import TraceConfig
from utils import clear_performance_metrics


def _forbidden():
    raise AssertionError("this thunk must not be forced")


@pytest.fixture
def forbidden():
    """Zero-argument callable that fails the test if it is ever called"""
    return _forbidden


@pytest.fixture
def trap_stream():
    """Stream 1, 2 whose tail after the second element raises if forced"""
    return cons(lambda: 1, lambda: cons(lambda: 2, _forbidden))


@pytest.fixture
def counted():
    """Factory for finite streams that record which heads were evaluated"""
    def make(*items):
        evaluated = []

        def build(index):
            if index >= len(items):
                return empty()

            def head():
                evaluated.append(items[index])
                return items[index]

            return cons(head, lambda: build(index + 1))

        return build(0), evaluated

    return make


@pytest.fixture
def trace_config():
    return TraceConfig(enabled=True, logger_name="lazy_stream.trace.test", level="DEBUG")


@pytest.fixture
def trace_records(caplog, trace_config):
    """Messages logged on the test trace logger"""
    caplog.set_level(logging.DEBUG, logger=trace_config.logger_name)

    def messages():
        return [r.getMessage() for r in caplog.records if r.name == trace_config.logger_name]

    return messages


@pytest.fixture(autouse=True)
def reset_metrics():
    clear_performance_metrics()
    yield
    clear_performance_metrics()
