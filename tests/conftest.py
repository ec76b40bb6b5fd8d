"""Shared fixtures for fieldlog tests."""

import io
import json
import logging

import pytest

from fieldlog import Options, configure, reset_config, tracing_context


@pytest.fixture(autouse=True)
def clean_config():
    """Restore default configuration and tracing state around every test."""
    reset_config()
    token = tracing_context.set(None)
    yield
    tracing_context.reset(token)
    reset_config()
    logging.getLogger("fieldlog").setLevel(logging.NOTSET)


@pytest.fixture
def sink():
    """In-memory destination for emitted records."""
    return io.StringIO()


@pytest.fixture
def configure_sink(sink):
    """Configure emission into the in-memory sink at a given threshold."""
    def _configure(log_level="Debug", app_version="test"):
        return configure(Options(enabled=True, app_version=app_version, log_level=log_level), destination=sink)
    return _configure


@pytest.fixture
def read_records(sink):
    """Parse every line written to the sink as a JSON record."""
    def _read():
        return [json.loads(line) for line in sink.getvalue().splitlines()]
    return _read
