"""
fieldlog Emission Pipeline

Gates a finished record against the configured minimum severity and writes
it to the destination as a single JSON line. Failures are reported to the
diagnostics logger and never raised to the caller.
"""

import threading
from typing import Any, MutableMapping, Optional

import structlog

from .config import GlobalConfig, get_config, get_logger

logger = get_logger(__name__)

# Keys are sorted so records are stable and diffable; unknown types use repr()
_renderer = structlog.processors.JSONRenderer(sort_keys=True, separators=(",", ":"))

# Serializes writes so concurrent records never interleave on the sink
_write_lock = threading.Lock()


def encode(record: MutableMapping[str, Any]) -> str:
    """Encode a record as one JSON object followed by the record terminator."""
    return _renderer(None, "msg", dict(record)) + "\n"


def fire(record: MutableMapping[str, Any], config: Optional[GlobalConfig] = None) -> bool:
    """
    Encode a record and write it to the destination.

    The record is fully encoded in memory first, then written with a single
    write call.

    Args:
        record: Record payload
        config: Configuration snapshot (defaults to the active one)

    Returns:
        True if the record was written, False if it was lost
    """
    if config is None:
        config = get_config()

    try:
        line = encode(record)
    except Exception as e:
        logger.error("encoding log record", error=str(e), error_type=type(e).__name__)
        return False

    sink = config.sink
    try:
        with _write_lock:
            sink.write(line)
            flush = getattr(sink, "flush", None)
            if flush is not None:
                flush()
    except Exception as e:
        logger.error("writing log record", error=str(e), error_type=type(e).__name__)
        return False

    return True


def structured_wrap(record) -> bool:
    """
    Run a populated record through the gate and emit it if it passes.

    Resolves the record's severity and drops the record untouched when it
    ranks below the configured minimum; only records that pass are stamped
    with the base fields and written.

    Args:
        record: Fields instance with ``severity`` (and usually ``msg``) set

    Returns:
        True if the record was emitted, False if it was dropped or lost
    """
    config = get_config()

    level = record.resolve_severity()
    if level < config.minimum_severity:
        return False

    record.add_base_fields(config)
    return fire(record, config)
