"""
fieldlog Logging Entry Points

Two calling styles share the same gate and emission semantics:

- Cumulative: build a Fields with ``new_logger()``, ``with_fields()`` or
  ``with_tracing()`` and finish with a leveled method such as ``.info()``.
- Stateless: call a module function such as ``info()`` or ``infof()``; the
  record is drawn from a scratch pool and returned to it afterwards.

Caller-supplied fields are always copied before they are stamped, so the
caller's mapping is never mutated.

Example:
    >>> with_fields({"user": "u-1"}, err).error("login failed")
    >>> infof("Sending: %v", order_id)
"""

from typing import Any, Mapping, Optional

from .context import PropagationCarrier, tracing_context
from .emit import structured_wrap
from .fields import Fields, render_format
from .levels import Level
from .pool import fields_pool


def new_logger() -> Fields:
    """Return an empty Fields for cumulative logging."""
    return Fields()


def with_fields(details: Mapping, *errors: Any) -> Fields:
    """
    Start a record from a copy of the caller's fields.

    Args:
        details: Fields to log (not modified)
        *errors: Errors to aggregate under ``Error``; None entries are skipped

    Returns:
        A new Fields; finish it with a leveled method, e.g. ``.info("msg")``
    """
    data = Fields(details)
    data.attach_errors(*errors)
    return data


def with_tracing(ctx: Optional[PropagationCarrier], details: Mapping, *errors: Any) -> Fields:
    """
    Like ``with_fields()``, and also add the request id carried by ctx.

    Args:
        ctx: Propagation carrier; a request id is generated if it holds none
        details: Fields to log (not modified)
        *errors: Errors to aggregate under ``Error``

    Returns:
        A new Fields with ``request_id`` set
    """
    data = with_fields(details, *errors)
    data.add_tracing(ctx)
    return data


def text_wrap(msg: str, level: Level, ctx: Optional[PropagationCarrier] = None) -> bool:
    """
    Log a plain message using a pooled Fields.

    The request id is added when ctx is given or a tracing context is
    active. The pooled instance is cleared and returned even if emission
    fails.

    Returns:
        True if the record was emitted
    """
    data = fields_pool.get()
    try:
        data["severity"] = str(level)
        data["msg"] = msg

        if ctx is None:
            ctx = tracing_context.get()
        if ctx is not None:
            data.add_tracing(ctx)

        return structured_wrap(data)
    finally:
        # Clear before returning to the pool so no keys leak into later records
        data.clear()
        fields_pool.put(data)


def join_values(values) -> str:
    """Render each value with str() and join them with ", "."""
    return ", ".join(str(value) for value in values)


def _log_fields(level: Level, details: Mapping, ctx: Optional[PropagationCarrier] = None,
                errors=(), tracing: bool = False) -> bool:
    data = Fields(details)
    data.attach_errors(*errors)
    data["severity"] = str(level)
    if tracing:
        data.add_tracing(ctx)
    return structured_wrap(data)


# Debug

def debug(*values: Any) -> None:
    """Log values, joined with ", ", at the debug level."""
    text_wrap(join_values(values), Level.DEBUG)


def debugf(fmt: str, *args: Any, ctx: Optional[PropagationCarrier] = None) -> None:
    """Log a printf-style message at the debug level."""
    text_wrap(render_format(fmt, args), Level.DEBUG, ctx)


def debugw(details: Mapping) -> None:
    """Log a copy of the given fields at the debug level."""
    _log_fields(Level.DEBUG, details)


def debug_with_tracing(ctx: Optional[PropagationCarrier], details: Mapping, *errors: Any) -> None:
    """Log a copy of the given fields at the debug level with the context's request id."""
    _log_fields(Level.DEBUG, details, ctx, errors, tracing=True)


# Info

def info(*values: Any) -> None:
    """Log values, joined with ", ", at the info level."""
    text_wrap(join_values(values), Level.INFO)


def infof(fmt: str, *args: Any, ctx: Optional[PropagationCarrier] = None) -> None:
    """Log a printf-style message at the info level."""
    text_wrap(render_format(fmt, args), Level.INFO, ctx)


def infow(details: Mapping) -> None:
    """Log a copy of the given fields at the info level."""
    _log_fields(Level.INFO, details)


def info_with_tracing(ctx: Optional[PropagationCarrier], details: Mapping, *errors: Any) -> None:
    """Log a copy of the given fields at the info level with the context's request id."""
    _log_fields(Level.INFO, details, ctx, errors, tracing=True)


# Error

def error(*values: Any) -> None:
    """Log values, joined with ", ", at the error level."""
    text_wrap(join_values(values), Level.ERROR)


def errorf(fmt: str, *args: Any, ctx: Optional[PropagationCarrier] = None) -> None:
    """Log a printf-style message at the error level."""
    text_wrap(render_format(fmt, args), Level.ERROR, ctx)


def errorw(details: Mapping) -> None:
    """Log a copy of the given fields at the error level."""
    _log_fields(Level.ERROR, details)


def error_with_tracing(ctx: Optional[PropagationCarrier], details: Mapping, *errors: Any) -> None:
    """Log a copy of the given fields at the error level with the context's request id."""
    _log_fields(Level.ERROR, details, ctx, errors, tracing=True)
