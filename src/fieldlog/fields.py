"""
fieldlog Fields

The per-record payload: a dict of fields with copy, merge and error
aggregation helpers, plus cumulative leveled methods that stamp the
severity and hand the record to the emission pipeline.
"""

import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from .config import GlobalConfig, get_config, get_logger
from .context import PropagationCarrier, inject_into
from .emit import structured_wrap
from .levels import Level, InvalidLevel, parse_level

logger = get_logger(__name__)

# "%v" is accepted as the default verb alongside the usual printf conversions
_FORMAT_VERB = re.compile(r"%(%|v)")


def render_format(fmt: str, args: Sequence[Any]) -> str:
    """
    Render a printf-style message.

    ``%v`` is rendered like ``%s`` and ``%%`` always renders as ``%``, with or
    without arguments. A single mapping argument is used for
    ``%(name)s`` style lookups, as the standard logging module does. When
    the format cannot be rendered the raw format text is returned and the
    problem is reported as a diagnostic.

    Args:
        fmt: printf-style format string
        args: Positional arguments

    Returns:
        The rendered message
    """
    if not args:
        return fmt.replace("%%", "%")

    template = _FORMAT_VERB.sub(lambda m: "%%" if m.group(1) == "%" else "%s", fmt)
    values = tuple(args)
    if len(values) == 1 and isinstance(values[0], Mapping) and values[0]:
        values = values[0]

    try:
        return template % values
    except (TypeError, ValueError, KeyError) as e:
        logger.warning("rendering log message format", format=fmt, error=str(e))
        return fmt


class Fields(dict):
    """
    Fields to be logged as a single record.

    Reserved keys: ``severity``, ``msg``, ``time``, ``v``, ``request_id``
    and ``Error``.

    Example:
        >>> Fields({"user": "u-1"}).merge({"attempt": 2}).info("login ok")
    """

    def copy(self) -> 'Fields':
        """Shallow copy that stays a Fields instance."""
        return Fields(self)

    def merge(self, other: Mapping) -> 'Fields':
        """Overwrite this record's keys with other's (last write wins)."""
        self.update(other)
        return self

    def attach_errors(self, *errors: Any) -> 'Fields':
        """
        Store the text of all non-None errors under ``Error``.

        Errors are rendered with str() and joined with ", ". When every
        entry is None the record is left unchanged.

        Args:
            *errors: Exceptions (or other values), None entries allowed
        """
        messages = [str(error) for error in errors if error is not None]
        if messages:
            self["Error"] = ", ".join(messages)
        return self

    def add_base_fields(self, config: Optional[GlobalConfig] = None) -> None:
        """Stamp the record time (UTC, microseconds) and application version."""
        if config is None:
            config = get_config()
        self["time"] = datetime.now(timezone.utc).isoformat(timespec="microseconds")
        self["v"] = config.version_tag

    def add_tracing(self, ctx: Optional[PropagationCarrier] = None) -> PropagationCarrier:
        """Add the context's request id; returns the context to keep propagating."""
        return inject_into(self, ctx)

    def resolve_severity(self) -> Level:
        """
        Read the record's severity.

        A missing or unparseable severity resolves to INFO and is reported
        as a diagnostic rather than raised.

        Returns:
            The record's Level
        """
        severity = self.get("severity")
        if not isinstance(severity, str):
            logger.warning(
                "checking log message severity level",
                error="severity level not set",
                fields=sorted(self.keys()),
            )
            return Level.INFO

        try:
            return parse_level(severity)
        except InvalidLevel as e:
            logger.warning("checking log message severity level", error=str(e))
            return Level.INFO

    def _log(self, level: Level, msg: str) -> None:
        self["severity"] = str(level)
        self["msg"] = msg
        structured_wrap(self)

    def _logw(self, level: Level, details: Mapping) -> None:
        self.merge(details)
        self["severity"] = str(level)
        structured_wrap(self)

    def debug(self, msg: str) -> None:
        """Log at the debug level."""
        self._log(Level.DEBUG, msg)

    def debugf(self, fmt: str, *args: Any) -> None:
        """Log at the debug level with a formatting directive."""
        self._log(Level.DEBUG, render_format(fmt, args))

    def debugw(self, details: Mapping) -> None:
        """Merge details into the record and log at the debug level."""
        self._logw(Level.DEBUG, details)

    def info(self, msg: str) -> None:
        """Log at the info level."""
        self._log(Level.INFO, msg)

    def infof(self, fmt: str, *args: Any) -> None:
        """Log at the info level with a formatting directive."""
        self._log(Level.INFO, render_format(fmt, args))

    def infow(self, details: Mapping) -> None:
        """Merge details into the record and log at the info level."""
        self._logw(Level.INFO, details)

    def error(self, msg: str) -> None:
        """Log at the error level."""
        self._log(Level.ERROR, msg)

    def errorf(self, fmt: str, *args: Any) -> None:
        """Log at the error level with a formatting directive."""
        self._log(Level.ERROR, render_format(fmt, args))

    def errorw(self, details: Mapping) -> None:
        """Merge details into the record and log at the error level."""
        self._logw(Level.ERROR, details)
