"""
fieldlog Configuration

Process-wide configuration for record emission (destination, minimum
severity, version tag) and the structlog setup used for the library's own
diagnostics side channel.
"""

import logging
import os
import sys
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TextIO

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .levels import Level, InvalidLevel, parse_level


class LoggingConfig:
    """
    Configuration for the logging system from environment variables.

    Values are read once at import time and only take effect through
    ``configure_from_env()``.
    """

    LOG_ENABLED: bool = os.getenv('LOG_ENABLED', 'true').lower() == 'true'
    APP_VERSION: str = os.getenv('APP_VERSION', '')
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'Info')
    LOG_FORMAT: str = os.getenv('LOG_FORMAT', 'json').lower()
    DIAGNOSTIC_LOG_LEVEL: str = os.getenv('DIAGNOSTIC_LOG_LEVEL', 'WARNING').upper()

    @classmethod
    def diagnostic_level(cls) -> int:
        """Numeric level for fieldlog's own loggers; unknown names mean WARNING."""
        level = logging.getLevelName(cls.DIAGNOSTIC_LOG_LEVEL)
        return level if isinstance(level, int) else logging.WARNING


def normalize_level_name(value: Any) -> str:
    """
    Map a configured level name onto "Debug", "Info" or "Error".

    Accepts any casing and the "DebugLevel" style spelling. Anything
    unrecognised becomes "Info".
    """
    if not isinstance(value, str):
        return "Info"

    name = value.strip().lower()
    if name.endswith("level"):
        name = name[:-len("level")]

    try:
        return str(parse_level(name)).capitalize()
    except InvalidLevel:
        return "Info"


class Options(BaseModel):
    """
    Initialization options for record emission.

    Attributes:
        enabled: When False, records go to a discard sink
        app_version: Version tag stamped on every record as ``v``
        log_level: Minimum severity name ("Debug", "Info" or "Error")
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    enabled: bool = True
    app_version: str = Field(default="", alias="appVersion")
    log_level: str = Field(default="Info", alias="logLevel")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        return normalize_level_name(value)

    @property
    def minimum_severity(self) -> Level:
        return parse_level(self.log_level)

    @classmethod
    def from_env(cls) -> 'Options':
        """Build options from the environment (see LoggingConfig)."""
        return cls(
            enabled=LoggingConfig.LOG_ENABLED,
            app_version=LoggingConfig.APP_VERSION,
            log_level=LoggingConfig.LOG_LEVEL,
        )


class DiscardSink:
    """Sink that accepts and drops every write."""

    def write(self, data: str) -> int:
        return len(data)

    def flush(self) -> None:
        pass


DISCARD = DiscardSink()


@dataclass(frozen=True)
class GlobalConfig:
    """
    Immutable snapshot of the process-wide emission settings.

    Attributes:
        destination: Writable text sink, or None for the current sys.stdout
        minimum_severity: Records ranked below this are dropped
        version_tag: Application version stamped on records
    """
    destination: Optional[TextIO] = None
    minimum_severity: Level = Level.INFO
    version_tag: str = ""

    @property
    def sink(self) -> TextIO:
        """Resolve the destination, falling back to standard output."""
        if self.destination is None:
            return sys.stdout
        return self.destination


# Parent of every diagnostics logger in this package
DIAGNOSTICS_LOGGER = "fieldlog"

_config = GlobalConfig()
_config_lock = threading.Lock()


def get_config() -> GlobalConfig:
    """Return the active configuration snapshot."""
    return _config


def configure(options: Optional[Options] = None, destination: Optional[TextIO] = None) -> GlobalConfig:
    """
    Install a new process-wide configuration.

    Intended to run once at startup, before concurrent traffic begins.
    The swap itself is synchronized and readers always see a complete
    snapshot.

    Args:
        options: Emission options (defaults to Options())
        destination: Sink for records when enabled (defaults to stdout)

    Returns:
        The installed GlobalConfig
    """
    global _config
    if options is None:
        options = Options()

    new_config = GlobalConfig(
        destination=destination if options.enabled else DISCARD,
        minimum_severity=options.minimum_severity,
        version_tag=options.app_version,
    )

    with _config_lock:
        _config = new_config
    return new_config


def configure_from_env() -> GlobalConfig:
    """
    Configure emission from environment variables.

    Also applies DIAGNOSTIC_LOG_LEVEL to the ``fieldlog`` logger hierarchy;
    handlers stay under the host application's control.
    """
    logging.getLogger(DIAGNOSTICS_LOGGER).setLevel(LoggingConfig.diagnostic_level())
    return configure(Options.from_env())


def reset_config() -> None:
    """
    Restore the default configuration.

    This function is primarily used for testing to ensure clean state
    between test runs.
    """
    global _config
    with _config_lock:
        _config = GlobalConfig()


def add_request_id(logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Processor adding the active request id, if any, without generating one.

    Args:
        logger: Logger instance
        method_name: Log method name
        event_dict: Event dictionary to process

    Returns:
        Event dictionary with ``request_id`` when a context is active
    """
    # Import here to avoid circular imports
    from .context import REQUEST_ID_HEADER, tracing_context

    ctx = tracing_context.get()
    if ctx is not None and 'request_id' not in event_dict:
        request_id = ctx.incoming_value(REQUEST_ID_HEADER) or ctx.outgoing_value(REQUEST_ID_HEADER)
        if request_id:
            event_dict['request_id'] = request_id

    return event_dict


def diagnostic_processors() -> List[Any]:
    """
    Processor chain for fieldlog's own diagnostics.

    The chain is attached to fieldlog's loggers only; the process-wide
    structlog configuration belongs to the host application.
    """
    renderer = (
        structlog.dev.ConsoleRenderer()
        if LoggingConfig.LOG_FORMAT == 'console'
        else structlog.processors.JSONRenderer()
    )
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
        add_request_id,
        renderer,
    ]


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a diagnostics logger.

    Problems that must not reach the caller (bad severity values, encoding
    or sink failures) are reported here. Records go to the standard
    ``logging`` logger of the same name, so they follow whatever handlers
    the host application installed.

    Args:
        name: Logger name, typically the module name

    Returns:
        structlog BoundLogger wrapping ``logging.getLogger(name)``

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.warning("sink write failed", error="closed file")
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=diagnostic_processors(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
    )
