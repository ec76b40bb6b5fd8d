"""
fieldlog - Structured Leveled Logging

Writes one JSON object per record, gated by severity and enriched with the
request id carried by the active tracing context.
"""

from .levels import Level, InvalidLevel, level_name, parse_level
from .config import (
    Options,
    GlobalConfig,
    LoggingConfig,
    DISCARD,
    configure,
    configure_from_env,
    get_config,
    get_logger,
    reset_config,
)
from .context import (
    REQUEST_ID_HEADER,
    TracingContext,
    tracing_context,
    current_context,
    activate,
    add_to_context,
    add_to_header,
    from_context,
    inject_into,
    new_request_id,
    request_id_from_header,
)
from .fields import Fields
from .pool import ScratchPool, fields_pool
from .logger import (
    new_logger,
    with_fields,
    with_tracing,
    debug,
    debugf,
    debugw,
    debug_with_tracing,
    info,
    infof,
    infow,
    info_with_tracing,
    error,
    errorf,
    errorw,
    error_with_tracing,
)

__all__ = [
    'Level',
    'InvalidLevel',
    'level_name',
    'parse_level',
    'Options',
    'GlobalConfig',
    'LoggingConfig',
    'DISCARD',
    'configure',
    'configure_from_env',
    'get_config',
    'get_logger',
    'reset_config',
    'REQUEST_ID_HEADER',
    'TracingContext',
    'tracing_context',
    'current_context',
    'activate',
    'add_to_context',
    'add_to_header',
    'from_context',
    'inject_into',
    'new_request_id',
    'request_id_from_header',
    'Fields',
    'ScratchPool',
    'fields_pool',
    'new_logger',
    'with_fields',
    'with_tracing',
    'debug',
    'debugf',
    'debugw',
    'debug_with_tracing',
    'info',
    'infof',
    'infow',
    'info_with_tracing',
    'error',
    'errorf',
    'errorw',
    'error_with_tracing',
]
