"""
fieldlog Request Tracing Context

Correlation id propagation using an immutable metadata carrier and a
contextvars slot for the active carrier, so the id follows a request across
threads and async tasks.
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, Mapping, MutableMapping, Optional, Protocol, Tuple


REQUEST_ID_HEADER = "x-request-id"
REQUEST_ID_KEY = "request_id"

# Length of a textual UUID; longer incoming ids are truncated to this
MAX_REQUEST_ID_LENGTH = 36


class PropagationCarrier(Protocol):
    """Anything that can hold incoming and outgoing correlation metadata."""

    def incoming_value(self, key: str) -> Optional[str]:
        ...

    def outgoing_value(self, key: str) -> Optional[str]:
        ...

    def with_outgoing(self, key: str, value: str) -> 'PropagationCarrier':
        ...


def _metadata(values: Optional[Mapping[str, object]]) -> Dict[str, Tuple[str, ...]]:
    """Normalize a metadata mapping to lower-case keys and tuples of strings."""
    normalized: Dict[str, Tuple[str, ...]] = {}
    for key, value in (values or {}).items():
        if isinstance(value, str):
            value = (value,)
        normalized[key.lower()] = normalized.get(key.lower(), ()) + tuple(value)
    return normalized


@dataclass(frozen=True)
class TracingContext:
    """
    Immutable propagation carrier for request metadata.

    Incoming metadata is what arrived with the current request; outgoing
    metadata is what should travel with calls this request makes. Keys are
    case-insensitive and each key may hold several values.

    Attributes:
        incoming: Metadata received from the caller
        outgoing: Metadata to forward downstream
    """
    incoming: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    outgoing: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'incoming', _metadata(self.incoming))
        object.__setattr__(self, 'outgoing', _metadata(self.outgoing))

    @classmethod
    def from_incoming(cls, metadata: Mapping[str, object]) -> 'TracingContext':
        """Build a context from received metadata such as request headers."""
        return cls(incoming=metadata)

    def incoming_value(self, key: str) -> Optional[str]:
        """First incoming value for key, or None."""
        values = self.incoming.get(key.lower())
        return values[0] if values else None

    def outgoing_value(self, key: str) -> Optional[str]:
        """First outgoing value for key, or None."""
        values = self.outgoing.get(key.lower())
        return values[0] if values else None

    def with_outgoing(self, key: str, value: str) -> 'TracingContext':
        """Return a derived context with value appended to the outgoing metadata."""
        outgoing = dict(self.outgoing)
        outgoing[key.lower()] = outgoing.get(key.lower(), ()) + (value,)
        return replace(self, outgoing=outgoing)


# Active carrier for the current thread or task
tracing_context: ContextVar[Optional[TracingContext]] = ContextVar(
    'tracing_context',
    default=None
)


def current_context() -> TracingContext:
    """Return the active carrier, or an empty one when none is set."""
    ctx = tracing_context.get()
    return ctx if ctx is not None else TracingContext()


@contextmanager
def activate(ctx: PropagationCarrier) -> Iterator[PropagationCarrier]:
    """
    Make ctx the active carrier for the duration of a with block.

    The token is kept per activation, so one carrier can be active in many
    threads or tasks at once.

    Example:
        >>> with activate(TracingContext.from_incoming(headers)):
        ...     info("handling request")
    """
    token = tracing_context.set(ctx)
    try:
        yield ctx
    finally:
        tracing_context.reset(token)


def new_request_id() -> str:
    """Generate a random (version 4) request id in canonical lowercase form."""
    return str(uuid.uuid4())


def add_to_context(ctx: PropagationCarrier, request_id: str) -> PropagationCarrier:
    """Attach a request id to the outgoing metadata of a derived context."""
    return ctx.with_outgoing(REQUEST_ID_HEADER, request_id)


def from_context(ctx: Optional[PropagationCarrier]) -> Tuple[PropagationCarrier, str]:
    """
    Retrieve the request id carried by a context.

    Incoming metadata wins over outgoing metadata. When neither holds an id
    a new one is generated and appended to the outgoing metadata of a
    derived context.

    Args:
        ctx: Propagation carrier, or None for an empty one

    Returns:
        Tuple of (context to keep propagating, request id)
    """
    if ctx is None:
        ctx = TracingContext()

    request_id = ctx.incoming_value(REQUEST_ID_HEADER)
    if request_id:
        return ctx, request_id

    request_id = ctx.outgoing_value(REQUEST_ID_HEADER)
    if request_id:
        return ctx, request_id

    request_id = new_request_id()
    return add_to_context(ctx, request_id), request_id


def inject_into(fields: MutableMapping[str, object], ctx: Optional[PropagationCarrier]) -> PropagationCarrier:
    """
    Store the context's request id under ``request_id``.

    Args:
        fields: Record payload to update
        ctx: Propagation carrier

    Returns:
        The context callers should keep propagating
    """
    ctx, request_id = from_context(ctx)
    fields[REQUEST_ID_KEY] = request_id
    return ctx


def request_id_from_header(headers: Mapping[str, str]) -> str:
    """
    Resolve the request id for an incoming request.

    Uses the ``x-request-id`` header when present, truncated to the length of
    a UUID, and generates a new id otherwise.

    Args:
        headers: Request headers (a case-insensitive mapping, or lower-case keys)

    Returns:
        Request id, never longer than 36 characters
    """
    request_id = headers.get(REQUEST_ID_HEADER) or ""
    if not request_id:
        return new_request_id()
    return request_id[:MAX_REQUEST_ID_LENGTH]


def add_to_header(headers: Mapping[str, str], request_id: str) -> Tuple[TracingContext, Dict[str, str]]:
    """
    Set the request id header on a copy of the headers.

    The caller's mapping is left untouched.

    Args:
        headers: Original headers
        request_id: Request id to set (replaces any existing value)

    Returns:
        Tuple of (context carrying the id as outgoing metadata, updated headers)
    """
    updated = {key: value for key, value in headers.items() if key.lower() != REQUEST_ID_HEADER}
    updated[REQUEST_ID_HEADER] = request_id

    ctx = current_context()
    return add_to_context(ctx, request_id), updated
