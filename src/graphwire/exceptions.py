from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class GraphWireError(Exception):
    """Represent a base class for all graphwire-specific failures.

    Catch this type when you want to handle any graphwire error path without
    matching each concrete exception class individually.
    """


class GraphWireNotFoundError(GraphWireError):
    """Signal that a capability has no descriptor able to produce an instance.

    Raised by ``ExecutionContext.resolve`` when neither the exact capability key
    nor its arity-erased generic template key has a registration, or when every
    descriptor tried produced zero instances. ``resolve_all`` never raises this
    error and returns an empty tuple instead.

    Typical fixes include tagging an implementation with ``@wire``, adding the
    implementation's module to the scanned packages, or registering a
    multi-binding factory with ``@wirer``.
    """

    def __init__(self, capability: Any, attempted_keys: Sequence[str]) -> None:
        self.capability = capability
        self.attempted_keys = tuple(attempted_keys)
        super().__init__(
            "Could not resolve concrete type for capability: " + ", ".join(self.attempted_keys),
        )


class GraphWireConfigurationError(GraphWireError):
    """Signal a component whose construction recipe cannot be determined.

    Raised when a concrete type has no constructor taking only capabilities,
    collections of capabilities, or defaulted parameters; when a ``@wirer``
    class lacks a static ``wire`` function; and when a generic template cannot
    be bound to the requested type arguments.

    Typical fixes include annotating every constructor parameter with a
    capability type, giving non-capability parameters default values, or
    declaring ``wire`` as a ``@staticmethod``.
    """


class GraphWireDiscoveryError(GraphWireError):
    """Signal a failure while enumerating or registering one discovery unit.

    Discovery is best-effort: each failing module or type is wrapped in this
    error and forwarded to the handler installed with
    ``ExecutionContext.on_discovery_error``, then discovery continues with the
    next item. The original exception is available as ``__cause__``.
    """

    def __init__(self, subject: str, cause: BaseException) -> None:
        self.subject = subject
        self.cause = cause
        super().__init__(f"Discovery failed for {subject}: {cause}")


class GraphWireCycleError(GraphWireError):
    """Signal a dependency cycle among constructor or factory requirements.

    Raised before the interpreter runs out of stack, when materialization
    re-enters a descriptor that is still being built. ``chain`` lists the
    capability keys from the first occurrence of the repeated descriptor to the
    re-entry.

    Typical fixes include breaking the cycle with a factory, or moving the
    shared state into a third component both sides depend on.
    """

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = tuple(chain)
        super().__init__("Circular dependency detected: " + " -> ".join(self.chain))
