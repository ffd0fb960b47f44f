from graphwire.context import ExecutionContext
from graphwire.discovery import (
    DiscoverySource,
    DiscoveryUnit,
    FactoryType,
    PackageScanner,
    StaticDiscovery,
    TaggedType,
)
from graphwire.exceptions import (
    GraphWireConfigurationError,
    GraphWireCycleError,
    GraphWireDiscoveryError,
    GraphWireError,
    GraphWireNotFoundError,
)
from graphwire.lock_mode import LockMode
from graphwire.markers import All, wire, wirer
from graphwire.settings import ContextSettings

__all__ = [
    "All",
    "ContextSettings",
    "DiscoverySource",
    "DiscoveryUnit",
    "ExecutionContext",
    "FactoryType",
    "GraphWireConfigurationError",
    "GraphWireCycleError",
    "GraphWireDiscoveryError",
    "GraphWireError",
    "GraphWireNotFoundError",
    "LockMode",
    "PackageScanner",
    "StaticDiscovery",
    "TaggedType",
    "wire",
    "wirer",
]
