"""Errors: what goes wrong, and which exception says so.

Every failure derives from ``GraphWireError``. Resolution raises
``GraphWireNotFoundError``, ``GraphWireConfigurationError`` or
``GraphWireCycleError``. Discovery never raises; failures are wrapped in
``GraphWireDiscoveryError`` and passed to ``on_discovery_error`` handlers.
"""

from __future__ import annotations

from graphwire import (
    ExecutionContext,
    GraphWireConfigurationError,
    GraphWireCycleError,
    GraphWireDiscoveryError,
    GraphWireError,
    GraphWireNotFoundError,
    StaticDiscovery,
    wire,
    wirer,
)


class Missing:
    pass


@wire
class NeedsPort:
    def __init__(self, port) -> None:  # noqa: ANN001
        self.port = port


@wire
class Chicken:
    def __init__(self, egg: Egg) -> None:
        self.egg = egg


@wire
class Egg:
    def __init__(self, chicken: Chicken) -> None:
        self.chicken = chicken


@wirer
class BrokenFactory:
    def wire(self) -> NeedsPort:
        return NeedsPort(8080)


def main() -> None:
    errors: list[GraphWireDiscoveryError] = []
    discovery = StaticDiscovery(tagged=[NeedsPort, Chicken, Egg], factories=[BrokenFactory])
    context = ExecutionContext.create(discovery=discovery).on_discovery_error(errors.append)

    try:
        context.resolve(Missing)
    except GraphWireNotFoundError as error:
        print(error)  # => Could not resolve concrete type for capability: __main__.Missing

    try:
        context.resolve(NeedsPort)
    except GraphWireConfigurationError as error:
        print(str(error).split(". ")[0])  # => Can't determine component dependencies of __main__.NeedsPort: parameter 'port' is not a capability

    try:
        context.resolve(Chicken)
    except GraphWireCycleError as error:
        print(" -> ".join(error.chain))  # => __main__.Chicken -> __main__.Egg -> __main__.Chicken

    print(errors[0].subject)  # => __main__.BrokenFactory
    print(errors[0].__cause__)  # => Type __main__.BrokenFactory does not have a static wire method.
    print(f"resolve_all_is_empty={context.resolve_all(Missing) == ()}")  # => resolve_all_is_empty=True
    print(f"common_base={all(isinstance(error, GraphWireError) for error in errors)}")  # => common_base=True


if __name__ == "__main__":
    main()
