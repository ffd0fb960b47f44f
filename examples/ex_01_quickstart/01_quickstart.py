"""Quickstart: tag implementations, resolve capabilities.

``@wire`` registers a class under every capability it implements. The context
discovers components on first use, builds each concrete type once, and shares
that instance across all of its capability views.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from graphwire import ExecutionContext, StaticDiscovery, wire


class Clock(ABC):
    @abstractmethod
    def now(self) -> str: ...


class Greeter(ABC):
    @abstractmethod
    def greet(self, name: str) -> str: ...


class Farewell(ABC):
    @abstractmethod
    def bye(self, name: str) -> str: ...


@wire
class FixedClock(Clock):
    def now(self) -> str:
        return "09:00"


@wire
class PoliteGreeter(Greeter, Farewell):
    def __init__(self, clock: Clock) -> None:
        self.clock = clock

    def greet(self, name: str) -> str:
        return f"Good morning, {name} ({self.clock.now()})"

    def bye(self, name: str) -> str:
        return f"Goodbye, {name}"


def main() -> None:
    discovery = StaticDiscovery(tagged=[FixedClock, PoliteGreeter])
    context = ExecutionContext.create(discovery=discovery)

    greeter = context.resolve(Greeter)
    farewell = context.resolve(Farewell)

    print(greeter.greet("Ada"))  # => Good morning, Ada (09:00)
    print(farewell.bye("Ada"))  # => Goodbye, Ada
    print(f"shared_instance={greeter is farewell}")  # => shared_instance=True
    print(f"shared_clock={greeter.clock is context.resolve(Clock)}")  # => shared_clock=True


if __name__ == "__main__":
    main()
