"""Collections: ``All[T]``, ``list[T]``, and multi-binding factories.

``All[T]`` (or ``tuple[T, ...]``) injects every implementation registered for
``T`` in discovery order. A ``@wirer`` class owns a static ``wire`` function
whose return annotation decides what it contributes; ``tuple[T, ...]`` adds
each returned item as its own registration.
"""

from __future__ import annotations

from graphwire import All, ExecutionContext, StaticDiscovery, wire, wirer


class Check:
    def run(self) -> str:
        raise NotImplementedError


@wire
class DiskCheck(Check):
    def run(self) -> str:
        return "disk ok"


@wire
class NetworkCheck(Check):
    def run(self) -> str:
        return "network ok"


class PingCheck(Check):
    def __init__(self, host: str) -> None:
        self.host = host

    def run(self) -> str:
        return f"ping {self.host} ok"


@wirer
class PingChecks:
    @staticmethod
    def wire() -> tuple[Check, ...]:
        return (PingCheck("db"), PingCheck("cache"))


@wire
class HealthReport:
    def __init__(self, checks: All[Check], ordered: list[Check]) -> None:
        self.checks = checks
        self.ordered = ordered

    def render(self) -> str:
        return ", ".join(check.run() for check in self.checks)


def main() -> None:
    discovery = StaticDiscovery(tagged=[DiskCheck, NetworkCheck, HealthReport], factories=[PingChecks])
    context = ExecutionContext.create(discovery=discovery)

    report = context.resolve(HealthReport)

    print(report.render())  # => disk ok, network ok, ping db ok, ping cache ok
    print(f"checks_type={type(report.checks).__name__}")  # => checks_type=tuple
    print(f"ordered_type={type(report.ordered).__name__}")  # => ordered_type=list
    print(f"same_items={list(report.checks) == report.ordered}")  # => same_items=True
    print(f"resolve_all={len(context.resolve_all(Check))}")  # => resolve_all=4
    print(f"first={type(context.resolve(Check)).__name__}")  # => first=DiskCheck


if __name__ == "__main__":
    main()
