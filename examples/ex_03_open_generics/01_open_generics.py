"""Open generics: one template, one instance per type argument.

A generic implementation of a generic capability is registered as a template.
Resolving a closed capability such as ``Repository[User]`` specializes the
template once and caches the result; ``Repository[Order]`` gets its own
instance. A closed registration for the same capability is tried first.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from graphwire import ExecutionContext, StaticDiscovery, wire

T = TypeVar("T")


class User:
    pass


class Order:
    pass


class Repository(Generic[T]):
    def describe(self) -> str:
        raise NotImplementedError


@wire
class MemoryRepository(Repository[T]):
    def __init__(self) -> None:
        self.rows: list[T] = []

    def describe(self) -> str:
        return f"memory repository with {len(self.rows)} rows"


@wire
class AuditedOrders(Repository[Order]):
    def describe(self) -> str:
        return "audited orders"


@wire
class UserService:
    def __init__(self, users: Repository[User]) -> None:
        self.users = users


def main() -> None:
    discovery = StaticDiscovery(tagged=[MemoryRepository, AuditedOrders, UserService])
    context = ExecutionContext.create(discovery=discovery)

    users = context.resolve(Repository[User])
    users.rows.append(User())

    print(users.describe())  # => memory repository with 1 rows
    print(f"cached={context.resolve(UserService).users is users}")  # => cached=True
    print(context.resolve(Repository[Order]).describe())  # => audited orders
    orders = context.resolve_all(Repository[Order])
    print([type(repository).__name__ for repository in orders])  # => ['AuditedOrders', 'MemoryRepository']


if __name__ == "__main__":
    main()
