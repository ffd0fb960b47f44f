"""Package scanning: discover ``@wire`` classes by walking packages.

``ExecutionContext.create(["inventory"])`` imports every module of the
package and registers the tagged classes defined there. Modules under
``exclude_prefixes`` are skipped, and modules that fail to import are
reported to ``on_discovery_error`` handlers while the rest still register.
"""

from __future__ import annotations

from graphwire import ExecutionContext, GraphWireDiscoveryError
from inventory.contracts import StockSource
from inventory.service import RestockService


def main() -> None:
    errors: list[GraphWireDiscoveryError] = []
    context = ExecutionContext.create(["inventory"]).on_discovery_error(errors.append)
    context.exclude_prefixes.append("inventory.legacy")

    service = context.resolve(RestockService)

    print(service.check("sku-1"))  # => [console] sku-1 has 7 units
    print([type(source).__name__ for source in context.resolve_all(StockSource)])  # => ['WarehouseStock']
    print([error.subject for error in errors])  # => ['inventory.unfinished']
    registered = dict(context.list_registrations())
    print(registered["inventory.contracts.StockSource"])  # => ['inventory.sources.WarehouseStock']
    print(registered["inventory.contracts.Notifier"])  # => ['inventory.sources.ConsoleNotifier']
    print(sorted(registered))  # => ['inventory.contracts.Notifier', 'inventory.contracts.StockSource', 'inventory.service.RestockService']


if __name__ == "__main__":
    main()
