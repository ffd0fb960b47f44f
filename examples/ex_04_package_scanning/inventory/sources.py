from __future__ import annotations

from graphwire import wire
from inventory.contracts import Notifier, StockSource


@wire
class WarehouseStock(StockSource):
    def count(self, sku: str) -> int:
        return 7


@wire(provides=Notifier)
class ConsoleNotifier(Notifier):
    def notify(self, message: str) -> str:
        return f"[console] {message}"
