from __future__ import annotations

from graphwire import wire
from inventory.contracts import StockSource


@wire
class LegacyStock(StockSource):
    def count(self, sku: str) -> int:
        return 0
