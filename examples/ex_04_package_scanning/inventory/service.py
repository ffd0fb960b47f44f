from __future__ import annotations

from graphwire import wire
from inventory.contracts import Notifier, StockSource


@wire
class RestockService:
    def __init__(self, stock: StockSource, notifier: Notifier) -> None:
        self.stock = stock
        self.notifier = notifier

    def check(self, sku: str) -> str:
        return self.notifier.notify(f"{sku} has {self.stock.count(sku)} units")
