from __future__ import annotations


class StockSource:
    def count(self, sku: str) -> int:
        raise NotImplementedError


class Notifier:
    def notify(self, message: str) -> str:
        raise NotImplementedError
