"""Substitution: build one component for real and stand in for the rest.

``ExecutionContext.for_test(root)`` constructs ``root`` genuinely and passes
every other capability to a substitute factory. The default factory returns
``create_autospec`` doubles; a custom factory can return fakes, or ``None`` to
fall back to genuine construction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any
from unittest.mock import NonCallableMock

from graphwire import ExecutionContext, GraphWireConfigurationError, StaticDiscovery, wire


class PaymentGateway(ABC):
    @abstractmethod
    def charge(self, amount: int) -> str: ...


class Mailer(ABC):
    @abstractmethod
    def send(self, message: str) -> None: ...


@wire
class StripeGateway(PaymentGateway):
    def charge(self, amount: int) -> str:
        msg = "Real payments are not available in examples."
        raise RuntimeError(msg)


@wire
class SmtpMailer(Mailer):
    def __init__(self) -> None:
        self.outbox: list[str] = []

    def send(self, message: str) -> None:
        self.outbox.append(message)


@wire
class Checkout:
    def __init__(self, payments: PaymentGateway, mailer: Mailer) -> None:
        self.payments = payments
        self.mailer = mailer

    def place_order(self, amount: int) -> str:
        transaction = self.payments.charge(amount)
        self.mailer.send(f"receipt {transaction}")
        return f"order placed: {transaction}"


class FakeGateway(PaymentGateway):
    def charge(self, amount: int) -> str:
        return f"fake-{amount}"


def only_payments(capability: Any) -> Any | None:
    if capability is PaymentGateway:
        return FakeGateway()
    return None


def main() -> None:
    discovery = StaticDiscovery(tagged=[StripeGateway, SmtpMailer, Checkout])

    context = ExecutionContext.for_test(Checkout, discovery=discovery)
    checkout = context.resolve(Checkout)
    checkout.payments.charge.return_value = "tx-1"

    print(checkout.place_order(42))  # => order placed: tx-1
    print(f"mailer_is_double={isinstance(checkout.mailer, NonCallableMock)}")  # => mailer_is_double=True
    print(checkout.mailer.send.call_args)  # => call('receipt tx-1')

    partial = ExecutionContext.for_test(Checkout, only_payments, discovery=discovery)
    checkout = partial.resolve(Checkout)

    print(checkout.place_order(7))  # => order placed: fake-7
    print(checkout.mailer.outbox)  # => ['receipt fake-7']

    try:
        partial.emit_transcript_for(Checkout)
    except GraphWireConfigurationError as error:
        print(error)  # => Transcripts cannot be emitted from a substitution context.


if __name__ == "__main__":
    main()
