"""A module that cannot be imported yet; discovery reports it and moves on."""

from inventory.missing_dependency import ShippingClient  # noqa: F401
