"""Discoverable components used by package scanning tests."""
