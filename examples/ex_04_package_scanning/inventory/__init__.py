"""Inventory components discovered by ``01_package_scanning.py``."""
