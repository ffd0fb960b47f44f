from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior around context setup and resolution.

    Discovery runs once on first use and materialization mutates shared
    descriptor state, so concurrent first use from several threads needs a
    guard. ``THREAD`` is the default; use ``NONE`` only when a context is never
    shared between threads.
    """

    THREAD = "thread"
    """Guard setup and resolution with a re-entrant ``threading.RLock``."""

    NONE = "none"
    """Disable locking around setup and resolution."""
