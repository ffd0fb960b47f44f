"""Application components exercised by ``test_demo.py``."""

from __future__ import annotations

from abc import ABC, abstractmethod

from graphwire import wire


class Clock(ABC):
    @abstractmethod
    def now(self) -> str: ...


@wire
class NoonClock(Clock):
    def now(self) -> str:
        return "12:00"


@wire
class Scheduler:
    def __init__(self, clock: Clock) -> None:
        self.clock = clock

    def next_run(self) -> str:
        return f"next run at {self.clock.now()}"
