from __future__ import annotations

from graphwire import wire
from greetings import Greeting


@wire
class EnglishGreeting(Greeting):
    def text(self) -> str:
        return "Hello"
