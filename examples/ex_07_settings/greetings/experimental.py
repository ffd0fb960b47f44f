from __future__ import annotations

from graphwire import wire
from greetings import Greeting


@wire
class PirateGreeting(Greeting):
    def text(self) -> str:
        return "Ahoy"
