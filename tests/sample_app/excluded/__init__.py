from __future__ import annotations

from graphwire import wire
from sample_app.contracts import IPlugin


@wire
class ExcludedPlugin(IPlugin):
    def run(self) -> str:
        return "excluded"
