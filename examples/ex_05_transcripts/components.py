"""Components rebuilt by the transcript in ``01_transcripts.py``.

Transcripts reference types by import path, so they live in an importable
module rather than in the script itself.
"""

from __future__ import annotations

from graphwire import All, wire, wirer


@wire
class Config:
    def __init__(self) -> None:
        self.dsn = "sqlite://memory"


@wire
class Repository:
    def __init__(self, config: Config) -> None:
        self.config = config


class Handler:
    def __init__(self, route: str) -> None:
        self.route = route


@wirer
class Handlers:
    @staticmethod
    def wire(config: Config) -> tuple[Handler, ...]:
        return (Handler("/users"), Handler("/orders"))


@wire
class Service:
    def __init__(self, repository: Repository, handlers: All[Handler]) -> None:
        self.repository = repository
        self.handlers = handlers

    def describe(self) -> str:
        routes = ", ".join(handler.route for handler in self.handlers)
        return f"{self.repository.config.dsn} serving {routes}"
