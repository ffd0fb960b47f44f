"""Transcripts: emit Python source that rebuilds a resolved graph.

``emit_transcript_for`` returns a module with one function. Calling it
constructs every component the root depends on, in the order the context
built them, and returns a fresh root. The transcript can be checked in,
diffed between releases, or used to start an application without discovery.
"""

from __future__ import annotations

from typing import Any

from components import Config, Handlers, Repository, Service

from graphwire import ContextSettings, ExecutionContext, StaticDiscovery


def main() -> None:
    discovery = StaticDiscovery(tagged=[Config, Repository, Service], factories=[Handlers])
    settings = ContextSettings(transcript_function_name="build_service")
    context = ExecutionContext.create(discovery=discovery, settings=settings)

    service = context.resolve(Service)
    source = context.emit_transcript_for(Service)
    body = [line.strip() for line in source.splitlines() if line.startswith("    ")]

    print(body[0])  # => _000_config = components.Config()
    print(body[1])  # => _001_repository = components.Repository(config=_000_config)
    print(body[2])  # => _002_handlers = components.Handlers.wire(config=_000_config)
    print(body[3])  # => _003_service = components.Service(repository=_001_repository, handlers=(_002_handlers[0], _002_handlers[1]))
    print(body[4])  # => return _003_service

    namespace: dict[str, Any] = {}
    exec(compile(source, "<transcript>", "exec"), namespace)  # noqa: S102
    rebuilt = namespace["build_service"]()

    print(rebuilt.describe())  # => sqlite://memory serving /users, /orders
    print(f"same_graph_shape={rebuilt.describe() == service.describe()}")  # => same_graph_shape=True
    print(f"fresh_instances={rebuilt is not service}")  # => fresh_instances=True


if __name__ == "__main__":
    main()
