"""Settings: configure contexts from ``GRAPHWIRE_*`` environment variables.

``ContextSettings`` is a pydantic-settings model. List values are JSON in the
environment. Explicit arguments to ``ExecutionContext.create`` win over
settings.
"""

from __future__ import annotations

import os

from greetings import Greeting

from graphwire import ContextSettings, ExecutionContext, LockMode


def main() -> None:
    os.environ["GRAPHWIRE_PACKAGES"] = '["greetings"]'
    os.environ["GRAPHWIRE_EXCLUDE_PREFIXES"] = '["greetings.experimental"]'
    os.environ["GRAPHWIRE_LOCK_MODE"] = "none"

    settings = ContextSettings()
    print(settings.packages)  # => ['greetings']
    print(settings.lock_mode is LockMode.NONE)  # => True

    context = ExecutionContext.create(settings=settings)
    print([greeting.text() for greeting in context.resolve_all(Greeting)])  # => ['Hello']

    everything = ExecutionContext.create(
        settings=ContextSettings(packages=["greetings"], exclude_prefixes=[]),
    )
    print([greeting.text() for greeting in everything.resolve_all(Greeting)])  # => ['Hello', 'Ahoy']


if __name__ == "__main__":
    main()
