from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Protocol

import pytest

from graphwire._internal.engine import SubstituteFactory
from graphwire.context import ExecutionContext
from graphwire.discovery import DiscoverySource
from graphwire.settings import ContextSettings


class ContextForTestFactory(Protocol):
    def __call__(
        self,
        root: Any,
        substitute: SubstituteFactory | None = None,
        *,
        packages: Sequence[str] | None = None,
        discovery: DiscoverySource | None = None,
    ) -> ExecutionContext: ...


@pytest.fixture()
def graphwire_settings() -> ContextSettings:
    """Return the settings used by ``graphwire_for_test`` contexts.

    Override this fixture to scan packages or change the lock mode for a test
    module.
    """
    return ContextSettings()


@pytest.fixture()
def graphwire_context() -> ExecutionContext:
    """Provide the live context for the tests of a project.

    There is no sensible default for which packages to scan, so this fixture
    must be overridden in the project's ``conftest.py``.

    Raises:
        RuntimeError: Always, until overridden.

    """
    msg = (
        "Override the 'graphwire_context' fixture to return an ExecutionContext, "
        "for example ExecutionContext.create(['your_app'])."
    )
    raise RuntimeError(msg)


@pytest.fixture()
def graphwire_for_test(graphwire_settings: ContextSettings) -> ContextForTestFactory:
    """Return a factory of substitution contexts.

    The returned callable mirrors ``ExecutionContext.for_test``: the root
    capability is built for real and every other capability is replaced with
    ``substitute(capability)``, ``create_autospec`` doubles by default.

    Examples:
        .. code-block:: python

            def test_host_runs_plugins(graphwire_for_test) -> None:
                context = graphwire_for_test(IHost, packages=["app"])
                host = context.resolve(IHost)
                host.run()
                host.plugins[0].run.assert_called_once_with()

    """

    def factory(
        root: Any,
        substitute: Callable[[Any], Any | None] | None = None,
        *,
        packages: Sequence[str] | None = None,
        discovery: DiscoverySource | None = None,
    ) -> ExecutionContext:
        return ExecutionContext.for_test(
            root,
            substitute,
            packages=packages,
            discovery=discovery,
            settings=graphwire_settings,
        )

    return factory
