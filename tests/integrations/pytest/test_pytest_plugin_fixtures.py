from __future__ import annotations

import pytest
from sample_app.contracts import IGreeter, IHost
from sample_app.host import ConsoleGreeter, Host

from graphwire import ContextSettings, ExecutionContext
from graphwire.integrations.pytest_plugin.plugin import ContextForTestFactory


@pytest.fixture()
def graphwire_settings() -> ContextSettings:
    return ContextSettings(exclude_prefixes=["sample_app.excluded"])


@pytest.fixture()
def graphwire_context(graphwire_settings: ContextSettings) -> ExecutionContext:
    return ExecutionContext.create(["sample_app"], settings=graphwire_settings)


def test_overridden_context_fixture_is_used(graphwire_context: ExecutionContext) -> None:
    host = graphwire_context.resolve(IHost)

    assert host.run() == ["Hello, alpha!", "Hello, beta!"]


def test_for_test_factory_substitutes_dependencies(
    graphwire_for_test: ContextForTestFactory,
) -> None:
    context = graphwire_for_test(IHost, packages=["sample_app"])

    host = context.resolve(IHost)
    host.greeter.greet.return_value = "hi"

    assert isinstance(host, Host)
    assert not isinstance(host.greeter, ConsoleGreeter)
    assert host.run() == ["hi", "hi"]
    assert host.greeter.greet.call_count == 2


def test_for_test_factory_accepts_custom_substitute(
    graphwire_for_test: ContextForTestFactory,
) -> None:
    context = graphwire_for_test(IHost, lambda capability: None, packages=["sample_app"])

    host = context.resolve(IHost)

    assert isinstance(host.greeter, ConsoleGreeter)
    assert context.resolve(IGreeter) is host.greeter
    assert context.settings.exclude_prefixes == ["sample_app.excluded"]
