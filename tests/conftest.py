"""Shared pytest fixtures for graphwire tests."""

import os

import pytest

from graphwire import ContextSettings, ExecutionContext, GraphWireDiscoveryError

pytest_plugins = ["pytester"]

SAMPLE_PACKAGE = "sample_app"
EXCLUDED_PREFIX = "sample_app.excluded"


@pytest.fixture(autouse=True)
def _clean_graphwire_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep GRAPHWIRE_* variables of the outer shell out of every test."""
    for name in list(os.environ):
        if name.startswith("GRAPHWIRE_"):
            monkeypatch.delenv(name)


@pytest.fixture()
def discovery_errors() -> list[GraphWireDiscoveryError]:
    """Discovery errors collected by ``sample_context``."""
    return []


@pytest.fixture()
def sample_settings() -> ContextSettings:
    """Settings that scan the sample package without its excluded subpackage."""
    return ContextSettings(exclude_prefixes=[EXCLUDED_PREFIX])


@pytest.fixture()
def sample_context(
    sample_settings: ContextSettings,
    discovery_errors: list[GraphWireDiscoveryError],
) -> ExecutionContext:
    """Live context over the sample package collecting discovery errors."""
    context = ExecutionContext.create([SAMPLE_PACKAGE], settings=sample_settings)
    return context.on_discovery_error(discovery_errors.append)
