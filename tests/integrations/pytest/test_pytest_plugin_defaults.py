from __future__ import annotations

import pytest


def test_default_context_fixture_must_be_overridden(pytester: pytest.Pytester) -> None:
    pytester.makepyfile(
        """
        def test_uses_context(graphwire_context):
            pass
        """,
    )

    result = pytester.runpytest()

    result.assert_outcomes(errors=1)
    result.stdout.fnmatch_lines(["*Override the 'graphwire_context' fixture*"])


def test_default_settings_fixture_reads_environment(
    pytester: pytest.Pytester,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("GRAPHWIRE_LOCK_MODE", "none")
    pytester.makepyfile(
        """
        from graphwire import ContextSettings, LockMode

        def test_settings(graphwire_settings):
            assert isinstance(graphwire_settings, ContextSettings)
            assert graphwire_settings.lock_mode is LockMode.NONE
        """,
    )

    result = pytester.runpytest()

    result.assert_outcomes(passed=1)
