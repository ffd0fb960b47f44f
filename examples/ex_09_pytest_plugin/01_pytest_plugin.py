"""Pytest plugin: fixtures for live and substitution contexts.

Installing graphwire registers a pytest plugin with three fixtures:

- ``graphwire_context``: the project's live context. Override it in
  ``conftest.py``; the default raises with instructions.
- ``graphwire_for_test``: a factory of ``ExecutionContext.for_test`` contexts.
- ``graphwire_settings``: the ``ContextSettings`` those contexts use.

This script runs ``test_demo.py`` next to it with pytest.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path


def main() -> None:
    completed = subprocess.run(  # noqa: S603
        [sys.executable, "-m", "pytest", "-q", "-p", "no:cacheprovider", "test_demo.py"],
        cwd=Path(__file__).parent,
        capture_output=True,
        text=True,
        check=False,
    )
    summary = completed.stdout.strip().splitlines()[-1]

    print(f"exit_code={completed.returncode}")  # => exit_code=0
    print(summary.split(" in ")[0])  # => 2 passed


if __name__ == "__main__":
    main()
