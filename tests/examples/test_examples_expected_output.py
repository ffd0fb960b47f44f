"""Run every ``examples/ex_*/01_*.py`` script and compare stdout to its ``# =>`` comments."""

from __future__ import annotations

import ast
import difflib
import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

EXPECTATION_MARKER = "# =>"


def _find_repo_root(start: Path) -> Path:
    for candidate in (start, *start.parents):
        if (candidate / "pyproject.toml").is_file() and (candidate / "src" / "graphwire").is_dir():
            return candidate
    msg = f"Could not locate repository root from {start}"
    raise AssertionError(msg)


REPO_ROOT = _find_repo_root(Path(__file__).resolve())
EXAMPLES_ROOT = REPO_ROOT / "examples"
SRC_ROOT = REPO_ROOT / "src"


@dataclass(frozen=True, slots=True)
class ExampleScript:
    path: Path
    module: ast.Module
    expected_stdout: list[str]


def _topic_scripts() -> list[Path]:
    scripts: list[Path] = []
    for topic_dir in sorted(path for path in EXAMPLES_ROOT.glob("ex_*") if path.is_dir()):
        candidates = sorted(topic_dir.glob("01_*.py"))
        if len(candidates) != 1:
            msg = f"{topic_dir}: expected exactly one '01_*.py' script, found {len(candidates)}."
            raise AssertionError(msg)
        scripts.append(candidates[0])
    return scripts


def _expected_stdout(path: Path, module: ast.Module, source_lines: list[str]) -> list[str]:
    print_calls = sorted(
        (
            node
            for node in ast.walk(module)
            if isinstance(node, ast.Call) and isinstance(node.func, ast.Name) and node.func.id == "print"
        ),
        key=lambda node: (node.lineno, node.col_offset),
    )

    expected: list[str] = []
    for call in print_calls:
        if call.end_lineno is None:
            msg = f"{path}: print() node is missing end line information."
            raise AssertionError(msg)
        closing_line = source_lines[call.end_lineno - 1]
        if EXPECTATION_MARKER not in closing_line:
            msg = f"{path}:{call.end_lineno}: print() must end with '{EXPECTATION_MARKER} <stdout>'."
            raise AssertionError(msg)
        expected.append(closing_line.split(EXPECTATION_MARKER, maxsplit=1)[1].strip())
    return expected


def _load(path: Path) -> ExampleScript:
    source = path.read_text(encoding="utf-8")
    module = ast.parse(source, filename=str(path))
    return ExampleScript(
        path=path,
        module=module,
        expected_stdout=_expected_stdout(path, module, source.splitlines()),
    )


EXAMPLES = [
    pytest.param(_load(path), id=str(path.relative_to(REPO_ROOT))) for path in _topic_scripts()
]


@pytest.mark.parametrize("example", EXAMPLES)
def test_example_has_module_docstring(example: ExampleScript) -> None:
    assert ast.get_docstring(example.module)


@pytest.mark.parametrize("example", EXAMPLES)
def test_example_stdout_matches_inline_expectations(example: ExampleScript) -> None:
    env = {name: value for name, value in os.environ.items() if not name.startswith("GRAPHWIRE_")}
    existing_pythonpath = env.get("PYTHONPATH")
    env["PYTHONPATH"] = (
        str(SRC_ROOT) if not existing_pythonpath else os.pathsep.join((str(SRC_ROOT), existing_pythonpath))
    )

    completed = subprocess.run(  # noqa: S603
        [sys.executable, str(example.path)],
        cwd=example.path.parent,
        env=env,
        capture_output=True,
        text=True,
        check=False,
    )
    actual = completed.stdout.splitlines()

    if completed.returncode == 0 and completed.stderr == "" and actual == example.expected_stdout:
        return

    diff = "\n".join(
        difflib.unified_diff(example.expected_stdout, actual, fromfile="expected", tofile="actual", lineterm=""),
    )
    msg = (
        f"Example {example.path} did not produce its expected output\n"
        f"returncode={completed.returncode}\n"
        f"stderr:\n{completed.stderr or '<empty>'}\n\n"
        f"diff:\n{diff or '<no diff>'}"
    )
    raise AssertionError(msg)
