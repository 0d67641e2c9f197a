"""Shared fixtures: throw-away projects built in tmp_path."""

import textwrap
from pathlib import Path

import pytest

GREETER_TS = """\
export function greetVisitor(visitorName: string): string {
  const greeting = `hello ${visitorName}`;
  return greeting;
}
"""

FORMATTER_TS = """\
export interface FormatOptions {
  upper: boolean;
}

export function formatLabel(label: string, options: FormatOptions): string {
  if (options.upper) {
    return label.toUpperCase();
  }
  return label;
}
"""


@pytest.fixture
def write(tmp_path):
    """write("src/a.ts", "...") -> absolute Path; parents are created."""

    def _write(rel_path: str, content: str = "") -> Path:
        path = tmp_path / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def ts_project(tmp_path, write):
    """Small typescript project with two canary-eligible files and an index."""
    write("src/greeter.ts", GREETER_TS)
    write("src/formatter.ts", FORMATTER_TS)
    write("src/index.ts", "export * from './greeter';\nexport * from './formatter';\n")
    return tmp_path


@pytest.fixture
def py_project(tmp_path, write):
    """Python-only project with nothing for the gate to complain about."""
    write("app/__init__.py", "")
    write("app/service.py", "def load_settings(path):\n    return path\n")
    write("tests/test_service.py", "def test_load():\n    assert True\n")
    return tmp_path


@pytest.fixture
def evidence_dir(tmp_path):
    path = tmp_path / ".claude" / "evidence"
    path.mkdir(parents=True)
    return path
