"""
Test hygiene proxy checks (typescript).

These look past the source-only file list: missing-test maps each source
file to its expected test path, and the other two walk the project's own
test files, which the collector excludes from normal scanning.
"""

import re
from pathlib import Path
from typing import Sequence

from ..collector import collect_files, relative_to
from ..config import GateConfig
from ..models import Violation
from .base import CheckCategory, line_of, read_source

TEST_FILE_SUFFIXES = (".test.ts", ".spec.ts")
COVERAGE_EXEMPT = frozenset({"index.ts", "types.ts", "types.d.ts"})

TEST_CASE = re.compile(r"""(?:it|test)\s*\(\s*['"`]([^'"`]*)""")
IMPORTS_TEST_FILE = re.compile(r"""from\s+['"]([^'"]*\.test)['"]""")


def _matching_brace(text: str, open_index: int) -> int:
    """Index of the brace closing text[open_index], or -1."""
    depth = 0
    for i in range(open_index, len(text)):
        if text[i] == "{":
            depth += 1
        elif text[i] == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


class _ProjectCheck:
    check_id = ""
    category = CheckCategory.TESTING

    def __init__(self, config: GateConfig | None = None):
        self.config = config or GateConfig()

    def violation(self, rel_path: str, line: int, message: str) -> Violation:
        return Violation(file=rel_path, line=line, check=self.check_id, message=message)


class MissingTestCheck(_ProjectCheck):
    """A .ts source file needs foo.test.ts beside it or test/<rel>.test.ts."""

    check_id = "missing-test"

    def scan(self, files: Sequence[Path], base: Path) -> list[Violation]:
        violations = []
        for path in files:
            if path.name in COVERAGE_EXEMPT or path.suffix != ".ts":
                continue
            rel = relative_to(base, path)
            beside = path.with_name(path.name[:-3] + ".test.ts")
            mirrored = Path(base) / "test" / (rel[:-3] + ".test.ts")
            if not beside.exists() and not mirrored.exists():
                violations.append(self.violation(rel, 1, f"No test file for {rel}"))
        return violations


class EmptyTestCheck(_ProjectCheck):
    check_id = "empty-test"

    def scan(self, files: Sequence[Path], base: Path) -> list[Violation]:
        violations = []
        for path in collect_files(base, TEST_FILE_SUFFIXES):
            content = read_source(path)
            if content is None:
                continue
            for match in TEST_CASE.finditer(content):
                open_index = content.find("{", match.end())
                if open_index == -1:
                    continue
                close_index = _matching_brace(content, open_index)
                if close_index == -1:
                    continue
                if "expect" not in content[open_index:close_index + 1]:
                    violations.append(self.violation(
                        relative_to(base, path), line_of(content, match.start()),
                        f"Test '{match.group(1)}' has no expect()",
                    ))
        return violations


class TestImportingTestCheck(_ProjectCheck):
    check_id = "test-imports-test"
    __test__ = False  # not a pytest class

    def scan(self, files: Sequence[Path], base: Path) -> list[Violation]:
        violations = []
        for path in collect_files(base, TEST_FILE_SUFFIXES):
            content = read_source(path)
            if content is None:
                continue
            for match in IMPORTS_TEST_FILE.finditer(content):
                violations.append(self.violation(
                    relative_to(base, path), 1,
                    f"Test file imports another test: {match.group(0)}",
                ))
        return violations
