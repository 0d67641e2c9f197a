"""
Check capability -- the one interface every scanner implements.

A check takes the list of source files plus the project root and returns
zero or more Violations. Checks never raise on bad input files: an
unreadable file is skipped and logged.

Most checks look at one file at a time and subclass FileCheck, which
handles reading and relative paths. Project-wide checks (import graph,
inheritance chains, test coverage) implement scan() directly.
"""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Iterable, Protocol, Sequence, runtime_checkable

from ..collector import relative_to
from ..config import GateConfig
from ..models import Violation

logger = logging.getLogger(__name__)


class CheckCategory(Enum):
    """Tag for what kind of defect a check looks for."""

    SECURITY = "security"
    HYGIENE = "hygiene"
    NAMING = "naming"
    SIZE = "size"
    TESTING = "testing"
    STRUCTURE = "structure"
    LITERALS = "literals"
    RELIABILITY = "reliability"
    DOCUMENTATION = "documentation"


@runtime_checkable
class PatternCheck(Protocol):
    """Interface any scanner must implement to join a check suite.

    Example:
        class NoTodoCheck:
            check_id = "no-todo"
            category = CheckCategory.HYGIENE

            def scan(self, files, base): ...
    """

    check_id: str
    category: CheckCategory

    def scan(self, files: Sequence[Path], base: Path) -> list[Violation]: ...


# =============================================================================
# HELPERS
# =============================================================================


def read_source(path: Path) -> str | None:
    """Read a source file as text, or None if it cannot be read."""
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug(f"[Checks] Skipping unreadable file {path}: {e}")
        return None


def line_of(content: str, index: int) -> int:
    """1-based line number of a character offset."""
    return content.count("\n", 0, index) + 1


def is_comment_line(line: str, prefixes: tuple[str, ...] = ("//", "/*", "*")) -> bool:
    return line.lstrip().startswith(prefixes)


def split_camel(name: str) -> list[str]:
    """'loadUserConfig' -> ['load', 'user', 'config']."""
    return re.sub(r"([a-z])([A-Z])", r"\1 \2", name).lower().split()


# =============================================================================
# BASE CLASS
# =============================================================================


class FileCheck:
    """Base for checks that inspect each file independently.

    Subclasses set check_id / category and implement scan_file().
    """

    check_id: str = ""
    category: CheckCategory = CheckCategory.HYGIENE

    def __init__(self, config: GateConfig | None = None):
        self.config = config or GateConfig()

    def scan(self, files: Sequence[Path], base: Path) -> list[Violation]:
        violations: list[Violation] = []
        for path in files:
            content = read_source(path)
            if content is None:
                continue
            violations.extend(self.scan_file(path, content, relative_to(base, path)))
        return violations

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        raise NotImplementedError

    def violation(self, rel_path: str, line: int, message: str) -> Violation:
        return Violation(file=rel_path, line=line, check=self.check_id, message=message)


def run_checks(checks: Iterable[PatternCheck], files: Sequence[Path], base: Path) -> list[Violation]:
    """Run every check in order and concatenate the results."""
    violations: list[Violation] = []
    for check in checks:
        found = check.scan(files, base)
        if found:
            logger.debug(f"[Checks] {check.check_id}: {len(found)} violation(s)")
        violations.extend(found)
    return violations
