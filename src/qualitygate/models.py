"""Shared value types for the gate, the linters, and every check."""

from dataclasses import dataclass, field
from enum import Enum


# =============================================================================
# ENUMS
# =============================================================================


class Language(Enum):
    """Supported source families. Declaration order is detection order."""

    TYPESCRIPT = "typescript"
    JAVA = "java"
    CSHARP = "csharp"
    PYTHON = "python"
    GO = "go"
    RUST = "rust"
    PHP = "php"
    RUBY = "ruby"

    @property
    def extensions(self) -> tuple[str, ...]:
        return SOURCE_EXTENSIONS[self]


SOURCE_EXTENSIONS: dict[Language, tuple[str, ...]] = {
    Language.TYPESCRIPT: (".ts", ".tsx", ".js", ".jsx"),
    Language.JAVA: (".java",),
    Language.CSHARP: (".cs",),
    Language.PYTHON: (".py",),
    Language.GO: (".go",),
    Language.RUST: (".rs",),
    Language.PHP: (".php",),
    Language.RUBY: (".rb",),
}


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass(frozen=True, order=True)
class Violation:
    """A single finding produced by a check.

    Attributes:
        file: Path relative to the scanned project root.
        line: 1-based line number; 0 means the finding is file-level.
        check: Check id, e.g. "hardcoded-secret".
        message: Human-readable explanation.
    """

    file: str
    line: int
    check: str
    message: str

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}" if self.line > 0 else self.file


@dataclass
class LintResult:
    """Outcome of one external checker invocation."""

    passed: bool
    output: str
    skipped: bool = False  # soft pass: tool or config absent


@dataclass
class GateResult:
    """Aggregated verdict of one default gate run."""

    passed: bool
    languages: list[Language] = field(default_factory=list)
    lint_failures: list[Language] = field(default_factory=list)
    lint_results: dict[Language, LintResult] = field(default_factory=dict)
    violations: list[Violation] = field(default_factory=list)

    @property
    def issue_count(self) -> int:
        return len(self.lint_failures) + len(self.violations)
