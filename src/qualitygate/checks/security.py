"""
Security checks -- secrets, shell injection, path traversal, raw error output.

Hardcoded secrets applies to every language. The other three target the
typescript family, where the patterns (exec with template literals,
path.join on request data, console.error(err)) are unambiguous.

All of these are line-level regex heuristics, not data-flow analysis.
"""

import logging
import re
from pathlib import Path
from typing import Iterable

from ..models import Violation
from .base import CheckCategory, FileCheck

logger = logging.getLogger(__name__)

SECRET_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"""['"](?:sk|pk|api|token|key|secret|password|passwd|pwd)[-_]?[a-zA-Z0-9]{20,}['"]"""), "API key/token"),
    (re.compile(r"""(?:password|passwd|pwd|secret|token)\s*[:=]\s*['"][^'"]{8,}['"]"""), "hardcoded credential"),
    (re.compile(r"-----BEGIN (?:RSA |EC )?PRIVATE KEY-----"), "private key"),
    (re.compile(r"ghp_[a-zA-Z0-9]{36}"), "GitHub PAT"),
    (re.compile(r"xox[bprs]-[a-zA-Z0-9-]+"), "Slack token"),
]

SECRET_COMMENT_PREFIXES = ("//", "/*", "*", "#")

SHELL_EXEC_TEMPLATE = re.compile(r"\b(exec|execSync)\s*\(\s*`")

PATH_JOIN_USER_INPUT = re.compile(
    r"path\.(join|resolve)\s*\([^)]*\b(?:req\.|params\.|query\.|input\.|userInput\b|fileName\b|filePath\b)"
)
TRAVERSAL_GUARDS = ("includes('..')", 'includes("..")', "traversal", "sanitize", "normalize")

RAW_ERROR_OUTPUT = re.compile(r"console\.error\(\s*(err|error)\s*\)")


class HardcodedSecretsCheck(FileCheck):
    """One violation per secret-shaped literal on a non-comment line.

    Overlapping matches from different patterns count once (the first
    pattern in SECRET_PATTERNS wins the description).
    """

    check_id = "hardcoded-secret"
    category = CheckCategory.SECURITY

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        for n, line in enumerate(content.split("\n"), 1):
            if line.lstrip().startswith(SECRET_COMMENT_PREFIXES):
                continue
            claimed: list[tuple[int, int]] = []
            for pattern, name in SECRET_PATTERNS:
                for match in pattern.finditer(line):
                    start, end = match.span()
                    if any(start < c_end and c_start < end for c_start, c_end in claimed):
                        continue
                    claimed.append((start, end))
                    yield self.violation(rel_path, n, f"Possible {name} -- use environment variables")


class ShellInjectionCheck(FileCheck):
    check_id = "shell-injection"
    category = CheckCategory.SECURITY

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        for n, line in enumerate(content.split("\n"), 1):
            if SHELL_EXEC_TEMPLATE.search(line):
                yield self.violation(
                    rel_path, n,
                    "exec()/execSync() called with template literal -- use spawn() with argument array",
                )


class PathTraversalCheck(FileCheck):
    """User-controlled input in path.join/resolve with no guard nearby.

    "Nearby" is the lookback window configured by path_traversal_lookback
    (default 5 lines above the call).
    """

    check_id = "path-traversal"
    category = CheckCategory.SECURITY

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        lines = content.split("\n")
        window = self.config.path_traversal_lookback
        for i, line in enumerate(lines):
            if not PATH_JOIN_USER_INPUT.search(line):
                continue
            context = "\n".join(lines[max(0, i - window):i])
            if any(guard in context for guard in TRAVERSAL_GUARDS):
                continue
            yield self.violation(
                rel_path, i + 1,
                "User-controlled input in path.join/resolve without traversal validation",
            )


class RawErrorOutputCheck(FileCheck):
    check_id = "raw-error-output"
    category = CheckCategory.HYGIENE

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        for n, line in enumerate(content.split("\n"), 1):
            if RAW_ERROR_OUTPUT.search(line):
                yield self.violation(
                    rel_path, n,
                    "Raw error object passed to console.error -- use error.message instead",
                )
