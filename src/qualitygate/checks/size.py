"""
Size proxy checks (typescript) -- oversized files, functions, parameter
lists, export surfaces, import fan-in, classes, and inheritance chains.

Function and class extents are found by brace counting, not parsing.
That is accurate enough for formatted code and cheap to run everywhere.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, Sequence

from ..config import GateConfig
from ..models import Violation
from .base import CheckCategory, FileCheck, line_of, read_source

logger = logging.getLogger(__name__)

EXPORT_LINE = re.compile(r"^export\s", re.MULTILINE)
FUNCTION_WITH_PARAMS = re.compile(r"(?:export\s+)?(?:async\s+)?function\s+(\w+)\s*\(([^)]*)\)")
RELATIVE_IMPORT_LINE = re.compile(r"""^import\s.*from\s+['"]\.\.?/""", re.MULTILINE)

FN_DECL = re.compile(r"(?:export\s+)?(?:async\s+)?function\s+(\w+)")
ARROW_FN = re.compile(r"(?:export\s+)?const\s+(\w+)\s*=\s*(?:async\s+)?\(.*\).*=>\s*\{")
METHOD = re.compile(r"^\s+(?:(?:public|private|protected|static|override|get|set)\s+)*(?:async\s+)?(\w+)\s*\(")
CONTROL_KEYWORDS = frozenset({
    "if", "for", "while", "switch", "catch", "return", "throw", "new", "do", "try", "typeof",
    "delete", "void", "super", "yield", "await", "case", "else", "with",
})

CLASS_DECL = re.compile(r"class\s+(\w+)")
CLASS_METHOD = re.compile(
    r"^\s+(?:async\s+)?(?:public\s+|private\s+|protected\s+)?(?:static\s+)?(?:get\s+|set\s+)?\w+\s*\("
)
CLASS_EXTENDS = re.compile(r"class\s+(\w+)\s+extends\s+(\w+)")


def count_params(params: str) -> int:
    """Top-level comma count + 1; commas inside {} or [] don't split."""
    params = params.strip()
    if not params:
        return 0
    depth = 0
    count = 1
    for ch in params:
        if ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
        elif ch == "," and depth == 0:
            count += 1
    return count


def brace_delta(line: str) -> int:
    return line.count("{") - line.count("}")


class ExportCountCheck(FileCheck):
    check_id = "export-count"
    category = CheckCategory.SIZE

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        if path.name == "index.ts":
            return
        count = len(EXPORT_LINE.findall(content))
        if count > self.config.max_exports:
            yield self.violation(rel_path, 1, f"{count} exports (max {self.config.max_exports})")


class ParameterCountCheck(FileCheck):
    check_id = "parameter-count"
    category = CheckCategory.SIZE

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        limit = self.config.max_params
        for match in FUNCTION_WITH_PARAMS.finditer(content):
            count = count_params(match.group(2))
            if count > limit:
                yield self.violation(
                    rel_path, line_of(content, match.start()),
                    f"Function '{match.group(1)}' has {count} params (max {limit})",
                )


class ImportFanInCheck(FileCheck):
    check_id = "import-fan-in"
    category = CheckCategory.SIZE

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        count = len(RELATIVE_IMPORT_LINE.findall(content))
        if count > self.config.max_import_fan_in:
            yield self.violation(rel_path, 1, f"{count} project imports (max {self.config.max_import_fan_in})")


class FileLengthCheck(FileCheck):
    check_id = "file-length"
    category = CheckCategory.SIZE

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        line_count = len(content.split("\n"))
        if line_count > self.config.max_file_lines:
            yield self.violation(rel_path, 1, f"{line_count} lines (max {self.config.max_file_lines})")


class FunctionLengthCheck(FileCheck):
    """Counts significant (non-blank, non-comment) lines inside a function body.

    Recognizes function declarations, arrow functions assigned to const,
    and class methods. Nested functions are counted as part of the outer one.
    """

    check_id = "function-length"
    category = CheckCategory.SIZE

    def _function_name(self, line: str) -> str | None:
        for pattern in (FN_DECL, ARROW_FN):
            match = pattern.search(line)
            if match:
                return match.group(1)
        match = METHOD.search(line)
        if match and "{" in line and match.group(1) not in CONTROL_KEYWORDS:
            return match.group(1)
        return None

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        limit = self.config.max_function_lines
        fn_start = -1
        fn_name = ""
        start_depth = depth = significant = 0

        for i, line in enumerate(content.split("\n")):
            if fn_start == -1:
                name = self._function_name(line)
                if name:
                    fn_start, fn_name, start_depth, significant = i, name, depth, 0

            depth += brace_delta(line)

            if fn_start >= 0 and depth > start_depth:
                stripped = line.strip()
                if stripped and not stripped.startswith(("//", "*")):
                    significant += 1

            if fn_start >= 0 and depth == start_depth and i > fn_start:
                if significant > limit:
                    yield self.violation(
                        rel_path, fn_start + 1,
                        f"Function '{fn_name}' is {significant} significant lines (max {limit})",
                    )
                fn_start = -1


class ClassMethodCountCheck(FileCheck):
    check_id = "class-method-count"
    category = CheckCategory.SIZE

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        limit = self.config.max_class_methods
        for match in CLASS_DECL.finditer(content):
            depth = 0
            started = False
            methods = 0
            for line in content[match.start():].split("\n"):
                for ch in line:
                    if ch == "{":
                        depth += 1
                        started = True
                    elif ch == "}":
                        depth -= 1
                if started and depth == 1 and CLASS_METHOD.search(line):
                    methods += 1
                if started and depth == 0:
                    break
            if methods > limit:
                yield self.violation(
                    rel_path, line_of(content, match.start()),
                    f"Class '{match.group(1)}' has {methods} methods (max {limit})",
                )


class InheritanceDepthCheck:
    """Project-wide: follows 'extends' chains across all files.

    Reported against the pseudo-file 'project' since a chain spans files.
    """

    check_id = "inheritance-depth"
    category = CheckCategory.STRUCTURE

    def __init__(self, config: GateConfig | None = None):
        self.config = config or GateConfig()

    def scan(self, files: Sequence[Path], base: Path) -> list[Violation]:
        parents: dict[str, str] = {}
        for path in files:
            content = read_source(path)
            if content is None:
                continue
            for match in CLASS_EXTENDS.finditer(content):
                parents[match.group(1)] = match.group(2)

        limit = self.config.max_inheritance_depth
        violations = []
        for cls in parents:
            depth = 0
            current = cls
            seen: set[str] = set()
            while current in parents and current not in seen:
                seen.add(current)
                current = parents[current]
                depth += 1
            if depth > limit:
                violations.append(Violation(
                    file="project",
                    line=1,
                    check=self.check_id,
                    message=f"Class '{cls}' has inheritance depth {depth} (max {limit})",
                ))
        return violations
