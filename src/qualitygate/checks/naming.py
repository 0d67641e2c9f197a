"""
Naming proxy checks (typescript) -- vague parameter names, single letters,
tiny exported function names, junk-drawer file names, abbreviations.
"""

import re
from pathlib import Path
from typing import Iterable, Sequence

from ..collector import relative_to
from ..config import GateConfig
from ..models import Violation
from .base import CheckCategory, FileCheck, line_of

BANNED_PARAM_NAMES = frozenset({"data", "info", "result", "item", "obj", "val", "tmp", "temp", "ret", "res"})
ALLOWED_SINGLE_LETTER = frozenset({"_", "i", "j", "k", "e"})
BANNED_FILE_NAMES = frozenset({"utils.ts", "helpers.ts", "misc.ts", "common.ts", "shared.ts"})
BANNED_ABBREVIATIONS = ("mgr", "impl", "proc", "svc", "repo")

EXPORTED_FUNCTION_PARAMS = re.compile(r"export\s+(?:async\s+)?function\s+\w+\s*\(([^)]*)\)")
ANY_FUNCTION_PARAMS = re.compile(r"(?:export\s+)?(?:async\s+)?function\s+\w+\s*\(([^)]*)\)")
EXPORTED_FUNCTION_NAME = re.compile(r"export\s+(?:async\s+)?function\s+(\w+)")
EXPORTED_DECLARATION = re.compile(r"export\s+(?:const|function|class|type|interface)\s+(\w+)")


def param_names(params: str) -> list[str]:
    """'a: number, {b, c}: Opts = {}' -> ['a', 'b', 'c']; destructuring is best-effort."""
    names = []
    for raw in params.split(","):
        name = re.split(r"[\s:?=]", raw.strip())[0]
        names.append(re.sub(r"[{}\[\]]", "", name))
    return [n for n in names if n]


class BannedParamNameCheck(FileCheck):
    check_id = "banned-param-name"
    category = CheckCategory.NAMING

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        for match in EXPORTED_FUNCTION_PARAMS.finditer(content):
            line = line_of(content, match.start())
            for name in param_names(match.group(1)):
                if name in BANNED_PARAM_NAMES:
                    yield self.violation(rel_path, line, f"Exported function parameter named '{name}'")


class SingleLetterParamCheck(FileCheck):
    check_id = "single-letter-param"
    category = CheckCategory.NAMING

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        for match in ANY_FUNCTION_PARAMS.finditer(content):
            line = line_of(content, match.start())
            for name in param_names(match.group(1)):
                if len(name) == 1 and name not in ALLOWED_SINGLE_LETTER:
                    yield self.violation(rel_path, line, f"Single-letter parameter '{name}'")


class ShortFunctionNameCheck(FileCheck):
    check_id = "short-function-name"
    category = CheckCategory.NAMING

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        minimum = self.config.min_function_name_length
        for match in EXPORTED_FUNCTION_NAME.finditer(content):
            name = match.group(1)
            if len(name) < minimum:
                yield self.violation(
                    rel_path, line_of(content, match.start()),
                    f"Exported function '{name}' under {minimum} chars",
                )


class BannedFileNameCheck:
    check_id = "banned-file-name"
    category = CheckCategory.NAMING

    def __init__(self, config: GateConfig | None = None):
        self.config = config or GateConfig()

    def scan(self, files: Sequence[Path], base: Path) -> list[Violation]:
        return [
            Violation(
                file=relative_to(base, f),
                line=1,
                check=self.check_id,
                message=f"File named '{f.name}' -- use a descriptive name",
            )
            for f in files
            if f.name in BANNED_FILE_NAMES
        ]


class AbbreviatedNameCheck(FileCheck):
    check_id = "abbreviated-name"
    category = CheckCategory.NAMING

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        for match in EXPORTED_DECLARATION.finditer(content):
            name = match.group(1)
            words = re.split(r"[_\d]+", re.sub(r"([a-z])([A-Z])", r"\1_\2", name).lower())
            for abbr in BANNED_ABBREVIATIONS:
                if abbr in words:
                    yield self.violation(
                        rel_path, line_of(content, match.start()),
                        f"Export '{name}' contains abbreviation '{abbr}'",
                    )
