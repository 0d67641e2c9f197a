"""
Hygiene proxy checks (typescript) -- lessons learned from earlier review
phases that regex can still catch reliably:

  - types-before-functions: declaration order
  - magic-number / magic-string: unexplained literals
  - toctou: existsSync() then read of the same path
  - verification-read: readFileSync() right after writeFileSync()
  - dangerous-eval: eval(), innerHTML, document.write()
  - falsy-numeric-guard: if (x) on an optional number (0 is falsy)
  - comment-spam: JSDoc that only restates the function name
"""

import re
from pathlib import Path
from typing import Iterable

from ..models import Violation
from .base import CheckCategory, FileCheck, is_comment_line, split_camel

FIRST_FUNCTION = re.compile(r"^(?:export\s+)?(?:async\s+)?function\s")
FIRST_TYPE = re.compile(r"^(?:export\s+)?(?:type|interface)\s")

ALLOWED_NUMBERS = frozenset({"-1", "0", "1", "2"})
NUMBER_SKIP_LINE = re.compile(r"^\s*(const|import|//|\*|export\s+const)")
NUMBER_LITERAL = re.compile(r"(?<![a-zA-Z_$.])\b(\d+(?:\.\d+)?)\b")
COMPARED_STRING = re.compile(r"""(?:===|!==|==|!=)\s*['"]([^'"]+)['"]""")

EXISTS_CALL = re.compile(r"\b(?:existsSync|accessSync)\s*\(\s*([^)]+)\)")
READ_CALL = re.compile(r"\b(?:readFileSync|readFile|createReadStream)\b")
WRITE_SYNC_CALL = re.compile(r"\bwriteFileSync\s*\(\s*([^,]+)")
READ_SYNC_CALL = re.compile(r"\breadFileSync\b")

DANGEROUS_SINKS = [
    (re.compile(r"\beval\s*\("), "eval()"),
    (re.compile(r"\.innerHTML\s*="), "innerHTML assignment"),
    (re.compile(r"\bdocument\.write\s*\("), "document.write()"),
]

OPTIONAL_NUMBER_DECLS = [
    re.compile(r"(\w+)\s*\?:\s*number"),
    re.compile(r"(\w+)\s*:\s*number\s*\|\s*undefined"),
]

JSDOC_OPEN = re.compile(r"^\s*/\*\*")
FUNCTION_DECL = re.compile(r"(?:export\s+)?(?:async\s+)?function\s+(\w+)")

TOCTOU_WINDOW = 5
VERIFICATION_WINDOW = 3
SPAM_MAX_DOC_LINES = 3
SPAM_MAX_DOC_CHARS = 80


class TypesBeforeFunctionsCheck(FileCheck):
    check_id = "types-before-functions"
    category = CheckCategory.STRUCTURE

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        first_fn = first_type = -1
        for i, line in enumerate(content.split("\n")):
            if first_fn == -1 and FIRST_FUNCTION.match(line):
                first_fn = i
            if first_type == -1 and FIRST_TYPE.match(line):
                first_type = i
        if 0 <= first_fn < first_type:
            yield self.violation(rel_path, first_fn + 1, "First function appears before first type declaration")


class MagicNumberCheck(FileCheck):
    check_id = "magic-number"
    category = CheckCategory.LITERALS

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        for n, line in enumerate(content.split("\n"), 1):
            if NUMBER_SKIP_LINE.match(line):
                continue
            for number in NUMBER_LITERAL.findall(line):
                if number not in ALLOWED_NUMBERS:
                    yield self.violation(rel_path, n, f"Magic number {number}")


class MagicStringCheck(FileCheck):
    check_id = "magic-string"
    category = CheckCategory.LITERALS

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        for n, line in enumerate(content.split("\n"), 1):
            match = COMPARED_STRING.search(line)
            if match:
                yield self.violation(rel_path, n, f'Magic string "{match.group(1)}" in conditional')


class ToctouCheck(FileCheck):
    check_id = "toctou"
    category = CheckCategory.RELIABILITY

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        lines = content.split("\n")
        for i, line in enumerate(lines):
            match = EXISTS_CALL.search(line)
            if not match:
                continue
            path_arg = match.group(1).strip()
            for j in range(i + 1, min(i + 1 + TOCTOU_WINDOW, len(lines))):
                if READ_CALL.search(lines[j]) and path_arg in lines[j]:
                    yield self.violation(
                        rel_path, i + 1,
                        f"existsSync() then read on line {j + 1} -- use try/catch around the read instead",
                    )
                    break


class VerificationReadCheck(FileCheck):
    check_id = "verification-read"
    category = CheckCategory.RELIABILITY

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        lines = content.split("\n")
        for i, line in enumerate(lines):
            match = WRITE_SYNC_CALL.search(line)
            if not match:
                continue
            path_arg = match.group(1).strip()
            for j in range(i + 1, min(i + 1 + VERIFICATION_WINDOW, len(lines))):
                if READ_SYNC_CALL.search(lines[j]) and path_arg in lines[j]:
                    yield self.violation(
                        rel_path, j + 1,
                        "readFileSync() right after writeFileSync() on same path -- write succeeded if no throw",
                    )
                    break


class DangerousEvalCheck(FileCheck):
    check_id = "dangerous-eval"
    category = CheckCategory.SECURITY

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        for n, line in enumerate(content.split("\n"), 1):
            if is_comment_line(line, ("//", "*")):
                continue
            for pattern, name in DANGEROUS_SINKS:
                if pattern.search(line):
                    yield self.violation(rel_path, n, f"{name} -- use safe alternatives")


class FalsyNumericGuardCheck(FileCheck):
    check_id = "falsy-numeric-guard"
    category = CheckCategory.RELIABILITY

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        lines = content.split("\n")
        numeric_vars: list[str] = []
        for line in lines:
            for decl in OPTIONAL_NUMBER_DECLS:
                match = decl.search(line)
                if match and match.group(1) not in numeric_vars:
                    numeric_vars.append(match.group(1))
        if not numeric_vars:
            return

        guards = {v: re.compile(rf"\bif\s*\(\s*{re.escape(v)}\s*\)") for v in numeric_vars}
        for n, line in enumerate(lines, 1):
            for name, guard in guards.items():
                if guard.search(line):
                    yield self.violation(
                        rel_path, n,
                        f"Truthy check on optional number '{name}' -- 0 is falsy, use '!== undefined'",
                    )


class CommentSpamCheck(FileCheck):
    """Short JSDoc whose words are (almost) just the function name split up.

    '/** Load user config. */ function loadUserConfig' is spam;
    a doc that says anything the name doesn't is left alone.
    """

    check_id = "comment-spam"
    category = CheckCategory.DOCUMENTATION

    def scan_file(self, path: Path, content: str, rel_path: str) -> Iterable[Violation]:
        lines = content.split("\n")
        for i, line in enumerate(lines):
            if not JSDOC_OPEN.match(line):
                continue

            doc_parts = []
            j = i
            while j < len(lines):
                text = re.sub(r"^\s*/?\*+\s*", "", lines[j])
                doc_parts.append(re.sub(r"\*/\s*$", "", text))
                if "*/" in lines[j]:
                    j += 1
                    break
                j += 1
            if len(doc_parts) > SPAM_MAX_DOC_LINES or j >= len(lines):
                continue

            fn = FUNCTION_DECL.search(lines[j])
            if not fn:
                continue
            name_words = [w for w in split_camel(fn.group(1)) if len(w) > 2]
            if len(name_words) < 2:
                continue

            doc = re.sub(r"[^a-z\s]", "", re.sub(r"@\w+", "", " ".join(doc_parts).lower())).strip()
            if len(doc) > SPAM_MAX_DOC_CHARS:
                continue
            doc_words = {w for w in doc.split() if len(w) > 2}
            overlap = [w for w in name_words if w in doc_words]
            if len(overlap) >= len(name_words) - 1:
                yield self.violation(
                    rel_path, i + 1,
                    f"JSDoc restates function name '{fn.group(1)}' -- remove or add non-obvious info",
                )
