"""
Construction Validator -- verify a plan's required artifacts exist.

A plan document lists its deliverables in a dedicated section:

    ## CONSTRUCTION_CHECKS
    - FILE: src/cache.ts
    - EXPORT_FUNCTION: createCache IN src/cache.ts
    - EXPORT_TYPE: CacheOptions IN src/types.ts

The section runs until the next `## ` heading. Every bullet inside it
must be one of the three directives; anything else is a plan error.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .errors import PlanParseError, QualityGateError

logger = logging.getLogger(__name__)

SECTION_HEADER = re.compile(r"^##\s*CONSTRUCTION_CHECKS", re.IGNORECASE)
NEXT_SECTION = re.compile(r"^##\s")
BULLET = re.compile(r"^\s*-\s*\S")

FILE_DIRECTIVE = re.compile(r"^\s*-\s*FILE:\s*(.+)", re.IGNORECASE)
FUNCTION_DIRECTIVE = re.compile(r"^\s*-\s*EXPORT_FUNCTION:\s*(\w+)\s+IN\s+(.+)", re.IGNORECASE)
TYPE_DIRECTIVE = re.compile(r"^\s*-\s*EXPORT_TYPE:\s*(\w+)\s+IN\s+(.+)", re.IGNORECASE)


class DirectiveType(Enum):
    FILE = "file"
    EXPORT_FUNCTION = "export_function"
    EXPORT_TYPE = "export_type"


@dataclass(frozen=True)
class ConstructionCheck:
    type: DirectiveType
    name: str
    file: str | None = None

    def describe(self) -> str:
        if self.type is DirectiveType.FILE:
            return f"FILE {self.name}"
        return f"{self.type.name} {self.name} in {self.file}"


@dataclass
class ConstructionResult:
    check: ConstructionCheck
    found: bool


@dataclass
class ConstructionReport:
    results: list[ConstructionResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(r.found for r in self.results)

    @property
    def missing(self) -> list[ConstructionResult]:
        return [r for r in self.results if not r.found]


# =============================================================================
# PARSING
# =============================================================================


def _parse_directive(line: str) -> ConstructionCheck | None:
    match = FUNCTION_DIRECTIVE.match(line)
    if match:
        return ConstructionCheck(DirectiveType.EXPORT_FUNCTION, match.group(1), match.group(2).strip())
    match = TYPE_DIRECTIVE.match(line)
    if match:
        return ConstructionCheck(DirectiveType.EXPORT_TYPE, match.group(1), match.group(2).strip())
    match = FILE_DIRECTIVE.match(line)
    if match:
        return ConstructionCheck(DirectiveType.FILE, match.group(1).strip())
    return None


def parse_construction_checks(plan: str) -> list[ConstructionCheck]:
    """Directives from the CONSTRUCTION_CHECKS section, in plan order."""
    checks = []
    in_section = False
    for number, line in enumerate(plan.split("\n"), start=1):
        if SECTION_HEADER.match(line):
            in_section = True
            continue
        if not in_section:
            continue
        if NEXT_SECTION.match(line):
            break
        if not BULLET.match(line):
            continue

        check = _parse_directive(line)
        if check is None:
            raise PlanParseError(number, line)
        checks.append(check)
    return checks


# =============================================================================
# EXPORT DETECTION
# =============================================================================


def _export_patterns(check: ConstructionCheck, python: bool) -> list[re.Pattern]:
    name = re.escape(check.name)
    if python:
        if check.type is DirectiveType.EXPORT_FUNCTION:
            return [re.compile(rf"^(?:async\s+)?def\s+{name}\b", re.MULTILINE)]
        return [re.compile(rf"^class\s+{name}\b", re.MULTILINE)]

    if check.type is DirectiveType.EXPORT_FUNCTION:
        return [
            re.compile(rf"export\s+(?:async\s+)?function\s+{name}\b"),
            re.compile(rf"export\s+const\s+{name}\s*="),
        ]
    return [re.compile(rf"export\s+(?:type|interface)\s+{name}\b")]


def check_directive(check: ConstructionCheck, project_dir: Path) -> bool:
    if check.type is DirectiveType.FILE:
        return (project_dir / check.name).exists()

    path = project_dir / (check.file or "")
    if not path.is_file():
        return False
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning(f"[Construction] Cannot read {path}: {e}")
        return False
    return any(p.search(content) for p in _export_patterns(check, path.suffix == ".py"))


def validate_construction(plan_path: str | Path, project_dir: str | Path) -> ConstructionReport:
    plan_path = Path(plan_path)
    try:
        plan = plan_path.read_text(encoding="utf-8")
    except OSError as e:
        raise QualityGateError(f"Cannot read plan file {plan_path}: {e}") from e

    checks = parse_construction_checks(plan)
    if not checks:
        logger.warning(f"[Construction] No CONSTRUCTION_CHECKS directives in {plan_path}")

    project_dir = Path(project_dir)
    report = ConstructionReport()
    for check in checks:
        report.results.append(ConstructionResult(check, check_directive(check, project_dir)))

    logger.info(f"[Construction] {len(report.results) - len(report.missing)}/{len(report.results)} directives satisfied")
    return report
