"""
Evidence Validator -- did the reviewer's checklist cover the whole codebase?

Each reviewing phase writes pipe-delimited checklist tables to
<target>/.claude/evidence/<phase>-<id>.md. For checklist ids with a known
meaning, a counter computes how many rows the checklist should have
(e.g. one per exported function). Fewer rows than that means the review
skipped something.

Trigger: `quality-gate validate-evidence <phase> <dir>`
Output: EvidenceReport; fails iff a known checklist is short.
Task Boundary: Counts rows only. Does NOT grade verdicts or reasoning.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from .checks.base import read_source
from .collector import collect_source_files
from .config import GateConfig
from .errors import StateNotFoundError
from .models import Language

logger = logging.getLogger(__name__)


# =============================================================================
# ROW PARSING
# =============================================================================


@dataclass(frozen=True)
class EvidenceRow:
    location: str
    item: str
    verdict: str
    reasoning: str


def parse_checklist_rows(content: str) -> list[EvidenceRow]:
    """Table rows that reference a source path and carry at least four cells."""
    rows = []
    for line in content.split("\n"):
        if "|" not in line or "src/" not in line:
            continue
        cells = [c.strip() for c in line.split("|")]
        cells = [c for c in cells if c]
        if len(cells) >= 4:
            rows.append(EvidenceRow(*cells[:4]))
    return rows


# =============================================================================
# COUNTERS
# =============================================================================


def _pattern_counter(pattern: str, flags: int = 0) -> Callable[[Path], int]:
    regex = re.compile(pattern, flags)

    def count(target: Path) -> int:
        total = 0
        for path in collect_source_files(target, Language.TYPESCRIPT.extensions):
            content = read_source(path)
            if content is not None:
                total += len(regex.findall(content))
        return total

    return count


@dataclass(frozen=True)
class ChecklistCounter:
    label: str
    count: Callable[[Path], int]


CHECKLIST_COUNTERS: dict[str, ChecklistCounter] = {
    "refactor-4a": ChecklistCounter(
        "exported functions + constants",
        _pattern_counter(r"^export\s+(?:const|function|async\s+function)", re.MULTILINE),
    ),
    "refactor-4b": ChecklistCounter(
        "exported functions",
        _pattern_counter(r"^export\s+(?:async\s+)?function\s", re.MULTILINE),
    ),
    "gemini-6a": ChecklistCounter(
        "error/log/throw/reject calls",
        _pattern_counter(r"console\.error|console\.log|throw\s+new\s+Error|reject\("),
    ),
    "gemini-6b": ChecklistCounter(
        "CLI arg reads, fs reads, env access",
        _pattern_counter(r"process\.argv|commander|\.option\(|fs\.readFile|process\.env\."),
    ),
    "codex-7a": ChecklistCounter(
        "catch blocks",
        _pattern_counter(r"catch\s*\("),
    ),
    "adversarial-9a": ChecklistCounter(
        "entry points",
        _pattern_counter(r"\.command\(|\.action\(|createReadStream|createWriteStream|readFileSync|writeFileSync"),
    ),
}


# =============================================================================
# VALIDATION
# =============================================================================


@dataclass
class ChecklistResult:
    checklist_id: str
    rows: int
    expected: int | None = None  # None: no counter for this id
    label: str = ""

    @property
    def known(self) -> bool:
        return self.expected is not None

    @property
    def complete(self) -> bool:
        return self.expected is None or self.rows >= self.expected


@dataclass
class EvidenceReport:
    phase: str
    checklists: list[ChecklistResult] = field(default_factory=list)

    @property
    def incomplete(self) -> list[ChecklistResult]:
        return [c for c in self.checklists if not c.complete]

    @property
    def passed(self) -> bool:
        return not self.incomplete


def validate_evidence(phase: str, target: str | Path, config: GateConfig | None = None) -> EvidenceReport:
    config = config or GateConfig()
    target = Path(target).resolve()
    evidence_dir = config.evidence_dir(target)
    if not evidence_dir.is_dir():
        raise StateNotFoundError(f"No evidence directory at {evidence_dir}")

    report = EvidenceReport(phase=phase)
    for path in sorted(evidence_dir.iterdir()):
        if not path.name.startswith(f"{phase}-") or path.suffix != ".md":
            continue
        checklist_id = path.stem
        rows = parse_checklist_rows(path.read_text(encoding="utf-8"))
        counter = CHECKLIST_COUNTERS.get(checklist_id)

        if counter is None:
            logger.info(f"[Evidence] {checklist_id}: {len(rows)} items (no counter)")
            report.checklists.append(ChecklistResult(checklist_id, len(rows)))
            continue

        result = ChecklistResult(checklist_id, len(rows), counter.count(target), counter.label)
        report.checklists.append(result)
        if not result.complete:
            logger.warning(f"[Evidence] {checklist_id}: {result.rows}/{result.expected} INCOMPLETE ({counter.label})")

    if not report.checklists:
        logger.warning(f"[Evidence] No checklists found for phase '{phase}' in {evidence_dir}")
    return report
