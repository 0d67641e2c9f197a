"""
Vote Reconciler -- surface locations where independent reviewers disagree.

Every evidence file is one phase's set of verdicts. Rows are grouped by
location (line numbers stripped, so `src/a.ts:12` and `src/a.ts:40` are
the same key). A location reviewed by two or more phases whose verdicts
differ (case-insensitive) is a disagreement. The reconciler never picks
a winner; it writes the dissent to a report and fails.

Trigger: `quality-gate reconcile-votes <dir>`
Output: <dir>/.claude/evidence/vote-disagreements.md when any dissent exists;
        a report left by an earlier run is removed once the dissent is gone.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from .config import GateConfig
from .evidence import parse_checklist_rows

logger = logging.getLogger(__name__)

REPORT_NAME = "vote-disagreements.md"
TRAILING_LINE_NUMBERS = re.compile(r"(?::\d+)+$")


def location_key(location: str) -> str:
    """'`src/a.ts:12:4`' -> 'src/a.ts'"""
    key = location.strip().strip("`").strip()
    key = TRAILING_LINE_NUMBERS.sub("", key)
    return key.strip("`").strip()


@dataclass
class Review:
    phase: str
    verdict: str


@dataclass
class ReviewedLocation:
    key: str
    reviews: list[Review] = field(default_factory=list)

    @property
    def phases(self) -> set[str]:
        return {r.phase for r in self.reviews}

    @property
    def verdicts(self) -> set[str]:
        return {r.verdict.upper() for r in self.reviews}

    @property
    def contested(self) -> bool:
        return len(self.phases) >= 2

    @property
    def disagrees(self) -> bool:
        return self.contested and len(self.verdicts) > 1


@dataclass
class VoteReport:
    agreements: int = 0
    disagreements: list[ReviewedLocation] = field(default_factory=list)
    report_path: Path | None = None

    @property
    def passed(self) -> bool:
        return not self.disagreements


def load_reviews(evidence_dir: Path) -> dict[str, ReviewedLocation]:
    locations: dict[str, ReviewedLocation] = {}
    for path in sorted(evidence_dir.glob("*.md")):
        if path.name == REPORT_NAME:
            continue
        phase = path.stem
        for row in parse_checklist_rows(path.read_text(encoding="utf-8")):
            key = location_key(row.location)
            locations.setdefault(key, ReviewedLocation(key)).reviews.append(Review(phase, row.verdict))
    return locations


def render_report(disagreements: list[ReviewedLocation]) -> str:
    lines = ["# Vote Disagreements", "", "| Location | Reviews |", "|----------|---------|"]
    for item in disagreements:
        reviews = ", ".join(f"{r.phase}: {r.verdict}" for r in item.reviews)
        lines.append(f"| {item.key} | {reviews} |")
    return "\n".join(lines) + "\n"


def reconcile_votes(target: str | Path, config: GateConfig | None = None) -> VoteReport:
    config = config or GateConfig()
    evidence_dir = config.evidence_dir(Path(target).resolve())
    report = VoteReport()

    if not evidence_dir.is_dir():
        logger.info(f"[Votes] No evidence directory at {evidence_dir} -- nothing to reconcile")
        return report

    for item in load_reviews(evidence_dir).values():
        if not item.contested:
            continue
        if item.disagrees:
            report.disagreements.append(item)
        else:
            report.agreements += 1

    logger.info(f"[Votes] {report.agreements} agreements, {len(report.disagreements)} disagreements")
    report_path = evidence_dir / REPORT_NAME
    if report.disagreements:
        report.report_path = report_path
        report_path.write_text(render_report(report.disagreements), encoding="utf-8")
    elif report_path.exists():
        report_path.unlink()
        logger.info(f"[Votes] Disagreements resolved, removed stale {report_path.name}")
    return report
