"""Tests for evidence checklist validation."""

import pytest

from qualitygate.errors import StateNotFoundError
from qualitygate.evidence import CHECKLIST_COUNTERS, parse_checklist_rows, validate_evidence

SERVICE_TS = """\
export function loadOrders(path: string) {
  try {
    return fs.readFileSync(path, 'utf-8');
  } catch (err) {
    console.error(err.message);
    throw new Error('unreadable');
  }
}

export async function saveOrders(path: string, body: string) {
  fs.writeFileSync(path, body);
}

export const ORDER_LIMIT = 50;
"""

HEADER = "| Location | Item | Verdict | Reasoning |\n|---|---|---|---|\n"


def checklist(*rows: str) -> str:
    return HEADER + "".join(f"| {row} |\n" for row in rows)


@pytest.fixture
def service(write, tmp_path):
    write("src/orders.ts", SERVICE_TS)
    return tmp_path


class TestParseRows:
    def test_rows_need_source_path_and_four_cells(self):
        content = (
            HEADER
            + "| src/a.ts:3 | loadOrders | PASS | handles missing file |\n"
            + "| src/a.ts:9 | saveOrders | FAIL |\n"
            + "| docs/readme.md | intro | PASS | fine |\n"
        )
        rows = parse_checklist_rows(content)
        assert len(rows) == 1
        assert rows[0].location == "src/a.ts:3"
        assert rows[0].verdict == "PASS"

    def test_empty_cells_are_dropped(self):
        rows = parse_checklist_rows("|| src/a.ts | x || PASS | why |\n")
        assert rows[0].item == "x"
        assert rows[0].verdict == "PASS"


class TestCounters:
    def test_counts_over_source_files(self, service, write):
        write("src/orders.test.ts", "export function helper() {}\n")
        counts = {cid: c.count(service) for cid, c in CHECKLIST_COUNTERS.items()}
        assert counts == {
            "refactor-4a": 3,
            "refactor-4b": 2,
            "gemini-6a": 2,
            "gemini-6b": 1,
            "codex-7a": 1,
            "adversarial-9a": 2,
        }


class TestValidateEvidence:
    def test_complete_checklist_passes(self, service, evidence_dir):
        (evidence_dir / "refactor-4b.md").write_text(checklist(
            "src/orders.ts:1 | loadOrders | PASS | ok",
            "src/orders.ts:10 | saveOrders | PASS | ok",
        ))
        report = validate_evidence("refactor", service)
        assert report.passed
        assert report.checklists[0].expected == 2

    def test_short_checklist_fails(self, service, evidence_dir):
        (evidence_dir / "refactor-4b.md").write_text(checklist("src/orders.ts:1 | loadOrders | PASS | ok"))
        report = validate_evidence("refactor", service)
        assert not report.passed
        assert [c.checklist_id for c in report.incomplete] == ["refactor-4b"]
        assert report.incomplete[0].label == "exported functions"

    def test_unknown_checklist_never_fails(self, service, evidence_dir):
        (evidence_dir / "refactor-4z.md").write_text(HEADER)
        report = validate_evidence("refactor", service)
        assert report.passed
        assert not report.checklists[0].known

    def test_only_phase_files_are_read(self, service, evidence_dir):
        (evidence_dir / "codex-7a.md").write_text(HEADER)
        (evidence_dir / "refactor-4b.md").write_text(checklist(
            "src/orders.ts:1 | loadOrders | PASS | ok",
            "src/orders.ts:10 | saveOrders | PASS | ok",
        ))
        report = validate_evidence("refactor", service)
        assert [c.checklist_id for c in report.checklists] == ["refactor-4b"]
        assert report.passed

    def test_missing_evidence_dir(self, service):
        with pytest.raises(StateNotFoundError):
            validate_evidence("refactor", service)
