"""CLI tests: exit codes and default-command routing."""

import pytest
from typer.testing import CliRunner

from qualitygate import __version__
from qualitygate.cli import app, route_args

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_env_overrides(monkeypatch):
    for name in ("QUALITY_GATE_STATE_DIR", "QUALITY_GATE_CANARY_MIN", "QUALITY_GATE_CANARY_MAX"):
        monkeypatch.delenv(name, raising=False)


class TestRouting:
    def test_bare_invocation_runs_gate(self):
        assert route_args([]) == ["gate"]

    def test_target_only(self):
        assert route_args(["./proj"]) == ["gate", "./proj"]

    def test_options_only(self):
        assert route_args(["--skip-linters"]) == ["gate", "--skip-linters"]

    def test_global_verbose_stays_in_front(self):
        assert route_args(["-v", "./proj"]) == ["-v", "gate", "./proj"]
        assert route_args(["--verbose"]) == ["--verbose", "gate"]

    def test_named_commands_untouched(self):
        assert route_args(["insert-canaries", "gemini", "."]) == ["insert-canaries", "gemini", "."]
        assert route_args(["version"]) == ["version"]
        assert route_args(["--help"]) == ["--help"]


class TestGateCommand:
    def test_clean_project_exits_zero(self, py_project):
        result = runner.invoke(app, ["gate", str(py_project), "--skip-linters"])
        assert result.exit_code == 0
        assert "PASS" in result.output

    def test_violation_exits_one(self, py_project, write):
        write("app/settings.py", 'API_KEY = "sk-abcdefghijklmnopqrstuvwx"\n')
        result = runner.invoke(app, ["gate", str(py_project), "--skip-linters"])
        assert result.exit_code == 1
        assert "FAIL" in result.output

    def test_empty_directory_passes(self, tmp_path):
        result = runner.invoke(app, ["gate", str(tmp_path)])
        assert result.exit_code == 0

    def test_not_a_directory(self, tmp_path):
        result = runner.invoke(app, ["gate", str(tmp_path / "missing")])
        assert result.exit_code == 1


class TestCanaryCommands:
    def test_insert_then_validate_untouched_fails(self, ts_project):
        inserted = runner.invoke(app, ["insert-canaries", "gemini", str(ts_project), "--seed", "3"])
        assert inserted.exit_code == 0
        assert "Inserted" in inserted.output

        validated = runner.invoke(app, ["validate-canaries", "gemini", str(ts_project)])
        assert validated.exit_code == 1
        assert "MISSED" in validated.output
        assert not (ts_project / ".claude" / "canary-manifest.json").exists()

    def test_validate_without_manifest(self, ts_project):
        result = runner.invoke(app, ["validate-canaries", "gemini", str(ts_project)])
        assert result.exit_code == 1


class TestEvidenceAndVotes:
    def test_validate_evidence_missing_dir(self, tmp_path):
        result = runner.invoke(app, ["validate-evidence", "refactor", str(tmp_path)])
        assert result.exit_code == 1

    def test_reconcile_disagreement_exits_one(self, tmp_path, evidence_dir):
        (evidence_dir / "a-1.md").write_text("| src/x.ts:1 | i | PASS | ok |\n")
        (evidence_dir / "b-1.md").write_text("| src/x.ts:2 | i | FAIL | no |\n")
        result = runner.invoke(app, ["reconcile-votes", str(tmp_path)])
        assert result.exit_code == 1
        assert (evidence_dir / "vote-disagreements.md").exists()

    def test_reconcile_nothing_passes(self, tmp_path):
        result = runner.invoke(app, ["reconcile-votes", str(tmp_path)])
        assert result.exit_code == 0


class TestMetricsCommands:
    def test_full_lifecycle(self, tmp_path):
        target = str(tmp_path)
        assert runner.invoke(app, ["start-metrics", "full-review", target]).exit_code == 0
        assert runner.invoke(app, ["record-metrics", "gemini", "4", "3", "1200", target]).exit_code == 0
        result = runner.invoke(app, ["report-metrics", target])
        assert result.exit_code == 0
        assert "gemini: 4 found, 3 fixed (1200ms)" in result.output
        assert "Total: 4 found, 3 fixed" in result.output

    def test_pipeline_name_with_separator_exits_one(self, tmp_path):
        result = runner.invoke(app, ["start-metrics", "../escape", str(tmp_path)])
        assert result.exit_code == 1
        assert not (tmp_path / ".claude" / "metrics" / "active-metrics.json").exists()

    def test_record_without_start(self, tmp_path):
        result = runner.invoke(app, ["record-metrics", "gemini", "1", "1", "10", str(tmp_path)])
        assert result.exit_code == 1


class TestConstructionCommand:
    def test_missing_artifact_exits_one(self, tmp_path):
        plan = tmp_path / "plan.md"
        plan.write_text("## CONSTRUCTION_CHECKS\n- FILE: src/missing.ts\n")
        result = runner.invoke(app, ["validate-construction", str(plan), str(tmp_path)])
        assert result.exit_code == 1

    def test_bad_directive_exits_one(self, tmp_path):
        plan = tmp_path / "plan.md"
        plan.write_text("## CONSTRUCTION_CHECKS\n- MAKE IT FAST\n")
        result = runner.invoke(app, ["validate-construction", str(plan), str(tmp_path)])
        assert result.exit_code == 1


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output
