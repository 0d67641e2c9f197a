"""Tests for plan directive parsing and construction validation."""

import pytest

from qualitygate.construction import DirectiveType, parse_construction_checks, validate_construction
from qualitygate.errors import PlanParseError, QualityGateError

PLAN = """\
# Cache plan

Some intro text.

## Construction_Checks
- FILE: src/cache.ts
- EXPORT_FUNCTION: createCache IN src/cache.ts
- EXPORT_TYPE: CacheOptions IN src/types.ts

## Next steps
- whatever comes next is not a directive
"""


@pytest.fixture
def plan_file(tmp_path):
    path = tmp_path / "PLAN.md"
    path.write_text(PLAN, encoding="utf-8")
    return path


class TestParse:
    def test_directives_in_order(self):
        checks = parse_construction_checks(PLAN)
        assert [(c.type, c.name, c.file) for c in checks] == [
            (DirectiveType.FILE, "src/cache.ts", None),
            (DirectiveType.EXPORT_FUNCTION, "createCache", "src/cache.ts"),
            (DirectiveType.EXPORT_TYPE, "CacheOptions", "src/types.ts"),
        ]

    def test_no_section_means_no_directives(self):
        assert parse_construction_checks("# Plan\n- FILE: a.ts\n") == []

    def test_bad_bullet_in_section_is_an_error(self):
        plan = "## CONSTRUCTION_CHECKS\n- FILE: a.ts\n- EXPORT_FUNCTION: missingTheFile\n"
        with pytest.raises(PlanParseError) as exc:
            parse_construction_checks(plan)
        assert exc.value.line_number == 3
        assert "line 3" in str(exc.value)

    def test_prose_in_section_is_ignored(self):
        plan = "## CONSTRUCTION_CHECKS\nThese must exist:\n\n- FILE: a.ts\n"
        assert len(parse_construction_checks(plan)) == 1


class TestValidate:
    def test_all_directives_satisfied(self, tmp_path, write, plan_file):
        write("src/cache.ts", "export async function createCache() {}\n")
        write("src/types.ts", "export interface CacheOptions { ttl: number }\n")
        report = validate_construction(plan_file, tmp_path)
        assert report.passed
        assert len(report.results) == 3

    def test_export_const_counts_as_function(self, tmp_path, write, plan_file):
        write("src/cache.ts", "export const createCache = () => ({});\n")
        write("src/types.ts", "export type CacheOptions = { ttl: number };\n")
        assert validate_construction(plan_file, tmp_path).passed

    def test_one_missing_directive_fails_all(self, tmp_path, write, plan_file):
        write("src/cache.ts", "export function createCache() {}\n")
        report = validate_construction(plan_file, tmp_path)
        assert not report.passed
        assert [r.check.name for r in report.missing] == ["CacheOptions"]

    def test_name_must_match_whole_word(self, tmp_path, write, plan_file):
        write("src/cache.ts", "export function createCacheStore() {}\n")
        write("src/types.ts", "export interface CacheOptions {}\n")
        report = validate_construction(plan_file, tmp_path)
        assert [r.check.name for r in report.missing] == ["createCache"]

    def test_python_exports(self, tmp_path, write):
        write("pkg/cache.py", "class CacheOptions:\n    pass\n\n\nasync def create_cache():\n    pass\n")
        plan = tmp_path / "plan.md"
        plan.write_text(
            "## CONSTRUCTION_CHECKS\n"
            "- EXPORT_FUNCTION: create_cache IN pkg/cache.py\n"
            "- EXPORT_TYPE: CacheOptions IN pkg/cache.py\n"
        )
        assert validate_construction(plan, tmp_path).passed

    def test_empty_plan_passes(self, tmp_path):
        plan = tmp_path / "plan.md"
        plan.write_text("# Nothing to check\n")
        report = validate_construction(plan, tmp_path)
        assert report.passed
        assert report.results == []

    def test_missing_plan_file(self, tmp_path):
        with pytest.raises(QualityGateError):
            validate_construction(tmp_path / "nope.md", tmp_path)
