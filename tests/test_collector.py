"""Tests for file collection and language detection."""

from qualitygate.collector import collect_files, collect_source_files, detect_languages, is_test_file
from qualitygate.models import Language


class TestCollectFiles:
    def test_finds_matching_extensions_recursively(self, tmp_path, write):
        write("src/a.ts", "")
        write("src/nested/b.tsx", "")
        write("src/readme.md", "")
        found = collect_files(tmp_path, Language.TYPESCRIPT.extensions)
        assert sorted(p.name for p in found) == ["a.ts", "b.tsx"]

    def test_skips_vendor_and_hidden_dirs(self, tmp_path, write):
        write("src/a.ts", "")
        write("node_modules/lib/index.ts", "")
        write("dist/a.js", "")
        write(".claude/tool.ts", "")
        write("scripts/quality-gate.ts", "")
        found = collect_files(tmp_path, Language.TYPESCRIPT.extensions)
        assert [p.name for p in found] == ["a.ts"]

    def test_results_are_sorted(self, tmp_path, write):
        for name in ("c.py", "a.py", "b.py"):
            write(name, "")
        found = collect_files(tmp_path, (".py",))
        assert [p.name for p in found] == ["a.py", "b.py", "c.py"]

    def test_missing_root_returns_empty(self, tmp_path):
        assert collect_files(tmp_path / "nope", (".ts",)) == []


class TestTestFileDetection:
    def test_recognizes_conventions(self):
        for name in (
            "a.test.ts", "a.spec.js", "handler_test.go", "lib_test.rs",
            "UserTest.java", "UserTests.cs", "test_service.py",
        ):
            assert is_test_file(name), name

    def test_plain_sources_are_not_tests(self):
        for name in ("service.ts", "contest.py", "latest.go", "Testing.java"):
            assert not is_test_file(name), name

    def test_source_files_exclude_tests(self, tmp_path, write):
        write("src/a.ts", "")
        write("src/a.test.ts", "")
        found = collect_source_files(tmp_path, Language.TYPESCRIPT.extensions)
        assert [p.name for p in found] == ["a.ts"]


class TestDetectLanguages:
    def test_detection_order_is_fixed(self, tmp_path, write):
        write("svc/main.go", "")
        write("app/main.py", "")
        write("web/app.ts", "")
        assert detect_languages(tmp_path) == [Language.TYPESCRIPT, Language.PYTHON, Language.GO]

    def test_empty_project(self, tmp_path):
        assert detect_languages(tmp_path) == []
