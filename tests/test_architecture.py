"""
Architecture tests -- keep the layers pointing one way.

The CLI may import anything. Library modules must not import the CLI or
its presentation libraries, so every operation stays callable (and
testable) without a terminal.
"""

import ast
from pathlib import Path

PACKAGE_ROOT = Path(__file__).parent.parent / "src" / "qualitygate"

# module (relative to package root) -> imports it must never use
FORBIDDEN_IMPORTS = {
    "checks": {"typer", "rich", "qualitygate.cli", "cli"},
    "collector.py": {"typer", "rich", "qualitygate.cli", "cli"},
    "linters.py": {"typer", "rich", "qualitygate.cli", "cli"},
    "canary.py": {"typer", "rich", "qualitygate.cli", "cli"},
    "evidence.py": {"typer", "rich", "qualitygate.cli", "cli"},
    "votes.py": {"typer", "rich", "qualitygate.cli", "cli"},
    "metrics.py": {"typer", "rich", "qualitygate.cli", "cli"},
    "construction.py": {"typer", "rich", "qualitygate.cli", "cli"},
    "gate.py": {"typer", "rich", "qualitygate.cli", "cli"},
}


def _imported_modules(path: Path) -> set[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    names = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            names.add(node.module)
    return names


def _python_files(rel: str) -> list[Path]:
    target = PACKAGE_ROOT / rel
    return sorted(target.rglob("*.py")) if target.is_dir() else [target]


class TestLayering:
    def test_library_modules_do_not_import_cli(self):
        violations = []
        for rel, forbidden in FORBIDDEN_IMPORTS.items():
            for path in _python_files(rel):
                for module in _imported_modules(path):
                    root = module.split(".")[0]
                    if module in forbidden or root in forbidden:
                        violations.append(f"{path.relative_to(PACKAGE_ROOT)} imports {module}")
        assert violations == [], "\n".join(violations)

    def test_every_listed_module_exists(self):
        for rel in FORBIDDEN_IMPORTS:
            assert (PACKAGE_ROOT / rel).exists(), rel

    def test_checks_do_not_write_files(self):
        """Checks are detection only."""
        for path in _python_files("checks"):
            source = path.read_text(encoding="utf-8")
            assert "write_text" not in source, path.name
            assert "open(" not in source, path.name
