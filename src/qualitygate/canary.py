"""
Canary Mutation -- inject known defects, then check a review phase removed them.

A canary is a marker comment plus a small defect template spliced into a
random typescript source file. The reviewing phase is expected to notice
and delete it. Validation counts a canary as CAUGHT when its marker is
gone (or its whole file is), MISSED otherwise.

Trigger: `quality-gate insert-canaries <phase> <dir>` before a phase,
         `quality-gate validate-canaries <phase> <dir>` after it.
Output: <dir>/.claude/canary-manifest.json while a run is active.
Task Boundary: Mutates target source files. Does NOT judge code quality.
"""

import logging
import random
from dataclasses import dataclass, field
from pathlib import Path

from .collector import collect_source_files, relative_to
from .config import GateConfig
from .errors import NoEligibleFilesError, QualityGateError, StateConflictError
from .models import Language
from .state import CanaryEntry, CanaryManifest, load_state, new_run_id, save_state

logger = logging.getLogger(__name__)

CANARY_TEMPLATES: dict[str, str] = {
    "naming": "export function process(d: any) { return d; }",
    "security": 'import { exec } from "child_process";\nexec(`echo ${input}`);',
    "secrets": 'const apiKey = "sk-canary-test-00000";',
    "types": "export function load(config: any): void {}",
    "complexity": "if (a) { if (b) { if (c) { if (d) { /* canary */ } } } }",
}

# category -> (module the template needs, import line to prepend)
REQUIRED_IMPORTS: dict[str, tuple[str, str]] = {
    "security": ("child_process", 'import { exec } from "child_process";'),
}

EXCLUDED_FILES = frozenset({"index.ts", "quality-gate.ts"})
MARKER_PREFIX = "// CANARY:"
FALLBACK_LINE = 5


def canary_marker(phase: str, category: str) -> str:
    return f"{MARKER_PREFIX}{phase}:{category}"


def find_insertion_index(lines: list[str]) -> int:
    """Last non-blank, non-comment line inside a brace scope, else a fixed fallback."""
    insert_at = -1
    depth = 0
    for i, line in enumerate(lines):
        depth += line.count("{") - line.count("}")
        stripped = line.strip()
        if depth > 0 and stripped and not stripped.startswith("//"):
            insert_at = i
    if insert_at == -1:
        insert_at = min(FALLBACK_LINE, len(lines))
    return insert_at


def _remove_block(lines: list[str], block: list[str]) -> bool:
    """Delete the first run of lines equal (ignoring indentation) to block."""
    size = len(block)
    for i in range(len(lines) - size + 1):
        if [line.strip() for line in lines[i:i + size]] == block:
            del lines[i:i + size]
            return True
    return False


def remove_canaries(content: str, phase: str, entries: list[CanaryEntry]) -> str:
    """Undo the recorded insertions and leave every other line alone.

    Per entry: its marker line, one copy of its template, and the import
    line only when insertion had to add it.
    """
    lines = content.split("\n")
    for entry in entries:
        marker = canary_marker(phase, entry.category)
        lines = [line for line in lines if line.strip() != marker]
        _remove_block(lines, [part.strip() for part in entry.inserted.split("\n")])
        required = REQUIRED_IMPORTS.get(entry.category)
        if entry.import_added and required:
            _remove_block(lines, [required[1]])
    return "\n".join(lines)


def _is_utf8(path: Path) -> bool:
    try:
        path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"[Canary] Not eligible, cannot decode {path}: {e}")
        return False
    return True


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class CanaryOutcome:
    """Verdict for one canary after a phase ran."""

    entry: CanaryEntry
    caught: bool
    file_removed: bool = False


@dataclass
class CanaryReport:
    phase: str
    run_id: str
    outcomes: list[CanaryOutcome] = field(default_factory=list)

    @property
    def missed(self) -> list[CanaryOutcome]:
        return [o for o in self.outcomes if not o.caught]

    @property
    def caught(self) -> list[CanaryOutcome]:
        return [o for o in self.outcomes if o.caught]

    @property
    def passed(self) -> bool:
        return not self.missed


# =============================================================================
# SESSION
# =============================================================================


class CanarySession:
    """
    One canary run against one target directory.

    Usage:
        session = CanarySession(target, rng=random.Random(42))
        manifest = session.insert("gemini")
        ... phase runs ...
        report = session.validate("gemini")
    """

    def __init__(
        self,
        target: str | Path,
        config: GateConfig | None = None,
        rng: random.Random | None = None,
    ):
        self.target = Path(target).resolve()
        self.config = config or GateConfig()
        self.rng = rng or random.Random()
        self.manifest_path = self.config.manifest_path(self.target)

    def eligible_files(self) -> list[Path]:
        files = collect_source_files(self.target, Language.TYPESCRIPT.extensions)
        return [f for f in files if f.name not in EXCLUDED_FILES and _is_utf8(f)]

    def _resolve(self, file: str) -> Path:
        path = Path(file)
        return path if path.is_absolute() else self.target / path

    # =========================================================================
    # INSERT
    # =========================================================================

    def insert(self, phase: str) -> CanaryManifest:
        """Splice 3-5 distinct canaries into random source files and write the manifest."""
        if self.manifest_path.exists():
            raise StateConflictError(
                f"A canary run is already active for {self.target} "
                f"({self.manifest_path}); validate it before inserting again"
            )

        files = self.eligible_files()
        if not files:
            raise NoEligibleFilesError(f"No source files for canary insertion under {self.target}")

        categories = list(CANARY_TEMPLATES)
        count = self.config.canary_min + self.rng.randint(0, self.config.canary_max - self.config.canary_min)
        selected = self.rng.sample(categories, min(count, len(categories)))

        # Saved after every insertion so a failed run can still be validated and cleaned up.
        manifest = CanaryManifest(phase=phase, run_id=new_run_id("canary"))
        for category in selected:
            path = self.rng.choice(files)
            try:
                entry = self._insert_one(path, phase, category)
            except (OSError, UnicodeDecodeError) as e:
                raise QualityGateError(
                    f"Canary insertion failed in {path}: {e}; "
                    f"{len(manifest.canaries)} canaries already recorded, run validate-canaries to clean up"
                ) from e
            manifest.canaries.append(entry)
            save_state(self.manifest_path, manifest)

        logger.info(f"[Canary] Inserted {len(manifest.canaries)} canaries for phase '{phase}' ({manifest.run_id})")
        return manifest

    def _insert_one(self, path: Path, phase: str, category: str) -> CanaryEntry:
        lines = path.read_text(encoding="utf-8").split("\n")
        insert_at = find_insertion_index(lines)
        template = CANARY_TEMPLATES[category]
        original = lines[insert_at] if insert_at < len(lines) else ""

        required = REQUIRED_IMPORTS.get(category)
        import_added = bool(required) and not any(required[0] in line for line in lines)
        if import_added:
            lines.insert(0, required[1])
            insert_at += 1

        lines[insert_at + 1:insert_at + 1] = [canary_marker(phase, category), template]
        path.write_text("\n".join(lines), encoding="utf-8")
        logger.debug(f"[Canary] {category} -> {relative_to(self.target, path)}:{insert_at + 1}")

        return CanaryEntry(
            file=str(path),
            line=insert_at + 1,
            category=category,
            original=original,
            inserted=template,
            import_added=import_added,
        )

    # =========================================================================
    # VALIDATE
    # =========================================================================

    def validate(self, phase: str) -> CanaryReport:
        """Score every canary, restore the files, and delete the manifest."""
        manifest = load_state(self.manifest_path, CanaryManifest, "canary manifest")
        if manifest.phase != phase:
            logger.warning(
                f"[Canary] Requested phase '{phase}' but manifest was written for '{manifest.phase}'; "
                f"using the manifest's markers"
            )

        report = CanaryReport(phase=manifest.phase, run_id=manifest.run_id)
        for entry in manifest.canaries:
            path = self._resolve(entry.file)
            if not path.exists():
                report.outcomes.append(CanaryOutcome(entry=entry, caught=True, file_removed=True))
                continue
            content = path.read_text(encoding="utf-8", errors="replace")
            caught = canary_marker(manifest.phase, entry.category) not in content
            report.outcomes.append(CanaryOutcome(entry=entry, caught=caught))

        self._restore(manifest)
        self.manifest_path.unlink()

        logger.info(
            f"[Canary] Phase '{manifest.phase}': {len(report.caught)} caught, "
            f"{len(report.missed)} missed"
        )
        return report

    def _restore(self, manifest: CanaryManifest) -> None:
        """Best-effort: the manifest decides pass/fail, not the cleanup."""
        by_file: dict[str, list[CanaryEntry]] = {}
        for entry in manifest.canaries:
            by_file.setdefault(entry.file, []).append(entry)

        for file in sorted(by_file):
            path = self._resolve(file)
            if not path.exists():
                continue
            try:
                content = path.read_text(encoding="utf-8")
                path.write_text(remove_canaries(content, manifest.phase, by_file[file]), encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"[Canary] Cleanup skipped for {path}: {e}")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def insert_canaries(
    phase: str,
    target: str | Path,
    config: GateConfig | None = None,
    rng: random.Random | None = None,
) -> CanaryManifest:
    return CanarySession(target, config, rng).insert(phase)


def validate_canaries(phase: str, target: str | Path, config: GateConfig | None = None) -> CanaryReport:
    return CanarySession(target, config).validate(phase)
