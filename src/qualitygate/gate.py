"""
Default gate run: Collector -> Linter Dispatcher -> Pattern/Proxy checks.

Everything is aggregated: a failing linter does not stop the pattern
checks, and the verdict is only computed once every step has run.

Trigger: `quality-gate [target]`
Output: GateResult with languages, lint failures, and violations.
Task Boundary: Detection only. Does NOT modify the target.
"""

import logging
from pathlib import Path

from .checks import pattern_checks, proxy_checks, run_checks, universal_checks
from .collector import collect_source_files, detect_languages
from .config import GateConfig
from .linters import run_linter
from .models import GateResult, Language

logger = logging.getLogger(__name__)


def run_gate(
    project_dir: str | Path,
    skip_linters: bool = False,
    config: GateConfig | None = None,
) -> GateResult:
    """Run every applicable linter and check against project_dir."""
    config = config or GateConfig()
    project_dir = Path(project_dir).resolve()

    languages = detect_languages(project_dir)
    if not languages:
        logger.info(f"[Gate] No recognized source files under {project_dir}")
        return GateResult(passed=True)

    result = GateResult(passed=False, languages=languages)

    # Phase 1: language-specific linters, one at a time
    if not skip_linters:
        for language in languages:
            lint = run_linter(project_dir, language, config)
            result.lint_results[language] = lint
            if not lint.passed:
                result.lint_failures.append(language)

    # Phase 2: universal checks over every detected language
    extensions = [ext for lang in languages for ext in lang.extensions]
    source_files = collect_source_files(project_dir, extensions)
    result.violations.extend(run_checks(universal_checks(config), source_files, project_dir))

    # Phase 3: typescript pattern + proxy tiers
    if Language.TYPESCRIPT in languages:
        ts_files = collect_source_files(project_dir, Language.TYPESCRIPT.extensions)
        result.violations.extend(run_checks(pattern_checks(config), ts_files, project_dir))
        result.violations.extend(run_checks(proxy_checks(config), ts_files, project_dir))

    result.passed = result.issue_count == 0
    logger.info(
        f"[Gate] {len(result.violations)} violation(s), "
        f"{len(result.lint_failures)} lint failure(s): {'PASS' if result.passed else 'FAIL'}"
    )
    return result
