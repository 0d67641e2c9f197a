"""
Linter Dispatcher -- routes each detected language to one external checker.

Two policies:
  - First-party (typescript): ESLint, only when the target has an ESLint config.
    No config is a soft pass -- the project may legitimately be unlinted.
  - Shared (everything else): Qodana with a per-language linter id.
    Qodana CLI not installed is a soft pass.

Anything else that goes wrong (nonzero exit, timeout, missing npx) is a
hard fail for that language, with the captured output kept for reporting.
Dispatch is sequential; there is no retry.
"""

import logging
import shutil
import subprocess
from pathlib import Path

from .config import GateConfig
from .models import Language, LintResult

logger = logging.getLogger(__name__)

ESLINT_CONFIG_FILES = ("eslint.config.js", "eslint.config.mjs", ".eslintrc.json", ".eslintrc.js")

QODANA_LINTERS: dict[Language, str] = {
    Language.JAVA: "qodana-jvm-community",
    Language.CSHARP: "qodana-dotnet",
    Language.PYTHON: "qodana-python-community",
    Language.GO: "qodana-go",
    Language.RUST: "qodana-rust",
    Language.PHP: "qodana-php",
    Language.RUBY: "qodana-ruby",
}


def _combined_output(stdout: str | bytes | None, stderr: str | bytes | None) -> str:
    parts = []
    for stream in (stdout, stderr):
        if isinstance(stream, bytes):
            stream = stream.decode("utf-8", errors="replace")
        if stream:
            parts.append(stream)
    return "".join(parts)


def _run_checker(cmd: list[str], cwd: Path | None, timeout: int, label: str) -> LintResult:
    """Run one checker process and map its outcome onto a LintResult."""
    logger.info(f"[Linters] Running {label}: {' '.join(cmd)}")
    try:
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        output = _combined_output(e.stdout, e.stderr)
        logger.warning(f"[Linters] {label} timed out after {timeout}s")
        return LintResult(passed=False, output=output or f"{label}: timed out after {timeout}s")
    except OSError as e:
        logger.warning(f"[Linters] {label} could not start: {e}")
        return LintResult(passed=False, output=f"{label}: could not start ({e})")

    output = _combined_output(proc.stdout, proc.stderr)
    if proc.returncode != 0:
        logger.info(f"[Linters] {label} failed with exit code {proc.returncode}")
        return LintResult(passed=False, output=output or f"{label}: failed")
    return LintResult(passed=True, output=output or f"{label}: passed")


def run_eslint(project_dir: str | Path, config: GateConfig | None = None) -> LintResult:
    config = config or GateConfig()
    project_dir = Path(project_dir)

    if not any((project_dir / name).exists() for name in ESLINT_CONFIG_FILES):
        logger.info("[Linters] ESLint: no config found, skipping")
        return LintResult(passed=True, output="ESLint: no config found, skipping", skipped=True)

    return _run_checker(
        ["npx", "eslint", "src/"],
        cwd=project_dir,
        timeout=config.eslint_timeout_s,
        label="ESLint",
    )


def run_qodana(project_dir: str | Path, linter: str, config: GateConfig | None = None) -> LintResult:
    config = config or GateConfig()

    if shutil.which("qodana") is None:
        logger.info(f"[Linters] Qodana CLI not found, skipping {linter}")
        return LintResult(passed=True, output=f"Qodana: CLI not found, skipping {linter}", skipped=True)

    return _run_checker(
        ["qodana", "scan", "--linter", linter, "--project-dir", str(project_dir), "--print-problems"],
        cwd=None,
        timeout=config.qodana_timeout_s,
        label=f"Qodana {linter}",
    )


def run_linter(project_dir: str | Path, language: Language, config: GateConfig | None = None) -> LintResult:
    """Dispatch one language to its checker."""
    if language is Language.TYPESCRIPT:
        return run_eslint(project_dir, config)
    return run_qodana(project_dir, QODANA_LINTERS[language], config)
