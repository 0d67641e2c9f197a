"""
File Collector -- walks a project and classifies files by language.

Hidden entries and build/vendor directories are never descended into.
Results are sorted so that two runs over the same tree see the same files
in the same order.
"""

import logging
import os
import re
from pathlib import Path
from typing import Iterable

from .models import Language

logger = logging.getLogger(__name__)

SKIP_DIRS = frozenset({
    "node_modules", "dist", "build", "target", "bin", "obj",
    "__pycache__", "vendor", "scripts",
})

TEST_PATTERNS = [
    re.compile(r"\.test\.\w+$"),
    re.compile(r"\.spec\.\w+$"),
    re.compile(r"_test\.\w+$"),
    re.compile(r"Test\.java$"),
    re.compile(r"Tests?\.cs$"),
    re.compile(r"^test_.*\.py$"),
    re.compile(r"_test\.go$"),
    re.compile(r"_test\.rs$"),
]


def collect_files(root: str | Path, extensions: Iterable[str]) -> list[Path]:
    """Recursively collect files under root whose name ends with an extension."""
    extensions = tuple(extensions)
    results: list[Path] = []
    try:
        entries = sorted(os.scandir(root), key=lambda e: e.name)
    except OSError as e:
        logger.debug(f"[Collector] Cannot read {root}: {e}")
        return results

    for entry in entries:
        if entry.name.startswith(".") or entry.name in SKIP_DIRS:
            continue
        if entry.is_dir(follow_symlinks=False):
            results.extend(collect_files(entry.path, extensions))
        elif entry.name.endswith(extensions):
            results.append(Path(entry.path))
    return results


def is_test_file(path: str | Path) -> bool:
    name = Path(path).name
    return any(p.search(name) for p in TEST_PATTERNS)


def collect_source_files(root: str | Path, extensions: Iterable[str]) -> list[Path]:
    """Like collect_files, minus anything named like a test."""
    return [f for f in collect_files(root, extensions) if not is_test_file(f)]


def detect_languages(root: str | Path) -> list[Language]:
    """Languages with at least one file under root, in fixed enum order."""
    detected = [lang for lang in Language if collect_files(root, lang.extensions)]
    logger.info(f"[Collector] Detected languages: {[l.value for l in detected]}")
    return detected


def relative_to(base: str | Path, path: str | Path) -> str:
    return os.path.relpath(path, base)
