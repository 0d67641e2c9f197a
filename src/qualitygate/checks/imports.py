"""
Circular import detection for the typescript family.

Builds a directed graph from relative import specifiers, then walks it
with an iterative DFS that keeps an explicit recursion stack. Every back
edge is reported with the full chain taken from that stack, e.g.
  Circular: a.ts -> b.ts -> a.ts
"""

import logging
import os
import re
from pathlib import Path
from typing import Sequence

from ..collector import relative_to
from ..config import GateConfig
from ..models import Violation
from .base import CheckCategory, read_source

logger = logging.getLogger(__name__)

RELATIVE_IMPORT = re.compile(r"""(?:import|from)\s+['"](\.[^'"]+)['"]""")


def _normalize(path: str | Path) -> Path:
    return Path(os.path.normpath(os.path.abspath(path)))


def resolve_import(from_file: str | Path, specifier: str) -> Path | None:
    """Resolve a relative specifier to an existing file, or None.

    Tried in order: exact path, .ts / .tsx variants, .js rewritten to .ts,
    and the directory's index.ts.
    """
    base = str(_normalize(Path(from_file).parent / specifier))
    candidates = [base, f"{base}.ts", f"{base}.tsx"]
    if base.endswith(".js"):
        candidates.append(base[:-3] + ".ts")
    candidates.append(os.path.join(base, "index.ts"))

    for candidate in candidates:
        if os.path.isfile(candidate):
            return Path(candidate)
    return None


def build_import_graph(files: Sequence[Path]) -> dict[Path, list[Path]]:
    graph: dict[Path, list[Path]] = {}
    for path in files:
        node = _normalize(path)
        content = read_source(path)
        deps: list[Path] = []
        if content is not None:
            for match in RELATIVE_IMPORT.finditer(content):
                resolved = resolve_import(node, match.group(1))
                if resolved is not None and resolved not in deps:
                    deps.append(resolved)
        graph[node] = deps
    return graph


def find_cycles(graph: dict[Path, list[Path]]) -> list[list[Path]]:
    """Return one chain per back edge; each chain ends with its first node."""
    cycles: list[list[Path]] = []
    visited: set[Path] = set()

    for root in graph:
        if root in visited:
            continue
        visited.add(root)
        stack = [root]
        on_stack = {root}
        pending = [iter(graph.get(root, ()))]

        while pending:
            dep = next(pending[-1], None)
            if dep is None:
                pending.pop()
                on_stack.discard(stack.pop())
                continue
            if dep in on_stack:
                cycles.append(stack[stack.index(dep):] + [dep])
                continue
            if dep in visited:
                continue
            visited.add(dep)
            stack.append(dep)
            on_stack.add(dep)
            pending.append(iter(graph.get(dep, ())))

    return cycles


class CircularImportCheck:
    """Project-wide check: one violation per detected cycle, at line 0."""

    check_id = "circular-import"
    category = CheckCategory.STRUCTURE

    def __init__(self, config: GateConfig | None = None):
        self.config = config or GateConfig()

    def scan(self, files: Sequence[Path], base: Path) -> list[Violation]:
        graph = build_import_graph(files)
        violations = []
        for cycle in find_cycles(graph):
            chain = [relative_to(base, p) for p in cycle]
            violations.append(Violation(
                file=chain[-1],
                line=0,
                check=self.check_id,
                message=f"Circular: {' → '.join(chain)}",
            ))
        if violations:
            logger.info(f"[Imports] {len(violations)} circular import chain(s)")
        return violations
