"""
Pattern Check Engine -- every scanner behind one PatternCheck interface.

Suites (all run on source files only, never tests):
  - universal_checks: every detected language (hardcoded secrets)
  - pattern_checks:   typescript security/hygiene tier
  - proxy_checks:     typescript structural heuristics (naming, size,
                      tests, literals, races, comment spam)

Adding a check means writing one class and listing it in a suite; the
gate's dispatch never changes.
"""

from ..config import GateConfig
from .base import CheckCategory, FileCheck, PatternCheck, run_checks
from .hygiene import (
    CommentSpamCheck,
    DangerousEvalCheck,
    FalsyNumericGuardCheck,
    MagicNumberCheck,
    MagicStringCheck,
    ToctouCheck,
    TypesBeforeFunctionsCheck,
    VerificationReadCheck,
)
from .imports import CircularImportCheck, find_cycles, resolve_import
from .naming import (
    AbbreviatedNameCheck,
    BannedFileNameCheck,
    BannedParamNameCheck,
    ShortFunctionNameCheck,
    SingleLetterParamCheck,
)
from .security import HardcodedSecretsCheck, PathTraversalCheck, RawErrorOutputCheck, ShellInjectionCheck
from .size import (
    ClassMethodCountCheck,
    ExportCountCheck,
    FileLengthCheck,
    FunctionLengthCheck,
    ImportFanInCheck,
    InheritanceDepthCheck,
    ParameterCountCheck,
)
from .testing import EmptyTestCheck, MissingTestCheck, TestImportingTestCheck


def universal_checks(config: GateConfig | None = None) -> list[PatternCheck]:
    return [HardcodedSecretsCheck(config)]


def pattern_checks(config: GateConfig | None = None) -> list[PatternCheck]:
    return [
        ShellInjectionCheck(config),
        PathTraversalCheck(config),
        CircularImportCheck(config),
        RawErrorOutputCheck(config),
    ]


def proxy_checks(config: GateConfig | None = None) -> list[PatternCheck]:
    return [
        BannedParamNameCheck(config),
        SingleLetterParamCheck(config),
        ShortFunctionNameCheck(config),
        BannedFileNameCheck(config),
        AbbreviatedNameCheck(config),
        ExportCountCheck(config),
        ParameterCountCheck(config),
        ImportFanInCheck(config),
        FileLengthCheck(config),
        FunctionLengthCheck(config),
        MissingTestCheck(config),
        EmptyTestCheck(config),
        TestImportingTestCheck(config),
        ClassMethodCountCheck(config),
        InheritanceDepthCheck(config),
        TypesBeforeFunctionsCheck(config),
        MagicNumberCheck(config),
        MagicStringCheck(config),
        ToctouCheck(config),
        VerificationReadCheck(config),
        DangerousEvalCheck(config),
        FalsyNumericGuardCheck(config),
        CommentSpamCheck(config),
    ]


__all__ = [
    "CheckCategory",
    "FileCheck",
    "PatternCheck",
    "find_cycles",
    "pattern_checks",
    "proxy_checks",
    "resolve_import",
    "run_checks",
    "universal_checks",
]
