"""
Exception hierarchy for the quality gate.

Findings (violations, lint failures, missed canaries) are results, not
exceptions. Exceptions are reserved for the fail-fast tier: the requested
operation cannot run at all (missing or corrupt state, bad plan input).
The CLI maps every QualityGateError to exit code 1.
"""


class QualityGateError(Exception):
    """Base class for all fail-fast errors. Message is user-facing."""

    pass


class StateNotFoundError(QualityGateError):
    """A required state file or directory does not exist."""

    pass


class CorruptStateError(QualityGateError):
    """A state file exists but cannot be parsed or fails schema validation."""

    pass


class StateConflictError(QualityGateError):
    """A second active manifest / metrics run was requested for one target."""

    pass


class PlanParseError(QualityGateError):
    """A construction directive in a plan document is malformed."""

    def __init__(self, line_number: int, line: str):
        self.line_number = line_number
        self.line = line
        super().__init__(f"Unparseable construction directive on line {line_number}: {line.strip()}")


class NoEligibleFilesError(QualityGateError):
    """No source files qualify for canary insertion."""

    pass
