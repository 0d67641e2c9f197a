"""
qualitygate - polyglot quality gate for multi-phase code review.

Layers:
  - Gate: language detection -> external linters -> pattern/proxy checks
  - Canaries: synthetic defects that a review phase must remove
  - Evidence: reviewer checklists cross-checked against mechanical counts
  - Votes: verdict disagreements across independent review phases
  - Metrics / Construction: phase stats and plan artifact verification
"""

from .models import GateResult, Language, LintResult, Violation

__version__ = "0.3.0"

__all__ = ["GateResult", "Language", "LintResult", "Violation", "__version__"]
