"""
Persisted state schemas -- the JSON contract for files under <target>/.claude/.

Keys are camelCase on disk (startedAt, issuesFound, ...) so that state
written by earlier releases of the tool still loads. Parse at the
boundary: a state file that doesn't match its schema is rejected with
CorruptStateError instead of leaking half-parsed dicts into the caller.
"""

import json
import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .errors import CorruptStateError, StateNotFoundError

logger = logging.getLogger(__name__)

StateModel = TypeVar("StateModel", bound=BaseModel)

PIPELINE_NAME = r"^[A-Za-z0-9][A-Za-z0-9_.-]*$"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_run_id(kind: str) -> str:
    """Session handle id, e.g. 'canary_20260101_120000_3f9a1c'."""
    return f"{kind}_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:6]}"


class _StateModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# CANARIES
# =============================================================================


class CanaryEntry(_StateModel):
    """One injected defect."""

    file: str
    line: int = Field(ge=0)
    category: str
    original: str = ""  # line that preceded the insertion point
    inserted: str
    import_added: bool = False  # insertion prepended the template's import


class CanaryManifest(_StateModel):
    phase: str
    timestamp: str = Field(default_factory=utc_now)
    run_id: str = ""
    canaries: list[CanaryEntry] = Field(default_factory=list)


# =============================================================================
# METRICS
# =============================================================================


class PhaseMetric(_StateModel):
    phase: str = Field(min_length=1)
    issues_found: int = Field(ge=0)
    issues_fixed: int = Field(ge=0)
    duration_ms: int = Field(ge=0)


class PipelineMetrics(_StateModel):
    pipeline: str = Field(pattern=PIPELINE_NAME)  # becomes part of the archive file name
    target: str
    started_at: str = Field(default_factory=utc_now)
    completed_at: str | None = None
    run_id: str = ""
    phases: list[PhaseMetric] = Field(default_factory=list)

    @property
    def total_found(self) -> int:
        return sum(p.issues_found for p in self.phases)

    @property
    def total_fixed(self) -> int:
        return sum(p.issues_fixed for p in self.phases)


# =============================================================================
# PERSISTENCE
# =============================================================================


def load_state(path: Path, model: type[StateModel], what: str) -> StateModel:
    """Load and validate a state file. Missing -> StateNotFoundError."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise StateNotFoundError(f"No {what} found at {path}") from None
    except OSError as e:
        raise CorruptStateError(f"Cannot read {what} at {path}: {e}") from e

    try:
        return model.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        raise CorruptStateError(f"Malformed {what} at {path}: {e}") from e


def save_state(path: Path, state: BaseModel) -> None:
    """Write a state file (write to temp + rename so readers never see half a file)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f".{path.name}.tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(state.model_dump(by_alias=True, exclude_none=True), f, indent=2, ensure_ascii=False)
    os.replace(tmp, path)
    logger.debug(f"[State] Saved {path}")
