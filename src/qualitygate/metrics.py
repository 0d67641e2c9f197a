"""
Pipeline Metrics -- one active run per target, archived on completion.

Lifecycle:
  start  -> .claude/metrics/active-metrics.json
  record -> append one PhaseMetric per finished phase
  report -> stamp completedAt, archive as <pipeline>-<startedAt>.json,
            delete the active file

Trigger: start-metrics / record-metrics / report-metrics
Task Boundary: Bookkeeping only. Does NOT run phases.
"""

import logging
import uuid
from pathlib import Path

from pydantic import ValidationError

from .config import GateConfig
from .errors import QualityGateError, StateConflictError
from .state import PhaseMetric, PipelineMetrics, load_state, new_run_id, save_state, utc_now

logger = logging.getLogger(__name__)

ACTIVE_FILE = "active-metrics.json"


def archive_name(metrics: PipelineMetrics) -> str:
    stamp = metrics.started_at.replace(":", "-").replace(".", "-")
    return f"{metrics.pipeline}-{stamp}.json"


class MetricsSession:
    """
    Handle on the metrics run for one target.

    Usage:
        session = MetricsSession("./my-project")
        session.start("full-review")
        session.record("gemini", issues_found=4, issues_fixed=3, duration_ms=81000)
        metrics, archive = session.report()
    """

    def __init__(self, target: str | Path, config: GateConfig | None = None):
        self.target = Path(target)
        self.config = config or GateConfig()
        self.metrics_dir = self.config.metrics_dir(self.target.resolve())
        self.active_path = self.metrics_dir / ACTIVE_FILE

    def load(self) -> PipelineMetrics:
        return load_state(self.active_path, PipelineMetrics, "active metrics run")

    def start(self, pipeline: str) -> PipelineMetrics:
        if self.active_path.exists():
            raise StateConflictError(
                f"A metrics run is already active at {self.active_path}; report it before starting another"
            )
        try:
            metrics = PipelineMetrics(pipeline=pipeline, target=str(self.target), run_id=new_run_id("metrics"))
        except ValidationError as e:
            raise QualityGateError(f"Invalid pipeline name: {e}") from e

        save_state(self.active_path, metrics)
        logger.info(f"[Metrics] Started '{pipeline}' ({metrics.run_id})")
        return metrics

    def record(self, phase: str, issues_found: int, issues_fixed: int, duration_ms: int) -> PhaseMetric:
        metrics = self.load()
        try:
            entry = PhaseMetric(
                phase=phase,
                issues_found=issues_found,
                issues_fixed=issues_fixed,
                duration_ms=duration_ms,
            )
        except ValidationError as e:
            raise QualityGateError(f"Invalid phase metric: {e}") from e

        metrics.phases.append(entry)
        save_state(self.active_path, metrics)
        logger.info(f"[Metrics] Recorded '{phase}': {issues_found} found, {issues_fixed} fixed ({duration_ms}ms)")
        return entry

    def report(self) -> tuple[PipelineMetrics, Path]:
        """Complete the active run. Returns the final metrics and the archive path."""
        metrics = self.load()
        metrics.completed_at = utc_now()

        archive = self.metrics_dir / archive_name(metrics)
        if archive.exists():
            suffix = metrics.run_id or uuid.uuid4().hex[:6]
            archive = archive.with_name(f"{archive.stem}-{suffix}.json")
            logger.warning(f"[Metrics] Archive name taken, writing {archive.name} instead")

        save_state(archive, metrics)
        self.active_path.unlink()
        logger.info(f"[Metrics] Archived '{metrics.pipeline}' to {archive}")
        return metrics, archive


def start_metrics(pipeline: str, target: str | Path, config: GateConfig | None = None) -> PipelineMetrics:
    return MetricsSession(target, config).start(pipeline)


def record_metrics(
    phase: str,
    issues_found: int,
    issues_fixed: int,
    duration_ms: int,
    target: str | Path = ".",
    config: GateConfig | None = None,
) -> PhaseMetric:
    return MetricsSession(target, config).record(phase, issues_found, issues_fixed, duration_ms)


def report_metrics(target: str | Path = ".", config: GateConfig | None = None) -> tuple[PipelineMetrics, Path]:
    return MetricsSession(target, config).report()
