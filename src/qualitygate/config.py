"""
Gate configuration -- thresholds, timeouts, and state-dir layout.

Every field can be overridden from the environment:
  QUALITY_GATE_<FIELD_NAME>=<value>   e.g. QUALITY_GATE_MAX_FILE_LINES=400

Values are validated at load time; a bad override is a fail-fast error,
not a silent fallback to the default.
"""

import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, model_validator

from .errors import QualityGateError

logger = logging.getLogger(__name__)

ENV_PREFIX = "QUALITY_GATE_"


class GateConfig(BaseModel):
    """Tunable knobs for one gate / canary / evidence / metrics invocation."""

    state_dir: str = Field(".claude", min_length=1, description="Hidden state dir inside the target")

    # Linter dispatch
    eslint_timeout_s: int = Field(120, gt=0)
    qodana_timeout_s: int = Field(600, gt=0)

    # Canaries
    canary_min: int = Field(3, ge=1)
    canary_max: int = Field(5, ge=1)

    # Pattern checks
    path_traversal_lookback: int = Field(5, ge=0)

    # Proxy checks
    max_file_lines: int = Field(300, gt=0)
    max_function_lines: int = Field(30, gt=0)
    max_params: int = Field(4, gt=0)
    max_exports: int = Field(10, gt=0)
    max_import_fan_in: int = Field(8, gt=0)
    max_class_methods: int = Field(10, gt=0)
    max_inheritance_depth: int = Field(2, gt=0)
    min_function_name_length: int = Field(4, gt=0)

    @model_validator(mode="after")
    def _check_canary_range(self) -> "GateConfig":
        if self.canary_min > self.canary_max:
            raise ValueError("canary_min must not exceed canary_max")
        return self

    # =========================================================================
    # STATE LAYOUT
    # =========================================================================

    def state_root(self, target: str | Path) -> Path:
        return Path(target) / self.state_dir

    def manifest_path(self, target: str | Path) -> Path:
        return self.state_root(target) / "canary-manifest.json"

    def evidence_dir(self, target: str | Path) -> Path:
        return self.state_root(target) / "evidence"

    def metrics_dir(self, target: str | Path) -> Path:
        return self.state_root(target) / "metrics"

    # =========================================================================
    # LOADING
    # =========================================================================

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "GateConfig":
        """Build a config from defaults plus QUALITY_GATE_* overrides."""
        environ = os.environ if environ is None else environ
        overrides = {}
        for name in cls.model_fields:
            key = f"{ENV_PREFIX}{name.upper()}"
            if key in environ:
                overrides[name] = environ[key]

        try:
            config = cls(**overrides)
        except ValidationError as e:
            raise QualityGateError(f"Invalid configuration override: {e}") from e

        if overrides:
            logger.debug(f"[Config] Overrides applied: {sorted(overrides)}")
        return config
