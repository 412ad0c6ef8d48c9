"""
Monitor Configuration

Loads the TOML configuration file and validates it once per run. Every value
is constant for a timeframe; an inconsistent configuration is fatal before
any record is processed.

Example config.toml:

    [timing]
    bc_duration_ps = 24950.79
    max_bunches_per_orbit = 3564
    half_bc_offset_ps = 5000.0

    [clustering]
    gap_threshold_ps = 100000.0

    [matching]
    match_window_bc = 8
    max_consensus_uncertainty_ps = 150.0

    [estimator]
    max_momentum = 2.0
    record_resolution_ps = 120.0
    outlier_sigma = 3.0
    hypotheses = ["pion", "kaon", "proton"]

    [selection]
    min_pt = 0.1
    max_abs_eta = 0.8
    min_n_clusters = 40

    [output]
    output_dir = "/tmp/t0-monitor"
    write_json = true
"""

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
import logging

import toml

from .exceptions import ConfigurationError
from .timing import constants

logger = logging.getLogger(__name__)


@dataclass
class MonitorConfig:
    """All externally supplied parameters of the monitor."""
    # [timing]
    bc_duration_ps: float = constants.BC_DURATION_PS
    max_bunches_per_orbit: int = constants.MAX_BUNCHES_PER_ORBIT
    half_bc_offset_ps: float = constants.HALF_BC_OFFSET_PS

    # [clustering]
    gap_threshold_ps: float = constants.GAP_THRESHOLD_PS

    # [matching]
    match_window_bc: int = constants.MATCH_WINDOW_BC
    max_consensus_uncertainty_ps: float = constants.MAX_CONSENSUS_UNCERTAINTY_PS

    # [estimator]
    max_momentum: float = constants.MAX_ESTIMATOR_MOMENTUM
    record_resolution_ps: float = constants.RECORD_RESOLUTION_PS
    outlier_sigma: float = constants.OUTLIER_SIGMA
    hypotheses: Tuple[str, ...] = constants.HYPOTHESES

    # [selection]
    min_pt: float = constants.MIN_PT
    max_abs_eta: float = constants.MAX_ABS_ETA
    min_n_clusters: int = constants.MIN_N_CLUSTERS

    # [output]
    output_dir: str = "/tmp/t0-monitor"
    write_json: bool = True

    SECTIONS = {
        'timing': ('bc_duration_ps', 'max_bunches_per_orbit', 'half_bc_offset_ps'),
        'clustering': ('gap_threshold_ps',),
        'matching': ('match_window_bc', 'max_consensus_uncertainty_ps'),
        'estimator': ('max_momentum', 'record_resolution_ps', 'outlier_sigma', 'hypotheses'),
        'selection': ('min_pt', 'max_abs_eta', 'min_n_clusters'),
        'output': ('output_dir', 'write_json'),
    }

    # Selection cuts may also be None (cut disabled)
    NUMERIC_FIELDS = (
        'bc_duration_ps', 'max_bunches_per_orbit', 'half_bc_offset_ps', 'gap_threshold_ps',
        'match_window_bc', 'max_consensus_uncertainty_ps', 'max_momentum',
        'record_resolution_ps', 'outlier_sigma',
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonitorConfig":
        """
        Build a config from a parsed TOML mapping.

        Missing sections or keys keep their defaults; unknown keys are ignored.
        Values are converted to the field's type.

        Raises:
            ConfigurationError: a section is not a table or a value has the wrong type
        """
        kwargs: Dict[str, Any] = {}
        for section, keys in cls.SECTIONS.items():
            values = data.get(section, {})
            if not isinstance(values, dict):
                raise ConfigurationError(f"[{section}] must be a table, got {type(values).__name__}")
            for key in keys:
                if key in values:
                    kwargs[key] = cls._convert(section, key, values[key])

        return cls(**kwargs)

    @classmethod
    def _convert(cls, section: str, key: str, value: Any) -> Any:
        kind = cls.__dataclass_fields__[key].type
        where = f"[{section}] {key}"

        if key == 'hypotheses':
            if not isinstance(value, (list, tuple)) or not all(isinstance(h, str) for h in value):
                raise ConfigurationError(f"{where} must be a list of strings, got {value!r}")
            return tuple(value)

        # bool is an int subclass, and bool("false") is True
        if kind is bool or isinstance(value, bool):
            if kind is not bool or not isinstance(value, bool):
                raise ConfigurationError(f"{where} has the wrong type: {value!r}")
            return value

        if kind is str and not isinstance(value, str):
            raise ConfigurationError(f"{where} must be a string, got {value!r}")
        if kind is int and isinstance(value, float) and not value.is_integer():
            raise ConfigurationError(f"{where} must be an integer, got {value!r}")

        try:
            return kind(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"{where} has the wrong type: {value!r} ({e})") from e

    def validate(self) -> "MonitorConfig":
        """
        Check parameter consistency.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigurationError: on the first inconsistent value
        """
        for name in self.NUMERIC_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")

        if self.bc_duration_ps <= 0:
            raise ConfigurationError(f"bc_duration_ps must be positive, got {self.bc_duration_ps}")
        if self.max_bunches_per_orbit <= 0:
            raise ConfigurationError(
                f"max_bunches_per_orbit must be positive, got {self.max_bunches_per_orbit}"
            )
        if self.half_bc_offset_ps < 0:
            raise ConfigurationError(f"half_bc_offset_ps must be >= 0, got {self.half_bc_offset_ps}")
        if self.gap_threshold_ps < 0:
            raise ConfigurationError(f"gap_threshold_ps must be >= 0, got {self.gap_threshold_ps}")
        if self.match_window_bc < 0:
            raise ConfigurationError(f"match_window_bc must be >= 0, got {self.match_window_bc}")
        if self.max_consensus_uncertainty_ps <= 0:
            raise ConfigurationError(
                f"max_consensus_uncertainty_ps must be positive, got {self.max_consensus_uncertainty_ps}"
            )
        if self.record_resolution_ps <= 0:
            raise ConfigurationError(
                f"record_resolution_ps must be positive, got {self.record_resolution_ps}"
            )
        if self.outlier_sigma <= 0:
            raise ConfigurationError(f"outlier_sigma must be positive, got {self.outlier_sigma}")
        if not self.hypotheses:
            raise ConfigurationError("at least one particle hypothesis is required")
        return self

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Nested mapping in TOML section layout."""
        flat = asdict(self)
        flat['hypotheses'] = list(self.hypotheses)
        return {
            section: {key: flat[key] for key in keys}
            for section, keys in self.SECTIONS.items()
        }


def load_config(config_path: Optional[str] = None) -> MonitorConfig:
    """Load and validate configuration from a TOML file (defaults if absent)."""
    if config_path and Path(config_path).exists():
        try:
            with open(config_path, 'r') as f:
                data = toml.load(f)
        except (OSError, toml.TomlDecodeError) as e:
            raise ConfigurationError(f"Cannot read {config_path}: {e}") from e
        logger.info(f"Loaded configuration from {config_path}")
    else:
        if config_path:
            logger.warning(f"Config file {config_path} not found - using defaults")
        data = {}

    return MonitorConfig.from_dict(data).validate()
