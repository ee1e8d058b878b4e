"""
Configuration management for BoutMetrics.

Handles analysis options (bin ladder, light schedule, timestamp format) and
persistent user preferences (last input folder, last cohort labels).
"""

import os
import json
import numbers
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from .binning import DEFAULT_BIN_EDGES, DurationBinner
from .errors import ConfigurationError
from .experimental_day import (
    DEFAULT_DAY_BOUNDARY_HOUR, DEFAULT_TIMESTAMP_FORMAT, DayTable
)
from .phase import DEFAULT_DARK_START_HOUR, DEFAULT_LIGHT_START_HOUR, PhaseClassifier


DEFAULT_FILE_PATTERN = '*SB_2sec_*.csv'


@dataclass
class AnalysisConfig:
    """Options for one analysis run."""
    bin_edges: List[float] = field(default_factory=lambda: list(DEFAULT_BIN_EDGES))
    bin_labels: Optional[List[str]] = None
    light_start_hour: int = DEFAULT_LIGHT_START_HOUR
    dark_start_hour: int = DEFAULT_DARK_START_HOUR
    day_boundary_hour: int = DEFAULT_DAY_BOUNDARY_HOUR
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT
    file_pattern: str = DEFAULT_FILE_PATTERN

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisConfig':
        """
        Build from a plain dictionary (e.g. parsed JSON).

        Edges may be given as numbers or strings; 'inf' and null both mean
        infinity.

        Raises:
            ConfigurationError: On unknown keys or malformed values
        """
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")

        values = dict(data)
        if 'bin_edges' in values:
            values['bin_edges'] = parse_edges(values['bin_edges'])

        config = cls(**values)
        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        # JSON has no infinity literal in strict mode
        data['bin_edges'] = ['inf' if np.isinf(e) else e for e in self.bin_edges]
        return data

    def validate(self):
        """
        Check every option, raising on the first problem.

        Raises:
            ConfigurationError: Invalid bin edges/labels, hours or format
        """
        self.make_binner()
        self.make_phase_classifier()

        hour = self.day_boundary_hour
        if isinstance(hour, bool) or not isinstance(hour, numbers.Integral) or not 0 <= hour < 24:
            raise ConfigurationError(f"day_boundary_hour must be an integer in [0, 23], got {hour!r}")
        if not isinstance(self.timestamp_format, str) or not self.timestamp_format:
            raise ConfigurationError(f"timestamp_format must be a non-empty string, got {self.timestamp_format!r}")
        if not isinstance(self.file_pattern, str) or not self.file_pattern:
            raise ConfigurationError(f"file_pattern must be a non-empty string, got {self.file_pattern!r}")

    def make_binner(self) -> DurationBinner:
        return DurationBinner(self.bin_edges, self.bin_labels)

    def make_phase_classifier(self) -> PhaseClassifier:
        return PhaseClassifier(self.light_start_hour, self.dark_start_hour)

    def build_day_table(self, timestamps) -> DayTable:
        return DayTable.from_timestamps(timestamps, self.timestamp_format, self.day_boundary_hour)


def parse_edges(edges) -> List[float]:
    """
    Convert edge values to floats.

    Accepts a list or a comma-separated string; 'inf'/'Inf'/None -> infinity.
    """
    if isinstance(edges, str):
        edges = [part.strip() for part in edges.split(',') if part.strip()]

    result = []
    for value in edges:
        if value is None:
            result.append(float('inf'))
            continue
        try:
            result.append(float(value))
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid bin edge value: {value!r}") from None
    return result


def load_analysis_config(path) -> AnalysisConfig:
    """
    Load analysis options from a JSON file.

    Raises:
        ConfigurationError: If the file is missing, not valid JSON, or
            contains invalid options
    """
    path = Path(path)
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Config file not found: {path}") from None
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in config file {path}: {e}") from None

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")

    return AnalysisConfig.from_dict(data)


def save_analysis_config(config: AnalysisConfig, path):
    """Write analysis options to a JSON file."""
    with open(path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)


# === User preferences ===

def get_config_dir() -> Path:
    """
    Get the configuration directory for BoutMetrics.

    Returns:
        Path to config directory (created if doesn't exist)
    """
    override = os.environ.get('BOUTMETRICS_CONFIG_DIR')
    if override:
        config_dir = Path(override)
    elif os.name == 'nt':  # Windows
        config_dir = Path(os.environ.get('APPDATA', '~')).expanduser() / 'BoutMetrics'
    else:  # macOS/Linux
        config_dir = Path.home() / '.config' / 'boutmetrics'

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def _get_config_file() -> Path:
    """Get the path to the preferences file."""
    return get_config_dir() / 'config.json'


def _load_config() -> dict:
    """Load preferences from file."""
    config_file = _get_config_file()
    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (OSError, json.JSONDecodeError) as e:
            print(f"Warning: Could not read preferences: {e}")
            return {}
    return {}


def _save_config(config: dict):
    """Save preferences to file."""
    config_file = _get_config_file()
    try:
        with open(config_file, 'w') as f:
            json.dump(config, f, indent=2)
    except OSError as e:
        print(f"Warning: Could not save preferences: {e}")


def get_last_input_folder() -> str:
    """Get the folder used in the previous run ('' if none)."""
    config = _load_config()
    return config.get('last_input_folder', '')


def set_last_input_folder(folder: str):
    """Remember the input folder for the next run."""
    config = _load_config()
    config['last_input_folder'] = str(folder)
    _save_config(config)


def get_last_cohort_labels() -> List[str]:
    """Get the cohort labels used in the previous run (empty if none)."""
    config = _load_config()
    labels = config.get('last_cohort_labels', [])
    return [str(label) for label in labels] if isinstance(labels, list) else []


def set_last_cohort_labels(labels: List[str]):
    """Remember cohort labels for the next run."""
    config = _load_config()
    config['last_cohort_labels'] = list(labels)
    _save_config(config)
