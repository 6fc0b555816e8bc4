"""
Configuration management and loading.

Handles pipeline defaults and optional YAML configuration files.
"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from scp_guard.core.pipeline import ReportSelection
from scp_guard.storage.repository import DEFAULT_POLICY_FILE

DEFAULT_MODE = "Allow"
DEFAULT_REPORT_PATH = "./s3_usage.json"
DEFAULT_THRESHOLD = 10


@dataclass(frozen=True)
class PipelineConfig:
    """Settings for a single policy generation run.

    Mode and threshold are kept as given; the pipeline validates them so
    that a bad mode is reported before any file is read.
    """
    mode: str = DEFAULT_MODE
    report_path: str = DEFAULT_REPORT_PATH
    threshold: int = DEFAULT_THRESHOLD
    output_path: str = DEFAULT_POLICY_FILE
    report_selection: ReportSelection = ReportSelection.FIRST

    def with_overrides(self, **values: Optional[Any]) -> "PipelineConfig":
        """Return a copy with every non-None value applied."""
        changes = {k: v for k, v in values.items() if v is not None}
        return replace(self, **changes)


def load_pipeline_config(path: str) -> PipelineConfig:
    """Load and validate pipeline configuration from a YAML file.

    Keys left out of the file keep their defaults.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated PipelineConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Pipeline config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a mapping")

    allowed_keys = {'mode', 'report_path', 'threshold', 'output_path', 'report_selection'}
    unknown_keys = set(raw_config.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    values: Dict[str, Any] = {}
    for key in ('mode', 'report_path', 'output_path'):
        if key in raw_config:
            if not isinstance(raw_config[key], str):
                raise ValueError(f"'{key}' must be a string")
            values[key] = raw_config[key]

    if 'threshold' in raw_config:
        threshold = raw_config['threshold']
        if isinstance(threshold, bool) or not isinstance(threshold, int):
            raise ValueError("'threshold' must be an integer")
        values['threshold'] = threshold

    if 'report_selection' in raw_config:
        selection = raw_config['report_selection']
        if not isinstance(selection, str):
            raise ValueError("'report_selection' must be a string")
        try:
            values['report_selection'] = ReportSelection(selection.lower())
        except ValueError:
            valid = [s.value for s in ReportSelection]
            raise ValueError(f"'report_selection' must be one of: {valid}")

    return PipelineConfig(**values)
