"""Configuration Loading"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from posepipe.inference.action_classifier import RULESETS
from posepipe.inference.thresholds import ActionThresholds

logger = logging.getLogger(__name__)

_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass(frozen=True)
class PipelineConfig:
    alpha: float = 0.3  # smoothing responsiveness, higher = less smoothing
    mirror: bool = True
    ik_enabled: bool = False
    confidence_threshold: float = 0.5
    ruleset: str = 'full'
    width: int = 640
    height: int = 480
    thresholds: ActionThresholds = field(default_factory=ActionThresholds)

    def __post_init__(self):
        for name in ('mirror', 'ik_enabled'):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ValueError(f"{name} must be true or false, got {value!r}")
        if not 0.0 <= self.alpha <= 1.0:
            raise ValueError(f"alpha must be in [0, 1], got {self.alpha}")
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError(f"confidence_threshold must be in [0, 1], got {self.confidence_threshold}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Canvas size must be positive, got {self.width}x{self.height}")
        if self.ruleset not in RULESETS:
            raise ValueError(f"Unknown ruleset: {self.ruleset}")


@dataclass(frozen=True)
class LoggingConfig:
    log_dir: Optional[str] = 'results/logs'
    level: str = 'INFO'

    def __post_init__(self):
        if self.level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.level}")


@dataclass(frozen=True)
class AppConfig:
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _section(config: Dict[str, Any], name: str, allowed) -> Dict[str, Any]:
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    if allowed is not None:
        unknown = set(section) - set(allowed)
        if unknown:
            raise ValueError(f"Unknown keys in '{name}': {', '.join(sorted(unknown))}")
    return section


def config_from_dict(config: Optional[Dict[str, Any]]) -> AppConfig:
    """Build an AppConfig from a parsed YAML mapping."""
    config = config or {}
    unknown = set(config) - {'pipeline', 'canvas', 'thresholds', 'logging'}
    if unknown:
        raise ValueError(f"Unknown config sections: {', '.join(sorted(unknown))}")

    pipeline = _section(config, 'pipeline', ('alpha', 'mirror', 'ik_enabled', 'confidence_threshold', 'ruleset'))
    canvas = _section(config, 'canvas', ('width', 'height'))
    thresholds = _section(config, 'thresholds', None)
    log_section = _section(config, 'logging', ('log_dir', 'level'))

    pipeline_config = PipelineConfig(
        alpha=float(pipeline.get('alpha', 0.3)),
        mirror=pipeline.get('mirror', True),
        ik_enabled=pipeline.get('ik_enabled', False),
        confidence_threshold=float(pipeline.get('confidence_threshold', 0.5)),
        ruleset=str(pipeline.get('ruleset', 'full')),
        width=int(canvas.get('width', 640)),
        height=int(canvas.get('height', 480)),
        thresholds=ActionThresholds.from_dict(thresholds),
    )
    logging_config = LoggingConfig(
        log_dir=log_section.get('log_dir', 'results/logs'),
        level=str(log_section.get('level', 'INFO')),
    )
    return AppConfig(pipeline=pipeline_config, logging=logging_config)


def load_config(config_path: Union[str, Path]) -> AppConfig:
    """Load and validate a YAML config file."""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, 'r') as f:
        config = yaml.safe_load(f)

    logger.debug("Loaded config from %s", path)
    return config_from_dict(config)
