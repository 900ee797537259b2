"""
KmerTally v0.1.0

Configuration schema for KmerTally.

Defines all available run parameters with defaults and validation.

Author: KmerTally Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy
import logging
from typing import Dict, Any, Optional, List
from pathlib import Path
import yaml

from ..counting.engine import (
    DEFAULT_RESERVE,
    EXECUTOR_CHOICES,
    PARSER_CHOICES,
    RunConfig,
)
from ..counting.partitioner import DEFAULT_UNIT_SIZE


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

TEMPLATES = ['default', 'count-only', 'threaded', 'low-memory']


# Default configuration values
DEFAULT_CONFIG = {
    # ========================================================================
    # Counting
    # ========================================================================
    'counting': {
        'reserve': DEFAULT_RESERVE,  # Distinct k-mer capacity hint
        'only_count': False,  # Skip distinct k-mer tracking
        'unit_size': DEFAULT_UNIT_SIZE,  # Lines (or records) per work unit
        'parser': 'lines',  # 'lines' or 'biopython'
    },

    # ========================================================================
    # Hardware Settings
    # ========================================================================
    'hardware': {
        'threads': 0,  # 0 = auto-detect from system
        'executor': 'process',  # 'process' or 'thread'
    },

    # ========================================================================
    # Output
    # ========================================================================
    'output': {
        'json': None,  # Optional JSON report path
        'logging': {
            'level': 'WARNING',
        },
    },
}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Path to YAML config file (None = use defaults)

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config_path does not exist
        ConfigValidationError: If the file is not valid YAML
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path) as f:
                user_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in config file {config_path}: {e}")

        if user_config:
            if not isinstance(user_config, dict):
                raise ConfigValidationError(
                    f"Config file {config_path} must contain a mapping at the top level"
                )
            # Deep merge user config into defaults
            config = _deep_merge(config, user_config)

    return config


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def save_config_template(output_path: Path, template: str = 'default'):
    """
    Save a configuration template to file.

    Args:
        output_path: Output file path
        template: Template type ('default', 'count-only', 'threaded', 'low-memory')
    """
    if template not in TEMPLATES:
        raise ValueError(f"Unknown template: {template}")

    config = copy.deepcopy(DEFAULT_CONFIG)

    # Customize for specific templates
    if template == 'count-only':
        config['counting']['only_count'] = True

    elif template == 'threaded':
        config['hardware']['executor'] = 'thread'

    elif template == 'low-memory':
        config['counting']['only_count'] = True
        config['counting']['unit_size'] = 100
        config['hardware']['threads'] = 1

    with open(output_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    counting = config.get('counting', {})
    hardware = config.get('hardware', {})
    output = config.get('output', {})

    # Sections replaced by scalars in the user file
    for name, section in (('counting', counting), ('hardware', hardware), ('output', output)):
        if not isinstance(section, dict):
            errors.append(f"Invalid {name}: {section!r} (must be a mapping)")
    if isinstance(output, dict) and not isinstance(output.get('logging', {}), dict):
        errors.append(f"Invalid output.logging: {output.get('logging')!r} (must be a mapping)")
    if errors:
        return errors

    reserve = counting.get('reserve')
    if not _is_int(reserve) or reserve < 0:
        errors.append(f"Invalid counting.reserve: {reserve!r} (must be a non-negative integer)")

    if not isinstance(counting.get('only_count'), bool):
        errors.append(f"Invalid counting.only_count: {counting.get('only_count')!r} (must be true/false)")

    unit_size = counting.get('unit_size')
    if not _is_int(unit_size) or unit_size < 1:
        errors.append(f"Invalid counting.unit_size: {unit_size!r} (must be a positive integer)")

    if counting.get('parser') not in PARSER_CHOICES:
        errors.append(f"Invalid counting.parser: {counting.get('parser')!r} "
                      f"(choose from {', '.join(PARSER_CHOICES)})")

    threads = hardware.get('threads')
    if not _is_int(threads) or threads < 0:
        errors.append(f"Invalid hardware.threads: {threads!r} (must be a non-negative integer)")

    if hardware.get('executor') not in EXECUTOR_CHOICES:
        errors.append(f"Invalid hardware.executor: {hardware.get('executor')!r} "
                      f"(choose from {', '.join(EXECUTOR_CHOICES)})")

    level = output.get('logging', {}).get('level')
    if level not in LOG_LEVELS:
        errors.append(f"Invalid output.logging.level: {level!r}")

    return errors


def build_run_config(config: Dict[str, Any], k: int, **overrides) -> RunConfig:
    """
    Turn a configuration dictionary into a RunConfig.

    Args:
        config: Configuration (defaults merged with user values)
        k: K-mer size
        **overrides: Explicit values (e.g. from the command line); None
            values fall back to the configuration

    Returns:
        Validated RunConfig

    Raises:
        ConfigValidationError: If the configuration is invalid
    """
    errors = validate_config(config)
    if errors:
        raise ConfigValidationError("; ".join(errors))

    counting = config['counting']
    hardware = config['hardware']

    values = {
        'only_count': counting['only_count'],
        'reserve': counting['reserve'],
        'max_threads': hardware['threads'],
        'unit_size': counting['unit_size'],
        'parser': counting['parser'],
        'executor': hardware['executor'],
    }
    for key, value in overrides.items():
        if value is not None:
            values[key] = value

    logging.getLogger(__name__).debug("Run configuration: k=%d %s", k, values)

    try:
        return RunConfig(k=k, **values)
    except ValueError as e:
        raise ConfigValidationError(str(e))
