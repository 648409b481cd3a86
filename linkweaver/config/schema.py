"""
LinkWeaver v0.1.0

Configuration schema for LinkWeaver.

Defines all available configuration parameters with defaults and validation.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy
from dataclasses import dataclass
from typing import Dict, Any, Optional, List
from pathlib import Path
import yaml

from ..errors import LinkWeaverError


class ConfigValidationError(LinkWeaverError):
    """Raised when configuration validation fails."""
    pass


# Default configuration values
DEFAULT_CONFIG = {
    # ========================================================================
    # Linkage resolution
    # ========================================================================
    'linkage': {
        'max_distance': 4000,  # How far from a contig end a read may map (bp)
        'min_links': 3,  # Links needed to call a join
        'mean_insert_size': None,  # Required; used for gap estimates
    },

    # ========================================================================
    # Scaffold reconstruction
    # ========================================================================
    'scaffold': {
        'default_gap_length': 25,  # Used when a join has no gap estimate
        'use_estimated_gaps': True,
        'fail_on_cycles': False,  # Report circular components instead of failing
    },

    # ========================================================================
    # End overlap check
    # ========================================================================
    'overlap': {
        'probe_length': 100,
        'blastn': 'blastn',
    },

    # ========================================================================
    # Runtime
    # ========================================================================
    'runtime': {
        'threads': 1,  # Processes used to resolve contig pairs
    },

    # ========================================================================
    # Output
    # ========================================================================
    'output': {
        'write_reports': True,  # <links>.filtered_links.csv / .error_links.csv
        'render_graph': False,  # PNG/SVG via Graphviz neato, if installed
        'logging': {
            'level': 'INFO',  # 'DEBUG', 'INFO', 'WARNING', 'ERROR'
            'log_file': None,
        },
    },
}


@dataclass
class LinkageParameters:
    """Validated numeric parameters for one run."""
    max_distance: int
    min_links: int
    mean_insert_size: int
    default_gap_length: int = 25
    use_estimated_gaps: bool = True
    fail_on_cycles: bool = False
    overlap_probe_length: int = 100
    threads: int = 1

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'LinkageParameters':
        """
        Build parameters from a configuration dictionary.

        Raises:
            ConfigValidationError: If the configuration is invalid
        """
        errors = validate_config(config, require_insert_size=True)
        if errors:
            raise ConfigValidationError('; '.join(errors))
        return cls(
            max_distance=int(config['linkage']['max_distance']),
            min_links=int(config['linkage']['min_links']),
            mean_insert_size=int(config['linkage']['mean_insert_size']),
            default_gap_length=int(config['scaffold']['default_gap_length']),
            use_estimated_gaps=bool(config['scaffold']['use_estimated_gaps']),
            fail_on_cycles=bool(config['scaffold']['fail_on_cycles']),
            overlap_probe_length=int(config['overlap']['probe_length']),
            threads=int(config['runtime']['threads']),
        )


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Path to YAML config file (None = use defaults)

    Returns:
        Configuration dictionary

    Raises:
        ConfigValidationError: If the file or one of its sections is not a mapping
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                user_config = yaml.safe_load(f) or {}
            if not isinstance(user_config, dict):
                raise ConfigValidationError(f"Config file {config_path} must contain a mapping")
            config = merge_config(config, user_config)

    return config


def merge_config(base: Dict, override: Dict, _prefix: str = '') -> Dict:
    """
    Merge ``override`` into a copy of ``base``, section by section.

    A section that is a mapping in ``base`` (e.g. ``linkage``) must stay one.

    Raises:
        ConfigValidationError: If ``override`` replaces a section with a non-mapping
    """
    merged = dict(base)
    for key, value in override.items():
        name = f"{_prefix}{key}"
        if isinstance(merged.get(key), dict):
            if not isinstance(value, dict):
                raise ConfigValidationError(
                    f"Config section '{name}' must be a mapping, got {value!r}"
                )
            merged[key] = merge_config(merged[key], value, f"{name}.")
        else:
            merged[key] = value
    return merged


def save_config_template(output_path: Path, template: str = 'default'):
    """
    Save a configuration template to file.

    Args:
        output_path: Output file path
        template: Template type ('default', 'strict', 'permissive')
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    # Customize for specific templates
    if template == 'strict':
        config['linkage']['min_links'] = 10
        config['scaffold']['fail_on_cycles'] = True

    elif template == 'permissive':
        config['linkage']['min_links'] = 1
        config['linkage']['max_distance'] = 10000

    with open(output_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any], require_insert_size: bool = False) -> List[str]:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration to validate
        require_insert_size: Treat a missing mean insert size as an error

    Returns:
        List of validation errors (empty if valid)
    """
    errors = [
        f"Config section '{name}' must be a mapping, got {config.get(name)!r}"
        for name in DEFAULT_CONFIG
        if name in config and not isinstance(config[name], dict)
    ]
    output = config.get('output', {})
    if isinstance(output, dict) and not isinstance(output.get('logging', {}), dict):
        errors.append("Config section 'output.logging' must be a mapping")
    if errors:
        return errors

    linkage = config.get('linkage', {})
    max_distance = linkage.get('max_distance')
    if not _is_int(max_distance) or max_distance <= 0:
        errors.append(f"linkage.max_distance must be a positive integer, got {max_distance!r}")

    min_links = linkage.get('min_links')
    if not _is_int(min_links) or min_links < 0:
        errors.append(f"linkage.min_links must be a non-negative integer, got {min_links!r}")

    insert_size = linkage.get('mean_insert_size')
    if insert_size is None:
        if require_insert_size:
            errors.append("linkage.mean_insert_size is required")
    elif not _is_int(insert_size) or insert_size < 0:
        errors.append(
            f"linkage.mean_insert_size must be a non-negative integer, got {insert_size!r}"
        )

    gap = config.get('scaffold', {}).get('default_gap_length')
    if not _is_int(gap) or gap < 0:
        errors.append(f"scaffold.default_gap_length must be a non-negative integer, got {gap!r}")

    overlap_length = config.get('overlap', {}).get('probe_length')
    if not _is_int(overlap_length) or overlap_length <= 0:
        errors.append(f"overlap.probe_length must be a positive integer, got {overlap_length!r}")

    threads = config.get('runtime', {}).get('threads')
    if not _is_int(threads) or threads < 1:
        errors.append(f"runtime.threads must be at least 1, got {threads!r}")

    level = config.get('output', {}).get('logging', {}).get('level', 'INFO')
    if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR'):
        errors.append(f"Invalid logging level: {level}")

    return errors
