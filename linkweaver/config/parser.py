#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
LinkWeaver v0.1.0

Configuration parser: YAML config loading, merging, and validation.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy
import os
import re
import yaml
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .schema import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    LinkageParameters,
    merge_config,
    validate_config,
)

# ${NAME} or ${NAME:-fallback}
_ENV_REFERENCE = re.compile(r'\$\{(?P<name>[^}:]+)(?::-(?P<fallback>[^}]*))?\}')
_INTEGER = re.compile(r'-?\d+')


def expand_env_references(value: Any) -> Any:
    """
    Replace ${NAME} / ${NAME:-fallback} references in every string of ``value``.

    Unset variables without a fallback expand to ''. A string whose expansion
    is a bare integer becomes an int, so e.g. ``mean_insert_size: ${INSERT}``
    validates as a number.
    """
    if isinstance(value, dict):
        return {key: expand_env_references(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_references(item) for item in value]
    if not isinstance(value, str):
        return value

    expanded = _ENV_REFERENCE.sub(
        lambda m: os.environ.get(m.group('name'), m.group('fallback') or ''),
        value,
    )
    if expanded != value and _INTEGER.fullmatch(expanded):
        return int(expanded)
    return expanded


class ConfigParser:
    """
    Run configuration: defaults, then a YAML file, then command-line values.

    Values are looked up with dotted keys, e.g. ``parser.get('linkage.min_links')``.
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Args:
            config_file: YAML configuration file (defaults only if None)

        Raises:
            FileNotFoundError: ``config_file`` does not exist
            ConfigValidationError: The file is not YAML, or not a mapping of sections
        """
        self.config_file = Path(config_file) if config_file else None
        self._config: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)
        if self.config_file:
            self._config = merge_config(self._config, self._read_config_file())

    def _read_config_file(self) -> Dict[str, Any]:
        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        with open(self.config_file) as f:
            try:
                loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigValidationError(
                    f"Invalid YAML in config file {self.config_file}: {e}"
                ) from e

        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise ConfigValidationError(f"Config file {self.config_file} must contain a mapping")
        return expand_env_references(loaded)

    def merge_cli_overrides(self, overrides: Dict[str, Any]):
        """
        Apply command-line values given as {dotted key: value}.

        None means the option was not given and leaves the configured value.
        """
        for dotted, value in overrides.items():
            if value is None:
                continue
            *sections, key = dotted.split('.')
            target = self._config
            for section in sections:
                target = target.setdefault(section, {})
            target[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Value at a dotted key, or ``default`` if any part is missing."""
        node: Any = self._config
        for part in key.split('.'):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def to_dict(self) -> Dict[str, Any]:
        """Deep copy of the merged configuration."""
        return copy.deepcopy(self._config)

    def validate(self, require_insert_size: bool = False) -> bool:
        """
        Raises:
            ConfigValidationError: With every problem found, joined by '; '
        """
        errors = validate_config(self._config, require_insert_size=require_insert_size)
        if errors:
            raise ConfigValidationError('; '.join(errors))
        return True

    def parameters(self) -> LinkageParameters:
        """Validated run parameters (mean insert size required)."""
        return LinkageParameters.from_config(self._config)

    def __repr__(self) -> str:
        return f"ConfigParser(config_file={self.config_file})"

# LinkWeaver v0.1.0
# Any usage is subject to this software's license.
