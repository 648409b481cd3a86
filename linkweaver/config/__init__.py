"""
LinkWeaver v0.1.0

Configuration management for LinkWeaver.

Author: LinkWeaver Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from .parser import ConfigParser
from .schema import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    LinkageParameters,
    load_config,
    merge_config,
    save_config_template,
    validate_config,
)

__all__ = [
    "ConfigParser",
    "ConfigValidationError",
    "DEFAULT_CONFIG",
    "LinkageParameters",
    "load_config",
    "merge_config",
    "save_config_template",
    "validate_config",
]
