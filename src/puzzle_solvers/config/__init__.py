"""Config loading and validation for ``puzzles.toml`` plus ``PUZZLES_*`` overrides."""

from puzzle_solvers.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    effective_config,
    env_var_name,
    load_config,
)
from puzzle_solvers.config.schema import (
    FIELDS,
    ConfigField,
    ConfigSchemaVersion,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    apply_profile_overlay,
    assert_valid_config,
    default_config,
    merge_config,
    validate_config,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "FIELDS",
    "ConfigField",
    "ConfigLoadError",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "apply_profile_overlay",
    "assert_valid_config",
    "default_config",
    "effective_config",
    "env_var_name",
    "load_config",
    "merge_config",
    "validate_config",
]
