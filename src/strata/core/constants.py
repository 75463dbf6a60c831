"""Reserved keys and well-known names."""

from __future__ import annotations

from typing import Final

DEFAULTS_KEY: Final = "defaults"

# Checked in order; first non-empty wins
ENVIRONMENT_VARIABLES: Final[tuple[str, ...]] = ("APP_ENV", "ENVIRONMENT")
DEFAULT_ENVIRONMENT: Final = "development"

XDG_CONFIG_HOME_VAR: Final = "XDG_CONFIG_HOME"
CONFIG_EXTENSIONS: Final[tuple[str, ...]] = (".yml", ".yaml")

ENV_NESTING_SEPARATOR: Final = "__"

# Built-in source names, lowest to highest precedence
BUNDLED_DEFAULTS: Final = "bundled_defaults"
USER: Final = "user"
PROJECT: Final = "project"
ENV: Final = "env"

# Top-level keys always read as environment sections in config files
STANDARD_ENVIRONMENTS: Final[frozenset[str]] = frozenset({"development", "test", "production"})
