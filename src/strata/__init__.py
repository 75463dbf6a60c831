"""strata: layered, schema-driven application configuration."""

from strata.atom import Atom
from strata.bootstrap import chain, is_setup, reset, setup
from strata.config import Config
from strata.core.errors import (
    ConfigurationError,
    InvalidSourceError,
    KeyNotFoundError,
    ParseError,
    StrataError,
)
from strata.merge import deep_merge, deep_merge_skip_none
from strata.schema import RegistrationState, registry
from strata.section import Section

__version__ = "0.1.0"

__all__ = [
    "Atom",
    "Config",
    "ConfigurationError",
    "InvalidSourceError",
    "KeyNotFoundError",
    "ParseError",
    "RegistrationState",
    "Section",
    "StrataError",
    "__version__",
    "chain",
    "deep_merge",
    "deep_merge_skip_none",
    "is_setup",
    "registry",
    "reset",
    "setup",
]

setup()
