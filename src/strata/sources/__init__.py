"""Configuration sources and the chain that orders them."""

from strata.sources.base import FileSource, Source, for_environment
from strata.sources.chain import ProviderEntry, SourceChain, Trace, TraceRecord
from strata.sources.defaults import BundledDefaultsSource
from strata.sources.env import EnvSource, bind
from strata.sources.project import ProjectSource
from strata.sources.user import UserSource, config_dirs, find_config_file

__all__ = [
    "BundledDefaultsSource",
    "EnvSource",
    "FileSource",
    "ProjectSource",
    "ProviderEntry",
    "Source",
    "SourceChain",
    "Trace",
    "TraceRecord",
    "UserSource",
    "bind",
    "config_dirs",
    "find_config_file",
    "for_environment",
]
