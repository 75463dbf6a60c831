"""Per-user config file in platform-standard locations."""

from __future__ import annotations

import os
import sys
from pathlib import Path

from strata.core.constants import CONFIG_EXTENSIONS, XDG_CONFIG_HOME_VAR
from strata.sources.base import FileSource


def _is_macos() -> bool:
    return sys.platform == "darwin"


def config_dirs(name: str) -> list[Path]:
    """Candidate directories for name, lowest to highest precedence.

    1. ``~/Library/Application Support/{name}`` (macOS only)
    2. ``~/.config/{name}`` (XDG default)
    3. ``$XDG_CONFIG_HOME/{name}`` (when set)
    """
    dirs: list[Path] = []
    if _is_macos():
        app_support = Path("~/Library/Application Support").expanduser() / name
        if app_support.parent.is_dir():
            dirs.append(app_support)

    xdg_default = Path("~/.config").expanduser() / name
    dirs.append(xdg_default)

    xdg_home = os.environ.get(XDG_CONFIG_HOME_VAR, "").strip()
    if xdg_home:
        override = Path(xdg_home).expanduser() / name
        if override != xdg_default:
            dirs.append(override)
    return dirs


def find_config_file(name: str) -> Path | None:
    """First existing ``{name}.yml`` scanning from highest to lowest precedence."""
    for directory in reversed(config_dirs(name)):
        for ext in CONFIG_EXTENSIONS:
            candidate = directory / f"{name}{ext}"
            if candidate.is_file():
                return candidate
    return None


class UserSource(FileSource):
    """User-global config, e.g. ``~/.config/myapp/myapp.yml``.

    The file may hold environment sections or be a flat mapping.
    """

    label = "user config"

    def locate(self, name: str) -> Path | None:
        return find_config_file(name)
