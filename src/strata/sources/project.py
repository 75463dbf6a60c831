"""Project-local config files under ./config."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from strata.core.constants import CONFIG_EXTENSIONS
from strata.merge import deep_merge
from strata.sources.base import FileSource


class ProjectSource(FileSource):
    """``config/{name}.yml`` with ``config/{name}.local.yml`` merged on top."""

    label = "project config"

    def __init__(self, directory: str | Path = "config") -> None:
        self.directory = Path(directory)

    def _find(self, stem: str) -> Path | None:
        for ext in CONFIG_EXTENSIONS:
            candidate = self.directory / f"{stem}{ext}"
            if candidate.is_file():
                return candidate
        return None

    def locate(self, name: str) -> Path | None:
        return self._find(name)

    def locate_local(self, name: str) -> Path | None:
        return self._find(f"{name}.local")

    def load(self, name: str, environment: str, **options: Any) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for path in (self.locate(name), self.locate_local(name)):
            if path is not None:
                result = deep_merge(result, self.read(path, name, environment))
        return result
