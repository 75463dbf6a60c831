"""Bundled defaults shipped with the application."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from loguru import logger

from strata.schema import DefaultsRegistry, registry


class BundledDefaultsSource:
    """Lowest layer: the registered defaults file, ``defaults`` merged with the env section."""

    def __init__(self, defaults: DefaultsRegistry | None = None) -> None:
        self._registry = defaults or registry

    def locate(self, name: str) -> Path | None:
        return self._registry.path_for(name)

    def load(self, name: str, environment: str, **options: Any) -> dict[str, Any]:
        if not self._registry.is_registered(name):
            logger.debug("No bundled defaults registered for {}", name)
            return {}
        return self._registry.merged_for_environment(name, environment)
