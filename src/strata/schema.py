"""Bundled defaults registry and schema extraction.

A bundled defaults document looks like::

    defaults:          # structure and base values for every environment
      database:
        host: localhost
        port: 5432
      log_level: :info
    development:       # overlays, one per environment
      database:
        name: app_development
    production:
      database:
        sslmode: require

The ``defaults`` section is the schema: its keys become config attributes
and its values decide how each attribute is coerced.
"""

from __future__ import annotations

import enum
import threading
from pathlib import Path
from typing import Any

from loguru import logger

from strata.core.constants import DEFAULTS_KEY
from strata.core.errors import ConfigurationError
from strata.documents import DocumentCache
from strata.merge import deep_merge


class RegistrationState(enum.IntEnum):
    """Lifecycle of a config identity. Only moves forward."""

    UNREGISTERED = 0
    REGISTERED = 1
    SCHEMA_LOADED = 2
    ATTRIBUTES_DECLARED = 3


class DefaultsRegistry:
    """Process-wide registry of defaults files keyed by config name."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._paths: dict[str, Path] = {}
        self._schemas: dict[str, dict[str, Any]] = {}
        self._states: dict[str, RegistrationState] = {}
        self.documents = DocumentCache()

    def register(self, name: str, path: str | Path) -> Path:
        """Register the defaults file for name. The file must exist."""
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(
                f"Defaults file not found: {path}",
                code="defaults_not_found",
                details={"name": name, "path": str(path)},
            )
        with self._lock:
            previous = self._paths.get(name)
            if previous == path:
                return path
            if previous is not None:
                logger.debug("Defaults for {} moved from {} to {}", name, previous, path)
                self.documents.invalidate(previous)
                self._schemas.pop(name, None)
            self._paths[name] = path
            self._advance(name, RegistrationState.REGISTERED)
        logger.debug("Registered defaults for {}: {}", name, path)
        return path

    def path_for(self, name: str) -> Path | None:
        with self._lock:
            return self._paths.get(name)

    def is_registered(self, name: str) -> bool:
        with self._lock:
            return name in self._paths

    def state(self, name: str) -> RegistrationState:
        with self._lock:
            return self._states.get(name, RegistrationState.UNREGISTERED)

    def _advance(self, name: str, state: RegistrationState) -> None:
        if self._states.get(name, RegistrationState.UNREGISTERED) < state:
            self._states[name] = state

    def mark_declared(self, name: str) -> None:
        """Record that attributes were declared from the schema."""
        with self._lock:
            if name not in self._paths:
                raise ConfigurationError(
                    f"Cannot declare attributes for {name}: no defaults registered",
                    code="defaults_not_registered",
                    details={"name": name},
                )
            self._advance(name, RegistrationState.ATTRIBUTES_DECLARED)

    def load_document(self, name: str) -> dict[str, Any]:
        """Whole parsed defaults document; {} when unregistered, missing or malformed."""
        path = self.path_for(name)
        if path is None:
            return {}
        return self.documents.load(path, label="bundled defaults")

    def schema(self, name: str) -> dict[str, Any]:
        """The ``defaults`` section. Cached after the first read."""
        with self._lock:
            if name in self._schemas:
                return self._schemas[name]
            document = self.load_document(name)
            schema = document.get(DEFAULTS_KEY) or {}
            if not isinstance(schema, dict):
                logger.warning("Defaults section for {} is not a mapping; ignoring it", name)
                schema = {}
            if name in self._paths:
                self._schemas[name] = schema
                self._advance(name, RegistrationState.SCHEMA_LOADED)
            return schema

    def valid_environments(self, name: str) -> list[str]:
        """Environment names defined in the defaults file, sorted."""
        document = self.load_document(name)
        return sorted(str(key) for key in document if key != DEFAULTS_KEY)

    def is_valid_environment(self, name: str, environment: str | None) -> bool:
        if not environment or str(environment) == DEFAULTS_KEY:
            return False
        return str(environment) in self.valid_environments(name)

    def merged_for_environment(self, name: str, environment: str) -> dict[str, Any]:
        """Schema with the environment overlay deep-merged on top."""
        document = self.load_document(name)
        if not document:
            return {}
        overlay = document.get(environment) or {}
        if not isinstance(overlay, dict):
            logger.warning("Environment section {} for {} is not a mapping; ignoring it", environment, name)
            overlay = {}
        return deep_merge(self.schema(name), overlay)

    def reset(self) -> None:
        """Forget every registration and cached document."""
        with self._lock:
            self._paths.clear()
            self._schemas.clear()
            self._states.clear()
            self.documents.clear()


registry = DefaultsRegistry()
