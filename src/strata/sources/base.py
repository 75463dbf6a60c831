"""Source contract: one named layer of configuration."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from loguru import logger

from strata import environment
from strata.core.constants import DEFAULTS_KEY, STANDARD_ENVIRONMENTS
from strata.core.errors import ParseError
from strata.documents import load_quietly
from strata.merge import deep_merge
from strata.schema import registry


@runtime_checkable
class Source(Protocol):
    """A provider of one overlay mapping for a config name and environment."""

    def load(self, name: str, environment: str, **options: Any) -> dict[str, Any]: ...

    def locate(self, name: str) -> Path | None: ...


def known_environments(name: str) -> set[str]:
    """Standard environment names plus those the bundled defaults define for name."""
    return set(STANDARD_ENVIRONMENTS) | set(registry.valid_environments(name))


def for_environment(document: dict[str, Any], env: str, known: Iterable[str] = ()) -> dict[str, Any]:
    """Resolve a document for env.

    - ``defaults`` present: defaults with the env section merged on top
    - env key present: that section
    - other environment keys only: nothing applies to env
    - no environment keys: the whole document is a flat overlay

    Raises ParseError when ``defaults`` is not a mapping.
    """
    section = environment.select(document, env)
    if DEFAULTS_KEY in document:
        base = document.get(DEFAULTS_KEY) or {}
        if not isinstance(base, dict):
            raise ParseError(
                f"Defaults section must be a mapping, got {type(base).__name__}",
                code="invalid_defaults",
                details={"type": type(base).__name__},
            )
        return deep_merge(base, section or {})
    if section is not None:
        return section
    others = set(known) & {str(key) for key in document}
    if others:
        logger.debug("No {} section (found {}); skipping", env, sorted(others))
        return {}
    return document


class FileSource:
    """Shared file handling for sources backed by YAML files."""

    label = "config"

    def locate(self, name: str) -> Path | None:
        raise NotImplementedError

    def load(self, name: str, environment: str, **options: Any) -> dict[str, Any]:
        path = self.locate(name)
        if path is None:
            return {}
        return self.read(path, name, environment)

    def read(self, path: Path, name: str, env: str) -> dict[str, Any]:
        """Parse path and pick the part that applies to env."""
        document = load_quietly(path, label=self.label)
        try:
            return for_environment(document, env, known_environments(name))
        except ParseError as exc:
            logger.warning("Ignoring {} {}: {}", self.label, path, exc)
            return {}
