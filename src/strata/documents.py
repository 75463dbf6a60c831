"""YAML documents: atom-aware safe loader and a per-path parse cache."""

from __future__ import annotations

import re
import threading
from pathlib import Path
from typing import Any

import yaml
from cachetools import LRUCache
from loguru import logger

from strata.atom import Atom
from strata.core.errors import ParseError

_ATOM_TAG = "!atom"
_ATOM_RE = re.compile(r"^:[A-Za-z_][A-Za-z0-9_?!]*$")


class AtomLoader(yaml.SafeLoader):
    """SafeLoader that reads ``:name`` plain scalars and ``!atom name`` as Atom."""


def _construct_atom(loader: yaml.SafeLoader, node: yaml.Node) -> Atom:
    value = loader.construct_scalar(node)
    return Atom(value[1:] if value.startswith(":") else value)


AtomLoader.add_implicit_resolver(_ATOM_TAG, _ATOM_RE, [":"])
AtomLoader.add_constructor(_ATOM_TAG, _construct_atom)


def parse_text(text: str, *, origin: str = "<string>") -> dict[str, Any]:
    """Parse YAML text into a dict. Empty text is {}; a non-mapping root is a ParseError."""
    try:
        data = yaml.load(text, Loader=AtomLoader)  # noqa: S506 - SafeLoader subclass
    except yaml.YAMLError as exc:
        raise ParseError(
            f"Failed to parse {origin}: {exc}",
            code="yaml_error",
            details={"path": origin},
            original_error=exc,
        ) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ParseError(
            f"{origin} has invalid structure (expected mapping, got {type(data).__name__})",
            code="invalid_root",
            details={"path": origin, "type": type(data).__name__},
        )
    return data


def parse_file(path: str | Path) -> dict[str, Any]:
    """Read and parse a YAML file. Raises ParseError on malformed content."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        return parse_text(f.read(), origin=str(path))


def parse_scalar(text: str) -> Any:
    """Parse an env-var style value as a YAML scalar; raw text when it does not parse."""
    try:
        value = yaml.load(text, Loader=AtomLoader)  # noqa: S506
    except yaml.YAMLError:
        return text
    if value is None and text.strip() not in ("~", "null", "Null", "NULL"):
        return text
    if isinstance(value, (dict, list)) and not text.lstrip().startswith(("[", "{")):
        return text
    return value


def load_quietly(path: str | Path, *, label: str = "config") -> dict[str, Any]:
    """parse_file for best-effort sources: parse errors are logged and yield {}."""
    try:
        return parse_file(path)
    except ParseError as exc:
        logger.warning("Failed to parse {} {}: {}", label, path, exc.original_error or exc)
        return {}


class DocumentCache:
    """Parsed documents keyed by resolved path. Each file is parsed once."""

    def __init__(self, maxsize: int = 128) -> None:
        self._cache: LRUCache[Path, dict[str, Any]] = LRUCache(maxsize=maxsize)
        self._lock = threading.RLock()

    def load(self, path: str | Path, *, label: str = "document") -> dict[str, Any]:
        key = Path(path).resolve()
        with self._lock:
            if key in self._cache:
                return self._cache[key]
            if not key.exists():
                logger.debug("Document not found: {}", key)
                return {}
            data = load_quietly(key, label=label)
            self._cache[key] = data
            return data

    def invalidate(self, path: str | Path) -> None:
        with self._lock:
            self._cache.pop(Path(path).resolve(), None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        with self._lock:
            return Path(path).resolve() in self._cache
