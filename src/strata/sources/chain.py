"""Ordered chain of named sources, merged lowest to highest precedence."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from strata.core.errors import ConfigurationError
from strata.merge import deep_merge
from strata.sources.base import Source


@dataclass(frozen=True)
class ProviderEntry:
    """A registered source. Rank is its position in the chain."""

    name: str
    source: Source
    rank: int = 0


@dataclass(frozen=True)
class TraceRecord:
    """What one source contributed during a resolve."""

    source: str
    path: Path | None
    keys: tuple[str, ...]


@dataclass
class Trace:
    """Provenance of a resolved config, in merge order."""

    records: list[TraceRecord] = field(default_factory=list)

    def record(self, source: str, path: Path | None, data: dict[str, Any]) -> None:
        self.records.append(TraceRecord(source, path, tuple(str(key) for key in data)))

    def sources_for(self, key: str) -> list[str]:
        """Names of the sources that set a top-level key."""
        return [r.source for r in self.records if key in r.keys]

    def to_dict(self) -> dict[str, Any]:
        return {r.source: {"path": str(r.path) if r.path else None, "keys": list(r.keys)} for r in self.records}


class SourceChain:
    """Named sources in precedence order. Names are unique; re-adding one is a no-op."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._entries: list[tuple[str, Source]] = []

    def _index(self, name: str) -> int | None:
        for i, (entry_name, _) in enumerate(self._entries):
            if entry_name == name:
                return i
        return None

    def _anchor(self, anchor: str) -> int:
        index = self._index(anchor)
        if index is None:
            raise ConfigurationError(
                f"Unknown source {anchor!r}; registered: {self.names()}",
                code="unknown_anchor",
                details={"anchor": anchor},
            )
        return index

    def _insert(self, index: int, name: str, source: Source) -> bool:
        if self._index(name) is not None:
            logger.debug("Source {} already registered; skipping", name)
            return False
        self._entries.insert(index, (name, source))
        logger.debug("Registered source {} at rank {}", name, index)
        return True

    def append(self, name: str, source: Source) -> bool:
        """Add as highest precedence. Returns False if name was already registered."""
        with self._lock:
            return self._insert(len(self._entries), name, source)

    def prepend(self, name: str, source: Source) -> bool:
        with self._lock:
            return self._insert(0, name, source)

    def insert_before(self, anchor: str, name: str, source: Source) -> bool:
        with self._lock:
            return self._insert(self._anchor(anchor), name, source)

    def insert_after(self, anchor: str, name: str, source: Source) -> bool:
        with self._lock:
            return self._insert(self._anchor(anchor) + 1, name, source)

    def remove(self, name: str) -> bool:
        with self._lock:
            index = self._index(name)
            if index is None:
                return False
            del self._entries[index]
            return True

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()

    def names(self) -> list[str]:
        with self._lock:
            return [name for name, _ in self._entries]

    def entries(self) -> list[ProviderEntry]:
        with self._lock:
            return [ProviderEntry(name, source, rank) for rank, (name, source) in enumerate(self._entries)]

    def is_registered(self, name: str) -> bool:
        with self._lock:
            return self._index(name) is not None

    def rank(self, name: str) -> int | None:
        with self._lock:
            return self._index(name)

    def get(self, name: str) -> Source | None:
        with self._lock:
            index = self._index(name)
            return None if index is None else self._entries[index][1]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def resolve(self, name: str, environment: str, trace: Trace | None = None, **options: Any) -> dict[str, Any]:
        """Load every source for name and deep-merge the results in rank order."""
        with self._lock:
            entries = list(self._entries)

        result: dict[str, Any] = {}
        for source_name, source in entries:
            data = source.load(name, environment, **options) or {}
            if not isinstance(data, dict):
                raise ConfigurationError(
                    f"Source {source_name} returned {type(data).__name__}, expected a mapping",
                    code="invalid_source_data",
                    details={"source": source_name},
                )
            if trace is not None and data:
                _record(trace, source_name, source, name, data)
            result = deep_merge(result, data)
        return result


def _record(trace: Trace, source_name: str, source: Source, name: str, data: dict[str, Any]) -> None:
    """Trace a source's contribution. Failures here never block resolution."""
    try:
        trace.record(source_name, source.locate(name), data)
    except Exception as exc:
        logger.exception("Failed to trace source {}: {}", source_name, exc)
