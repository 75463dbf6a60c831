"""Attribute tables: which keys a config exposes and how each is coerced."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any

from strata.atom import Atom, to_atom
from strata.core.errors import ConfigurationError
from strata.merge import deep_merge_skip_none
from strata.section import Section

Coercion = Callable[[Any], Any]


class SectionCoercion:
    """Wrap a mapping as a Section merged on top of the schema defaults for that key.

    A partial overlay (say one env var setting ``database.host``) keeps the
    sibling defaults. A None inside the overlay keeps the default too.
    """

    def __init__(self, defaults: Mapping[str, Any] | None = None, *, key: str | None = None) -> None:
        self.defaults = dict(defaults or {})
        self.key = key

    def __call__(self, value: Any) -> Section:
        if isinstance(value, Section):
            return value
        if value is None:
            value = {}
        if not isinstance(value, Mapping):
            raise ConfigurationError(
                f"Expected a mapping for section {self.key or '<section>'}, got {type(value).__name__}",
                code="invalid_section",
                details={"key": self.key, "type": type(value).__name__},
            )
        return Section(deep_merge_skip_none(self.defaults, value))

    def __repr__(self) -> str:
        return f"SectionCoercion(key={self.key!r})"


def section(defaults: Mapping[str, Any] | None = None, *, key: str | None = None) -> SectionCoercion:
    """Section coercion; without defaults it just wraps the mapping."""
    return SectionCoercion(defaults, key=key)


def atom(value: Any) -> Atom | None:
    return to_atom(value)


def coercion_for(key: str, default: Any) -> Coercion | None:
    """Coercion implied by a schema value: mapping -> Section, Atom -> Atom, else none."""
    if isinstance(default, Mapping):
        return SectionCoercion(default, key=key)
    if isinstance(default, Atom):
        return atom
    return None


class AttributeTable:
    """Ordered attribute names, each with an optional coercion."""

    def __init__(self) -> None:
        self._coercions: dict[str, Coercion | None] = {}

    @classmethod
    def from_schema(cls, schema: Mapping[str, Any]) -> AttributeTable:
        table = cls()
        for key, default in schema.items():
            table.declare(str(key), coercion_for(str(key), default))
        return table

    def declare(self, name: str, coercion: Coercion | None = None) -> None:
        """Add an attribute. A later coercion for a known name replaces the old one."""
        if coercion is not None or name not in self._coercions:
            self._coercions[name] = coercion

    def coerce(self, name: str, value: Any) -> Any:
        coercion = self._coercions.get(name)
        return value if coercion is None else coercion(value)

    def coercion(self, name: str) -> Coercion | None:
        return self._coercions.get(name)

    def names(self) -> list[str]:
        return list(self._coercions)

    def __contains__(self, name: object) -> bool:
        return name in self._coercions

    def __iter__(self) -> Iterator[str]:
        return iter(self._coercions)

    def __len__(self) -> int:
        return len(self._coercions)

    def __repr__(self) -> str:
        return f"AttributeTable({self._coercions!r})"
