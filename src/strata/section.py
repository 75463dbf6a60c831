"""Section: nested config container with dict-style and attribute-style access."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from copy import deepcopy
from typing import Any

from strata.core.errors import KeyNotFoundError
from strata.merge import deep_merge

_MISSING: Any = object()

Pair = tuple[str, Any]


def _key(key: Any) -> str:
    """Normalize a lookup key. Atom and str keys are equivalent."""
    return key if type(key) is str else str(key)


def _wrap(value: Any) -> Any:
    if isinstance(value, Section):
        return value
    if isinstance(value, Mapping):
        return Section(value)
    return deepcopy(value)


class Section(Mapping[str, Any]):
    """Config section with method-style access to nested keys.

    >>> section = Section({"database": {"host": "localhost", "port": 5432}})
    >>> section.database.host
    'localhost'
    >>> section["database"]["port"]
    5432
    >>> section.missing is None
    True

    Unknown keys read as None. Attributes that collide with a method name
    (``keys``, ``size``, ...) must be read with ``section["keys"]``.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[Any, Any] | None = None) -> None:
        object.__setattr__(self, "_data", {})
        for key, value in (data or {}).items():
            self._data[_key(key)] = _wrap(value)

    # -- dict-style access -------------------------------------------------

    def __getitem__(self, key: Any) -> Any:
        return self._data.get(_key(key))

    def __setitem__(self, key: Any, value: Any) -> None:
        self._data[_key(key)] = _wrap(value)

    def __delitem__(self, key: Any) -> None:
        del self._data[_key(key)]

    def __contains__(self, key: object) -> bool:
        return _key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: Any, default: Any = None) -> Any:
        return self._data.get(_key(key), default)

    def set(self, key: Any, value: Any) -> None:
        self[key] = value

    has_key = __contains__

    # -- attribute-style access --------------------------------------------

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails; private names stay errors
        if name.startswith("_"):
            raise AttributeError(name)
        return self._data.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            raise AttributeError(f"cannot set private attribute {name!r} on Section")
        self[name] = value

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._data))

    # -- lookups -----------------------------------------------------------

    def fetch(self, key: Any, default: Any = _MISSING, factory: Callable[[str], Any] | None = None) -> Any:
        """Value at key; else default; else factory(key); else KeyNotFoundError."""
        normalized = _key(key)
        if normalized in self._data:
            return self._data[normalized]
        if default is not _MISSING:
            return default
        if factory is not None:
            return factory(normalized)
        raise KeyNotFoundError(
            f"key not found: {normalized!r}",
            code="key_not_found",
            details={"key": normalized, "available": list(self._data)},
        )

    def dig(self, *keys: Any) -> Any:
        """Walk nested sections. None as soon as a step is missing or not a mapping."""
        current: Any = self
        for key in keys:
            if isinstance(current, Section):
                current = current.get(key)
            elif isinstance(current, Mapping):
                try:
                    current = current.get(key)
                except TypeError:
                    return None
            else:
                return None
            if current is None:
                return None
        return current

    def merge(self, other: Mapping[Any, Any] | None) -> Section:
        """New Section with other deep-merged on top. Neither side is modified."""
        return Section(deep_merge(self.to_dict(), other or {}))

    # -- enumeration -------------------------------------------------------

    @property
    def size(self) -> int:
        return len(self._data)

    @property
    def empty(self) -> bool:
        return not self._data

    def each(self) -> Iterator[Pair]:
        """Lazy (key, value) pairs in insertion order."""
        return iter(self._data.items())

    def map(self, fn: Callable[[str, Any], Any]) -> list[Any]:
        return [fn(key, value) for key, value in self.each()]

    def select(self, predicate: Callable[[str, Any], bool]) -> Section:
        return Section({key: value for key, value in self.each() if predicate(key, value)})

    def reject(self, predicate: Callable[[str, Any], bool]) -> Section:
        return self.select(lambda key, value: not predicate(key, value))

    def find(self, predicate: Callable[[str, Any], bool]) -> Pair | None:
        return next(((key, value) for key, value in self.each() if predicate(key, value)), None)

    def any(self, predicate: Callable[[str, Any], bool] | None = None) -> bool:
        if predicate is None:
            return bool(self._data)
        return self.find(predicate) is not None

    def all(self, predicate: Callable[[str, Any], bool]) -> bool:
        return self.find(lambda key, value: not predicate(key, value)) is None

    # -- conversion --------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Plain nested dicts. Lists and other values are copies."""
        return {
            key: value.to_dict() if isinstance(value, Section) else deepcopy(value) for key, value in self._data.items()
        }

    def copy(self) -> Section:
        return Section(self.to_dict())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Section):
            return self.to_dict() == other.to_dict()
        if isinstance(other, Mapping):
            return self.to_dict() == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __reduce__(self) -> tuple[type[Section], tuple[dict[str, Any]]]:
        return (Section, (self.to_dict(),))

    def __repr__(self) -> str:
        return f"Section({self.to_dict()!r})"
