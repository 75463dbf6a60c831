"""Atom: a tagged, symbol-like scalar."""

from __future__ import annotations

import sys
from typing import Any


class Atom(str):
    """Interned string tagged as a symbol (YAML ``:name`` or ``!atom name``).

    Compares and hashes like the plain string, so ``Atom("info") == "info"``.
    """

    __slots__ = ()

    def __new__(cls, value: Any) -> Atom:
        return super().__new__(cls, sys.intern(str(value)))

    def __repr__(self) -> str:
        return f"Atom({str.__repr__(self)})"

    def __reduce__(self) -> tuple[type[Atom], tuple[str]]:
        return (Atom, (str(self),))


def to_atom(value: Any) -> Atom | None:
    """Coerce a scalar to an Atom; None passes through."""
    if value is None or isinstance(value, Atom):
        return value
    text = str(value)
    # ``:warn`` from an env var or flat file means the same as ``warn``
    if text.startswith(":") and len(text) > 1:
        text = text[1:]
    return Atom(text)
