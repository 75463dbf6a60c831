"""Current environment selection."""

from __future__ import annotations

import os
import threading

from strata.core.constants import DEFAULT_ENVIRONMENT, ENVIRONMENT_VARIABLES

_lock = threading.Lock()
_current: str | None = None


def set_current(environment: str | None) -> None:
    """Process-wide override (wins over env vars). None clears it."""
    global _current
    with _lock:
        _current = str(environment) if environment else None


def current(explicit: str | None = None) -> str:
    """Resolve the environment: explicit > set_current > APP_ENV > ENVIRONMENT > development."""
    if explicit:
        return str(explicit)
    with _lock:
        if _current:
            return _current
    for var in ENVIRONMENT_VARIABLES:
        value = os.environ.get(var, "").strip()
        if value:
            return value
    return DEFAULT_ENVIRONMENT


def select(document: dict, environment: str) -> dict | None:
    """Sub-mapping of a document for environment; None when the document has no such key.

    Atom keys hash like strings, so ``:production:`` and ``production:`` both match.
    """
    if environment not in document:
        return None
    section = document[environment]
    return section if isinstance(section, dict) else {}
