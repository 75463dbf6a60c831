"""Deep-merge of nested mappings."""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import Any


def _plain(value: Any) -> Any:
    """Deep copy with every mapping (Section included) turned into a dict."""
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    return deepcopy(value)


def _merge(base: Mapping[str, Any], overlay: Mapping[str, Any], *, skip_none: bool) -> dict[str, Any]:
    if not isinstance(base, Mapping) or not isinstance(overlay, Mapping):
        raise TypeError(
            f"deep merge needs two mappings, got {type(base).__name__} and {type(overlay).__name__}"
        )
    result = _plain(base)
    for key, value in overlay.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            result[key] = _merge(current, value, skip_none=skip_none)
        elif value is None and skip_none and key in result:
            continue
        else:
            result[key] = _plain(value)
    return result


def deep_merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge overlay onto base. Overlay wins on conflicts, None included.

    Neither input is mutated; the result shares no mutable state with them.
    """
    return _merge(base, overlay, skip_none=False)


def deep_merge_skip_none(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Like deep_merge, but an overlay None keeps the base value instead of erasing it.

    Used when coercing attributes onto schema defaults.
    """
    return _merge(base, overlay, skip_none=True)
