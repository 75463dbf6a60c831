"""Environment variable binder: ``PREFIX_KEY__NESTED=value`` to a nested overlay."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from dotenv import dotenv_values, find_dotenv
from loguru import logger

from strata.core.constants import ENV_NESTING_SEPARATOR, ENVIRONMENT_VARIABLES
from strata.documents import parse_scalar


def bind(variables: Mapping[str, str | None], prefix: str) -> dict[str, Any]:
    """Collect ``{PREFIX}_`` variables into a nested dict.

    ``APP_DATABASE__HOST=db`` becomes ``{"database": {"host": "db"}}``.
    Values are read as YAML scalars, so ``120`` is an int and ``:warn`` an Atom.
    The environment selectors (``APP_ENV``, ``ENVIRONMENT``) are never bound.
    """
    head = f"{prefix.upper()}_"
    result: dict[str, Any] = {}
    for var in sorted(variables):
        raw = variables[var]
        if raw is None or not var.upper().startswith(head):
            continue
        if var.upper() in ENVIRONMENT_VARIABLES:
            continue
        path = [part.lower() for part in var[len(head) :].split(ENV_NESTING_SEPARATOR)]
        if not all(path):
            logger.debug("Ignoring malformed variable {}", var)
            continue
        node = result
        for part in path[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[path[-1]] = parse_scalar(raw)
    return result


class EnvSource:
    """Overlay from process environment variables (and a .env file when enabled)."""

    def __init__(self, *, use_dotenv: bool = True, dotenv_path: str | Path | None = None) -> None:
        self.use_dotenv = use_dotenv
        self.dotenv_path = dotenv_path

    def locate(self, name: str) -> Path | None:
        if not self.use_dotenv:
            return None
        found = self.dotenv_path or find_dotenv(usecwd=True)
        return Path(found) if found else None

    def variables(self, name: str) -> dict[str, str | None]:
        """Variables visible to the binder; process env wins over .env."""
        merged: dict[str, str | None] = {}
        dotenv_file = self.locate(name)
        if dotenv_file is not None and dotenv_file.is_file():
            merged.update(dotenv_values(dotenv_file))
        merged.update(os.environ)
        return merged

    def load(self, name: str, environment: str, **options: Any) -> dict[str, Any]:
        prefix = options.get("env_prefix") or name
        return bind(self.variables(name), str(prefix))
