"""Shared fixtures: isolated HOME/cwd, clean process-wide state, loguru capture."""

from __future__ import annotations

import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from loguru import logger

import strata

_ENV_VARS = ("APP_ENV", "ENVIRONMENT", "XDG_CONFIG_HOME")


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Fresh registry and chain, empty HOME, cwd in a temp dir, no environment selectors."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    strata.reset()
    strata.setup()
    yield tmp_path
    strata.reset()
    strata.setup()


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write dedented YAML to a path relative to tmp_path; returns the path."""

    def _write(relative: str, text: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def defaults_yml(write_yaml: Callable[[str, str], Path]) -> Path:
    """A bundled defaults file with three environments."""
    return write_yaml(
        "bundle/defaults.yml",
        """
        defaults:
          database:
            host: localhost
            port: 5432
            name: app
          api:
            base_url: https://api.example.com
            timeout: 30
          log_level: :info
          timeout: 60
          enabled: true
        development:
          database:
            name: app_dev
          log_level: :debug
        test:
          database:
            name: app_test
        production:
          database:
            host: prod-db.example.com
            name: app_prod
          log_level: :warn
        """,
    )


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Messages logged through loguru while the test runs."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG", format="{message}")
    yield messages
    logger.remove(handler_id)
