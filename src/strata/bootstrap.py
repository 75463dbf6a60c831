"""Process-wide source chain and its setup/reset lifecycle.

Precedence, lowest to highest::

    bundled_defaults < user < project < env < constructor source

``project`` and ``env`` are always present. ``setup()`` slots the bundled
defaults and user sources in front of them and is safe to call repeatedly.
"""

from __future__ import annotations

import threading

from strata import environment
from strata.core.constants import BUNDLED_DEFAULTS, ENV, PROJECT, USER
from strata.schema import registry
from strata.sources import BundledDefaultsSource, EnvSource, ProjectSource, SourceChain, UserSource

chain = SourceChain()

_lock = threading.Lock()
_setup_complete = False


def _install_host_sources() -> None:
    chain.append(PROJECT, ProjectSource())
    chain.append(ENV, EnvSource())


def setup() -> None:
    """Register the bundled defaults and user sources. Idempotent."""
    global _setup_complete
    with _lock:
        if _setup_complete:
            return
        if not chain.is_registered(PROJECT):
            _install_host_sources()
        chain.insert_before(PROJECT, BUNDLED_DEFAULTS, BundledDefaultsSource())
        chain.insert_before(PROJECT, USER, UserSource())
        _setup_complete = True


def is_setup() -> bool:
    with _lock:
        return _setup_complete


def reset() -> None:
    """Drop every registration: sources, defaults files, environment override.

    Leaves the host sources in place; call ``setup()`` to restore the rest.
    Config classes keep the attribute tables they already built; register
    their defaults again to rebuild them.
    """
    global _setup_complete
    with _lock:
        chain.reset()
        _install_host_sources()
        registry.reset()
        environment.set_current(None)
        _setup_complete = False


_install_host_sources()
