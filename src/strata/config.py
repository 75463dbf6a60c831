"""Config base class: resolves the source chain into typed attributes.

Declare a config by subclassing::

    class XyzzyConfig(Config, name="xyzzy", env_prefix="XYZZY", defaults=DEFAULTS_YML, auto=True):
        pass

    config = XyzzyConfig()
    config.database.host     # Section attribute
    config.log_level         # Atom("info")

Every key of the ``defaults`` section becomes an attribute. Mapping
defaults are coerced to Sections merged on top of those defaults, atom
defaults (``:info``) coerce incoming values to Atom, anything else passes
through unchanged.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, ClassVar

from loguru import logger

from strata import environment as environments
from strata.attributes import AttributeTable, Coercion, SectionCoercion, atom
from strata.bootstrap import chain
from strata.core.errors import ConfigurationError, InvalidSourceError, ParseError
from strata.documents import parse_file
from strata.merge import deep_merge, deep_merge_skip_none
from strata.schema import RegistrationState, registry
from strata.section import Section
from strata.sources.base import for_environment, known_environments
from strata.sources.chain import Trace

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _default_name(class_name: str) -> str:
    """``MyAppConfig`` -> ``my_app``."""
    stem = class_name[: -len("Config")] if class_name.endswith("Config") and class_name != "Config" else class_name
    return _CAMEL_RE.sub("_", stem).lower()


class Config:
    """Layered, schema-driven configuration."""

    config_name: ClassVar[str] = ""
    env_prefix: ClassVar[str] = ""
    _attributes: ClassVar[AttributeTable | None] = None
    _auto_configured: ClassVar[bool] = False

    def __init_subclass__(
        cls,
        *,
        name: str | None = None,
        env_prefix: str | None = None,
        defaults: str | Path | None = None,
        auto: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init_subclass__(**kwargs)
        cls.config_name = name or cls.__dict__.get("config_name") or _default_name(cls.__name__)
        cls.env_prefix = (env_prefix or cls.__dict__.get("env_prefix") or cls.config_name).upper()
        cls._attributes = None
        cls._auto_configured = False
        if defaults is not None:
            cls.register_defaults(defaults)
        if auto:
            cls.auto_configure()

    # ------------------------------------------------------------------
    # Class-level declaration
    # ------------------------------------------------------------------

    @classmethod
    def register_defaults(cls, path: str | Path) -> Path:
        """Register the bundled defaults file. Raises ConfigurationError if it does not exist.

        An auto-configured attribute table is rebuilt from the new schema when
        the file differs from the one it was built from.
        """
        previous = registry.path_for(cls.config_name)
        registered = registry.register(cls.config_name, path)
        if previous != registered and cls._auto_configured:
            logger.debug("Rebuilding attributes for {} from {}", cls.__name__, registered)
            cls._attributes = None
            cls._auto_configured = False
            cls.auto_configure()
        return registered

    @classmethod
    def defaults_path(cls) -> Path | None:
        return registry.path_for(cls.config_name)

    @classmethod
    def schema(cls) -> dict[str, Any]:
        return registry.schema(cls.config_name)

    @classmethod
    def state(cls) -> RegistrationState:
        return registry.state(cls.config_name)

    @classmethod
    def auto_configure(cls) -> AttributeTable:
        """Declare one attribute per schema key, with coercions derived from the defaults.

        Explicit ``declare()`` coercions made earlier are kept.
        """
        if not registry.is_registered(cls.config_name):
            raise ConfigurationError(
                f"defaults path must be registered before auto_configure on {cls.__name__} "
                f"(config name {cls.config_name!r})",
                code="defaults_not_registered",
                details={"config": cls.__name__, "name": cls.config_name},
            )
        if cls._auto_configured and cls._attributes is not None:
            return cls._attributes

        table = AttributeTable.from_schema(cls.schema())
        if not table:
            raise ConfigurationError(
                f"No attributes generated for {cls.__name__}: defaults in {cls.defaults_path()} are empty",
                code="empty_schema",
                details={"config": cls.__name__, "path": str(cls.defaults_path())},
            )
        if cls._attributes is not None:
            for attr in cls._attributes:
                table.declare(attr, cls._attributes.coercion(attr))
        cls._attributes = table
        cls._auto_configured = True
        registry.mark_declared(cls.config_name)
        logger.debug("Configured {} attributes for {}: {}", len(table), cls.__name__, table.names())
        return table

    @classmethod
    def declare(cls, *names: str, **coercions: Coercion | None) -> None:
        """Declare attributes by hand; keyword arguments attach a coercion."""
        if cls._attributes is None:
            cls._attributes = AttributeTable()
        for attr in names:
            cls._attributes.declare(attr)
        for attr, coercion in coercions.items():
            cls._attributes.declare(attr, coercion)

    @classmethod
    def attributes(cls) -> AttributeTable:
        """The attribute table.

        Built from the schema on first use when defaults are registered and
        nothing was declared by hand.
        """
        if cls._attributes is None and registry.is_registered(cls.config_name) and cls.schema():
            return cls.auto_configure()
        if cls._attributes is None:
            return AttributeTable()
        return cls._attributes

    @classmethod
    def section_coercion(cls, key: str) -> SectionCoercion:
        """Section coercion merged on top of the schema defaults for key."""
        defaults = cls.schema().get(key)
        return SectionCoercion(defaults if isinstance(defaults, Mapping) else {}, key=key)

    @staticmethod
    def to_atom() -> Coercion:
        return atom

    @classmethod
    def env(cls) -> str:
        return environments.current()

    @classmethod
    def valid_environments(cls) -> list[str]:
        return registry.valid_environments(cls.config_name)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def __init__(
        self,
        source: str | os.PathLike[str] | Mapping[str, Any] | None = None,
        *,
        environment: str | None = None,
    ) -> None:
        """Resolve sources into attributes.

        source: None, a path to a YAML file, or a mapping of overrides. It is
        applied on top of every other source.
        """
        cls = type(self)
        if not cls.config_name:
            raise ConfigurationError(
                "Config must be subclassed with a config name",
                code="unnamed_config",
            )
        env = environments.current(environment)
        trace = Trace()
        overrides = self._load_source(source, env)

        merged = chain.resolve(cls.config_name, env, trace, env_prefix=cls.env_prefix)
        if isinstance(source, Mapping):
            merged = deep_merge_skip_none(merged, overrides)
        elif overrides:
            merged = deep_merge(merged, overrides)
        if overrides:
            path = None if isinstance(source, Mapping) else Path(os.fspath(source))
            trace.record("constructor", path, overrides)

        table = cls.attributes()
        object.__setattr__(self, "_environment", env)
        object.__setattr__(self, "_table", table)
        object.__setattr__(self, "trace", trace)
        object.__setattr__(self, "_values", {attr: table.coerce(attr, merged.get(attr)) for attr in table})
        object.__setattr__(self, "_extras", {key: value for key, value in merged.items() if key not in table})

    def _load_source(self, source: Any, env: str) -> dict[str, Any]:
        if source is None:
            return {}
        if isinstance(source, Mapping):
            return dict(source)
        if isinstance(source, (str, os.PathLike)):
            return self._load_file(Path(os.fspath(source)), env)
        raise InvalidSourceError(
            f"Invalid source: expected str, PathLike, Mapping or None, got {type(source).__name__}",
            code="invalid_source",
            details={"type": type(source).__name__},
        )

    def _load_file(self, path: Path, env: str) -> dict[str, Any]:
        if not path.exists():
            raise ConfigurationError(
                f"Config file not found: {path}",
                code="file_not_found",
                details={"path": str(path)},
            )
        try:
            document = parse_file(path)
            return for_environment(document, env, known_environments(type(self).config_name))
        except ParseError as exc:
            raise ConfigurationError(
                f"Config file {path} could not be parsed: {exc}",
                code="invalid_file",
                details={"path": str(path)},
                original_error=exc,
            ) from exc

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def __getattr__(self, name: str) -> Any:
        if not name.startswith("_"):
            values = self.__dict__.get("_values", {})
            if name in values:
                return values[name]
        raise AttributeError(f"{type(self).__name__} has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        table = self.__dict__.get("_table")
        if table is not None and name in table:
            self._values[name] = table.coerce(name, value)
        else:
            object.__setattr__(self, name, value)

    def __getitem__(self, key: str) -> Any:
        key = str(key)
        if key in self._values:
            return self._values[key]
        return self._extras.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._values or key in self._extras

    def get(self, key: str, default: Any = None) -> Any:
        return self[key] if key in self else default

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._values))

    @property
    def extras(self) -> Section:
        """Merged keys that are not declared attributes."""
        return Section(self._extras)

    def attribute_names(self) -> list[str]:
        return list(self._values)

    def to_dict(self) -> dict[str, Any]:
        """Attributes and extras as plain nested dicts."""
        data = {key: value.to_dict() if isinstance(value, Section) else value for key, value in self._values.items()}
        for key, value in self._extras.items():
            data.setdefault(str(key), value)
        return data

    # ------------------------------------------------------------------
    # Environment helpers
    # ------------------------------------------------------------------

    @property
    def environment(self) -> str:
        return self._environment

    def is_development(self) -> bool:
        return self._environment == "development"

    def is_test(self) -> bool:
        return self._environment == "test"

    def is_production(self) -> bool:
        return self._environment == "production"

    def is_valid_environment(self) -> bool:
        return registry.is_valid_environment(type(self).config_name, self._environment)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.config_name} env={self._environment} attributes={self.attribute_names()}>"
