"""Strata exceptions."""

from __future__ import annotations


class StrataError(Exception):
    """Base for strata errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, object] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.original_error = original_error

    def __str__(self) -> str:
        return self.message


class ConfigurationError(StrataError):
    """Registration or construction failure."""


class InvalidSourceError(ConfigurationError):
    """Config constructed from a source of unsupported type."""


class KeyNotFoundError(StrataError, KeyError):
    """Section.fetch miss with no default."""


class ParseError(StrataError):
    """Malformed YAML document. Swallowed by best-effort sources."""
