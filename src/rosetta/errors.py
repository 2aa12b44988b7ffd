"""Error types raised by the translation layer.

Schema mismatches are not wrapped: adapters let ``pydantic.ValidationError``
propagate unchanged so callers see the exact offending location.
"""

from __future__ import annotations


class TranslationError(Exception):
    """Base error for all translation failures."""


class ConfigurationError(TranslationError):
    """A translator was constructed or called with invalid configuration."""


class UnsupportedDirectionError(TranslationError):
    """An adapter lacks the conversion function needed for the requested hop."""

    def __init__(self, provider: str, direction: str) -> None:
        self.provider = provider
        self.direction = direction
        super().__init__(f'Translating {direction} provider "{provider}" is not supported')


class UnsupportedSourceError(UnsupportedDirectionError):
    """The source adapter cannot convert into the canonical form."""

    def __init__(self, provider: str) -> None:
        super().__init__(provider, "from")


class UnsupportedTargetError(UnsupportedDirectionError):
    """The target adapter cannot convert out of the canonical form."""

    def __init__(self, provider: str) -> None:
        super().__init__(provider, "to")


class SystemNotSupportedError(TranslationError):
    """A separate ``system`` argument was given to an adapter that has no system schema."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f'Provider "{provider}" does not support separated system instructions')
