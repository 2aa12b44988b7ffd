"""Format adapters: one per supported vendor message format."""

from rosetta.providers.base import (
    FromCanonicalResult,
    SourceAdapter,
    TargetAdapter,
    ToCanonicalResult,
)
from rosetta.providers.registry import AdapterRegistry, Provider, default_registry, get_adapter

__all__ = [
    "AdapterRegistry",
    "FromCanonicalResult",
    "Provider",
    "SourceAdapter",
    "TargetAdapter",
    "ToCanonicalResult",
    "default_registry",
    "get_adapter",
]
