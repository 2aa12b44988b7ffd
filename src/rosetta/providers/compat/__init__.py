"""Best-effort fallback adapter for unknown message formats."""

from rosetta.providers.compat.adapter import CompatAdapter, detect_role

__all__ = ["CompatAdapter", "detect_role"]
