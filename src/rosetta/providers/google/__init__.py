"""Google Gemini format adapter."""

from rosetta.providers.google.adapter import GoogleAdapter

__all__ = ["GoogleAdapter"]
