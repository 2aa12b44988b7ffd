"""Anthropic Messages format adapter."""

from rosetta.providers.anthropic.adapter import AnthropicAdapter

__all__ = ["AnthropicAdapter"]
