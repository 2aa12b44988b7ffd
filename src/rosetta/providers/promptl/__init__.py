"""Promptl format adapter."""

from rosetta.providers.promptl.adapter import PromptlAdapter

__all__ = ["PromptlAdapter"]
