"""Canonical (GenAI) format adapter."""

from rosetta.providers.genai.adapter import GenAIAdapter, reinsert_system, render_message, render_part

__all__ = ["GenAIAdapter", "reinsert_system", "render_message", "render_part"]
