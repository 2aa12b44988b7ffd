"""Vercel AI SDK format adapter."""

from rosetta.providers.vercel_ai.adapter import VercelAIAdapter, wrap_output

__all__ = ["VercelAIAdapter", "wrap_output"]
