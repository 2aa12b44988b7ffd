"""OpenAI Chat Completions format adapter."""

from rosetta.providers.openai_completions.adapter import OpenAICompletionsAdapter

__all__ = ["OpenAICompletionsAdapter"]
