"""OpenAI Responses format adapter."""

from rosetta.providers.openai_responses.adapter import OpenAIResponsesAdapter

__all__ = ["OpenAIResponsesAdapter"]
