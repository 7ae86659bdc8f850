"""LLM provider adapters."""

from shared.adapters.openrouter_adapter import OpenRouterAdapter

__all__ = ["OpenRouterAdapter"]
