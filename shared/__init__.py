"""Shared infrastructure for the benchmark games.

- controllog: Double-entry accounting SDK for structured logging
- adapters: OpenRouter API adapter for LLM calls
- utils: Common utilities (retry, timing, tokens, logging)
- prompt_manager: Markdown prompt templates with {{PLACEHOLDER}} substitution
"""

__version__ = "0.1.0"
