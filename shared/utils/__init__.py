"""Shared utility modules.

- retry: Exponential backoff with HTTP 429 Retry-After support
- timing: Timer context manager for measuring operations
- tokens: Token counting and usage extraction
- logging: JSON-formatted logging utilities
"""

from .retry import retry_with_backoff
from .timing import Timer
from .tokens import count_tokens, extract_token_usage, extract_cost_info
from .logging import JSONFormatter, setup_logging, log_summary

__all__ = [
    "retry_with_backoff",
    "Timer",
    "count_tokens",
    "extract_token_usage",
    "extract_cost_info",
    "JSONFormatter",
    "setup_logging",
    "log_summary",
]
