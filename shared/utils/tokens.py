"""Token counting and usage extraction."""

import functools
import logging
from typing import Optional, Tuple

import tiktoken

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=None)
def _encoding(name: str):
    return tiktoken.get_encoding(name)


def count_tokens(text: str, encoding_name: str = "cl100k_base") -> int:
    """
    Estimate tokens in text when the API does not report usage.

    Args:
        text: Text to count tokens for
        encoding_name: tiktoken encoding (cl100k_base fits most modern models)

    Returns:
        Number of tokens
    """
    if not text:
        return 0
    try:
        return len(_encoding(encoding_name).encode(text))
    except Exception as e:
        # Encodings are downloaded on first use; offline runs estimate from words
        logger.debug(f"tiktoken unavailable ({e}), estimating from word count")
        return int(len(text.split()) * 1.3)


def extract_token_usage(response_data: dict) -> Tuple[Optional[int], Optional[int], str]:
    """
    Extract token usage from an API response.

    Returns:
        (prompt_tokens, completion_tokens, method) where method is "API" when
        both counts were reported and "APPROXIMATE" otherwise
    """
    usage = response_data.get("usage") or {}

    prompt_tokens = usage.get("prompt_tokens")
    completion_tokens = usage.get("completion_tokens")

    if prompt_tokens is not None and completion_tokens is not None:
        return prompt_tokens, completion_tokens, "API"

    return None, None, "APPROXIMATE"


def extract_cost_info(response_data: dict) -> Tuple[Optional[float], Optional[float]]:
    """
    Extract cost information from an API response.

    Returns:
        (total_cost, upstream_cost) in USD, None when not reported
    """
    usage = response_data.get("usage") or {}

    # Total cost charged by OpenRouter
    total_cost = usage.get("cost")

    # Upstream cost (for BYOK requests)
    cost_details = usage.get("cost_details") or {}
    upstream_cost = cost_details.get("upstream_inference_cost")

    return total_cost, upstream_cost
