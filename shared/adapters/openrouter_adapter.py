"""OpenRouter API adapter for LLM calls.

Function-based `chat()` for raw completions plus the stateful
`OpenRouterAdapter` used by players, which resolves CLI model names through
`shared/inputs/model_mappings.yml` and returns usage metadata with every call.
"""

import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import requests
import yaml

from ..utils.retry import retry_with_backoff
from ..utils.tokens import count_tokens, extract_cost_info, extract_token_usage

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"


def _get_shared_inputs_path() -> Path:
    """Get path to shared/inputs directory."""
    return Path(__file__).parent.parent / "inputs"


def _load_model_mappings(mappings_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load model mappings from YAML configuration file."""
    if mappings_file is None:
        mappings_file = _get_shared_inputs_path() / "model_mappings.yml"

    try:
        with open(mappings_file, "r") as f:
            data = yaml.safe_load(f) or {}
        return data.get("models", {})
    except FileNotFoundError:
        logger.warning(f"Model mappings file not found: {mappings_file}")
        return {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing model mappings {mappings_file}: {e}")
        return {}


def flatten_mappings(mappings: Dict[str, Any]) -> Dict[str, str]:
    """Flatten thinking/non_thinking sections into one name -> id dict."""
    flat: Dict[str, str] = {}
    for section in ("thinking", "non_thinking"):
        flat.update(mappings.get(section, {}) or {})
    for key, value in mappings.items():
        if key not in ("thinking", "non_thinking") and isinstance(value, str):
            flat[key] = value
    return flat


# Cache the thinking models set (loaded once)
_THINKING_MODELS: Optional[Set[str]] = None


def _get_thinking_models() -> Set[str]:
    global _THINKING_MODELS
    if _THINKING_MODELS is None:
        _THINKING_MODELS = set((_load_model_mappings().get("thinking") or {}).values())
    return _THINKING_MODELS


def _get_api_key() -> str:
    """Get OpenRouter API key from environment."""
    api_key = os.getenv("OPENROUTER_API_KEY")
    if not api_key:
        raise ValueError("OPENROUTER_API_KEY environment variable not set")
    return api_key


def resolve_model_id(model_name: str, mappings: Optional[Dict[str, Any]] = None) -> str:
    """Resolve a CLI model name (e.g. "gemini-flash") to an OpenRouter model ID.

    Unknown names are assumed to already be full model IDs.
    """
    if mappings is None:
        mappings = _load_model_mappings()
    return flatten_mappings(mappings).get(model_name, model_name)


@retry_with_backoff(max_retries=5, base_delay=2.0, exceptions=(requests.RequestException,))
def chat(messages: List[Dict], model: str, timeout: int = 300) -> Dict:
    """
    Call the OpenRouter Chat Completions API.

    Args:
        messages: List of message objects with 'role' and 'content'
        model: OpenRouter model ID (e.g., 'google/gemini-2.5-flash')
        timeout: Request timeout in seconds

    Returns:
        Raw API response JSON including usage and cost info

    Raises:
        requests.RequestException: On API errors (after retries)
    """
    headers = {
        "Authorization": f"Bearer {_get_api_key()}",
        "Content-Type": "application/json",
        "X-Title": "game-bench",
    }

    payload: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "usage": {"include": True},
    }

    if model in _get_thinking_models():
        # Thinking models reject max_tokens/temperature and run longer
        timeout = max(timeout, 600)
    else:
        payload.update({
            "max_tokens": 8000,
            "temperature": 0.0,
        })

    response = requests.post(OPENROUTER_URL, json=payload, headers=headers, timeout=timeout)

    if not response.ok:
        try:
            error_msg = response.json().get("error", {}).get("message", "")
        except ValueError:
            error_msg = ""
        if error_msg:
            logger.error(f"[OpenRouter] HTTP {response.status_code} for {model}: {error_msg}")

    response.raise_for_status()
    return response.json()


class OpenRouterAdapter:
    """Stateful adapter for calling models through OpenRouter."""

    def __init__(self, model_mappings_file: Optional[str] = None):
        self.api_key = _get_api_key()

        if model_mappings_file:
            self.model_mappings = _load_model_mappings(Path(model_mappings_file))
        else:
            self.model_mappings = _load_model_mappings()

        logger.info(f"Loaded model mappings with {len(self._flatten_mappings())} models")

    def _flatten_mappings(self) -> Dict[str, str]:
        return flatten_mappings(self.model_mappings)

    def resolve_model(self, model_name: str) -> str:
        """Resolve CLI model name to OpenRouter model ID."""
        return self._flatten_mappings().get(model_name, model_name)

    def call_model(self, model_name: str, prompt: str) -> str:
        """Call a model and return just the content."""
        return self.call_model_with_metadata(model_name, prompt)[0]

    def call_model_with_metadata(
        self,
        model_name: str,
        prompt: str,
        system_prompt: Optional[str] = None,
        include_text: bool = True,
    ) -> Tuple[str, Dict]:
        """Call a model and return (content, metadata).

        Metadata carries token counts (from the API, or estimated when the
        API omits usage), latency, and OpenRouter/upstream cost.
        """
        model_id = self.resolve_model(model_name)
        if model_name not in self._flatten_mappings():
            logger.warning(f"Model '{model_name}' not found in mappings, using as-is: {model_id}")

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        logger.debug(f"Calling model {model_id} (from {model_name}) with prompt length: {len(prompt)}")

        start_time = time.time()
        response_data = chat(messages, model_id)
        latency_ms = (time.time() - start_time) * 1000

        content = ""
        if response_data.get("choices"):
            content = response_data["choices"][0].get("message", {}).get("content", "") or ""

        prompt_tokens, completion_tokens, token_method = extract_token_usage(response_data)
        if token_method != "API":
            prompt_tokens = count_tokens("\n".join(m["content"] for m in messages))
            completion_tokens = count_tokens(content)

        total_cost, upstream_cost = extract_cost_info(response_data)
        usage = response_data.get("usage", {})

        metadata = {
            "model_id": model_id,
            "latency_ms": latency_ms,
            "input_tokens": prompt_tokens,
            "output_tokens": completion_tokens,
            "total_tokens": usage.get("total_tokens") or prompt_tokens + completion_tokens,
            "token_count_method": token_method,
            "openrouter_cost": total_cost or 0.0,
            "upstream_cost": float(upstream_cost) if upstream_cost else 0.0,
        }
        if include_text:
            metadata["request_text"] = prompt
            metadata["response_text"] = content

        logger.info(
            f"Model call completed. Tokens: {metadata['total_tokens']}, "
            f"Latency: {latency_ms:.1f}ms"
        )

        return content, metadata

    def get_available_models(self) -> List[str]:
        """Get list of available model names."""
        return list(self._flatten_mappings().keys())
