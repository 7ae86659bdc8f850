"""LLM player for Pangram."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pangram.game_config import GameConfig, generate_system_prompt, get_game_config
from shared.adapters.openrouter_adapter import OpenRouterAdapter
from shared.prompt_manager import PromptManager

logger = logging.getLogger(__name__)

DEFAULT_PROMPT_FILE = Path(__file__).parent / "prompts" / "player.md"

_STRIP_CHARS = ".,;:\"'()[]{}*`_-!?"


def parse_words_from_response(response: str, max_words: int) -> Tuple[List[str], bool]:
    """Parse proposed words from an LLM response.

    Looks for a "WORDS:" line first, then falls back to scanning short
    lines for alphabetic tokens.

    Returns:
        (words, done) where words are lowercase and unique, and done is True
        if the model said it has no more words
    """
    words: List[str] = []

    def add_tokens(text: str) -> None:
        for token in text.replace(",", " ").replace(";", " ").split():
            clean = token.strip(_STRIP_CHARS).lower()
            if clean.isalpha() and clean not in words:
                words.append(clean)

    lines = [line.strip() for line in response.strip().split("\n")]

    for line in lines:
        header = line.lstrip("#*- ").upper()
        if header.startswith("WORDS") and ":" in line:
            word_part = line.split(":", 1)[1].strip()
            if word_part.strip(_STRIP_CHARS + " ").upper() == "DONE":
                return [], True
            add_tokens(word_part)

    if words:
        return words[:max_words], False

    # Fallback: short lines that look like word lists
    for line in lines:
        if not line or line.startswith("#"):
            continue
        tokens = line.replace(",", " ").split()
        if len(tokens) <= 5:
            add_tokens(line)

    words = [w for w in words if len(w) >= 4 and w != "done"]
    return words[:max_words], False


class AIPlayer:
    """AI player using OpenRouter models."""

    def __init__(
        self,
        model_name: str,
        prompt_file: Optional[str] = None,
        game_config: Optional[GameConfig] = None,
    ):
        self.model_name = model_name
        self.prompt_file = prompt_file or str(DEFAULT_PROMPT_FILE)
        self.game_config = game_config or get_game_config()
        self.prompt_manager = PromptManager()
        self._adapter = None
        self._last_call_metadata: Optional[Dict] = None
        self._pending_calls: List[Dict] = []
        self.done = False

        logger.info(f"Created AI player with model: {model_name}")

    @property
    def adapter(self):
        """Lazy initialization of OpenRouter adapter."""
        if self._adapter is None:
            self._adapter = OpenRouterAdapter()
        return self._adapter

    def get_last_call_metadata(self) -> Optional[Dict]:
        """Get metadata from the last AI call."""
        return self._last_call_metadata

    def drain_call_metadata(self) -> List[Dict]:
        """Metadata for every call since the last drain, retries included."""
        calls, self._pending_calls = self._pending_calls, []
        return calls

    def build_prompt(self, game_state: Dict, feedback: str, max_words: int) -> str:
        return self.prompt_manager.load_prompt(
            self.prompt_file,
            {
                "system_prompt": generate_system_prompt(self.game_config),
                "state_text": game_state.get("state_text", ""),
                "feedback": feedback or "None yet - this is your first turn.",
                "max_words": max_words,
                "center": game_state.get("center_letter", ""),
                "letters": ", ".join(game_state.get("letters", [])),
            },
        )

    def get_words(self, game_state: Dict, feedback: str = "", max_words: int = 10) -> List[str]:
        """Ask the model for the next batch of words to submit."""
        return self._get_words_with_retry(game_state, feedback, max_words, is_retry=False)

    def _get_words_with_retry(
        self, game_state: Dict, feedback: str, max_words: int, is_retry: bool
    ) -> List[str]:
        try:
            prompt = self.build_prompt(game_state, feedback, max_words)
            response, metadata = self.adapter.call_model_with_metadata(self.model_name, prompt)

            logger.debug(f"Raw AI response: {response}")
            words, done = parse_words_from_response(response, max_words)

            self._last_call_metadata = metadata
            self._last_call_metadata["call_type"] = "player"
            self._last_call_metadata["is_retry"] = is_retry
            self._last_call_metadata["turn_result"] = {"words": words, "done": done}
            self._pending_calls.append(self._last_call_metadata)

            if done:
                logger.info(f"AI Player ({self.model_name}) reports no more words")
                self.done = True
                return []

            if not words and not is_retry:
                logger.warning("Player returned no words, retrying once...")
                return self._get_words_with_retry(game_state, feedback, max_words, is_retry=True)

            logger.info(
                f"AI Player ({self.model_name}) words: {words}" +
                (" (retry)" if is_retry else "")
            )
            return words

        except Exception as e:
            logger.error(f"Error in AI player move: {e}")
            if not is_retry:
                logger.warning("Player API call failed, retrying once...")
                return self._get_words_with_retry(game_state, feedback, max_words, is_retry=True)
            return []
