"""Markdown prompt templates.

Templates use `{{UPPER_CASE}}` placeholders; context keys are matched
case-insensitively, so {"state_text": ...} fills `{{STATE_TEXT}}`.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{\{([A-Z0-9_]+)\}\}")


class PromptManager:
    """Load and hydrate prompt templates from disk."""

    def __init__(self, base_dir: Optional[Union[str, Path]] = None):
        self.base_dir = Path(base_dir) if base_dir else Path.cwd()
        self._cache: Dict[Path, str] = {}

    def _resolve(self, prompt_file: Union[str, Path]) -> Path:
        path = Path(prompt_file)
        if path.is_absolute() or path.exists():
            return path
        return self.base_dir / path

    def load_template(self, prompt_file: Union[str, Path]) -> str:
        path = self._resolve(prompt_file)
        if path not in self._cache:
            if not path.exists():
                raise FileNotFoundError(f"Prompt file not found: {path}")
            self._cache[path] = path.read_text(encoding="utf-8")
        return self._cache[path]

    def load_prompt(self, prompt_file: Union[str, Path], context: Dict[str, Any]) -> str:
        """Load a template and replace its placeholders.

        Placeholders without a value are replaced with an empty string and
        logged, so a stale template never leaks `{{...}}` to a model.
        """
        template = self.load_template(prompt_file)
        values = {key.upper(): value for key, value in context.items()}

        def substitute(match: re.Match) -> str:
            name = match.group(1)
            if name not in values:
                logger.warning(f"No value for placeholder {{{{{name}}}}} in {prompt_file}")
                return ""
            return str(values[name])

        prompt = _PLACEHOLDER.sub(substitute, template)
        while "\n\n\n" in prompt:
            prompt = prompt.replace("\n\n\n", "\n\n")
        return prompt.strip() + "\n"
