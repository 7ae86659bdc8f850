"""Dictionary lookups for Pangram.

Every dictionary exposes `check_word(word) -> bool` and fails closed: an I/O
error, timeout or service error means "not a word", so an unconfirmable word
never awards points.

Usage:
    # Local word list (preferred: deterministic, offline)
    dictionary = WordListDictionary("words.txt")

    # Local list when available, Free Dictionary API otherwise
    dictionary = build_dictionary()
"""

import logging
import os
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Optional, Set, Union

import requests

logger = logging.getLogger(__name__)

DICTIONARY_ENV_VAR = "PANGRAM_DICTIONARY"
DEFAULT_API_URL = "https://api.dictionaryapi.dev/api/v2/entries/en"

# Cache for loaded word lists (keyed by resolved file path)
_WORDLIST_CACHE: Dict[str, FrozenSet[str]] = {}


def load_wordlist(path: Union[str, Path]) -> FrozenSet[str]:
    """Load a newline-separated word list (cached per path).

    Lines are stripped and lowercased; blank lines are skipped. A missing or
    unreadable file yields an empty set so callers can fall back.
    """
    path = Path(path)
    key = str(path.resolve())
    if key in _WORDLIST_CACHE:
        return _WORDLIST_CACHE[key]

    try:
        raw = path.read_text(encoding="utf-8", errors="ignore").splitlines()
    except OSError as e:
        logger.warning(f"Dictionary not found at {path}: {e}")
        words: FrozenSet[str] = frozenset()
    else:
        words = frozenset(line.strip().lower() for line in raw if line.strip())
        logger.info(f"Dictionary loaded: {len(words)} words from {path}")

    _WORDLIST_CACHE[key] = words
    return words


class StaticDictionary:
    """In-memory dictionary backed by a fixed set of words."""

    def __init__(self, words: Iterable[str]):
        self.words: Set[str] = {w.strip().lower() for w in words if w.strip()}

    def __len__(self) -> int:
        return len(self.words)

    def check_word(self, word: str) -> bool:
        return word.lower() in self.words


class WordListDictionary:
    """Dictionary backed by a local word list file, loaded on first use."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._words: Optional[FrozenSet[str]] = None

    @property
    def words(self) -> FrozenSet[str]:
        if self._words is None:
            self._words = load_wordlist(self.path)
        return self._words

    def __len__(self) -> int:
        return len(self.words)

    def check_word(self, word: str) -> bool:
        return word.lower() in self.words


class RemoteDictionary:
    """Dictionary backed by an HTTP word-lookup service.

    A word exists if `GET {base_url}/{word}` returns a 2xx status. Network
    errors and timeouts count as "not a word".
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def check_word(self, word: str) -> bool:
        url = f"{self.base_url}/{word.lower()}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Dictionary lookup failed for '{word}': {e}")
            return False

        logger.debug(f"Dictionary lookup '{word}' -> HTTP {response.status_code}")
        return response.ok


class FallbackDictionary:
    """Use the local list when it has words, otherwise the remote service."""

    def __init__(self, primary, fallback):
        self.primary = primary
        self.fallback = fallback

    def check_word(self, word: str) -> bool:
        if len(self.primary) > 0:
            return self.primary.check_word(word)
        return self.fallback.check_word(word)


def build_dictionary(
    path: Optional[Union[str, Path]] = None,
    api_url: str = DEFAULT_API_URL,
    timeout: float = 10.0,
):
    """Build the default dictionary chain.

    Args:
        path: Local word list; defaults to $PANGRAM_DICTIONARY
        api_url: Remote lookup service used when no local list is available
        timeout: Remote request timeout in seconds

    Returns:
        A dictionary object with `check_word(word) -> bool`
    """
    remote = RemoteDictionary(base_url=api_url, timeout=timeout)

    path = path or os.getenv(DICTIONARY_ENV_VAR)
    if not path:
        logger.info("No local dictionary configured, using remote lookups")
        return remote

    return FallbackDictionary(WordListDictionary(path), remote)
