"""Word rules for Pangram.

Pure functions with no I/O. This is the single place where word validation
and scoring rules live; the state machine, the benchmark and the prompts all
go through these helpers.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

MIN_WORD_LENGTH = 4
PANGRAM_BONUS = 7


@dataclass(frozen=True)
class RuleResult:
    """Outcome of the local (non-dictionary) checks."""
    accepted: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> "RuleResult":
        return cls(accepted=True)

    @classmethod
    def rejected(cls, reason: str) -> "RuleResult":
        return cls(accepted=False, reason=reason)


@dataclass(frozen=True)
class WordStats:
    """Aggregate statistics over found words."""
    count: int
    pangram_count: int
    average_length: float
    unique_letters_used: int


def is_pangram(word: str, letters: Iterable[str]) -> bool:
    """True if the word uses every distinct puzzle letter at least once.

    Word length does not matter: a longer word with repeats still counts.
    """
    letter_set = {letter.lower() for letter in letters}
    return letter_set <= set(word.lower())


def uses_only_available_letters(word: str, letters: Iterable[str]) -> bool:
    """True if every character of the word is a puzzle letter."""
    letter_set = {letter.lower() for letter in letters}
    return all(char in letter_set for char in word.lower())


def contains_center(word: str, center: str) -> bool:
    """True if the word contains the center letter."""
    return center.lower() in word.lower()


def validate_local_rules(
    word: str,
    letters: Sequence[str],
    center: str,
    found_words: Iterable[str],
) -> RuleResult:
    """Check a word against the puzzle rules, first failure wins.

    Order: length, center letter, available letters, already found.
    Passing these checks is necessary but not sufficient; the word still
    needs dictionary confirmation.
    """
    normalized = word.lower()

    if len(normalized) < MIN_WORD_LENGTH:
        return RuleResult.rejected("Too short! Need 4+ letters")

    if not contains_center(normalized, center):
        return RuleResult.rejected(f"Must include center letter: {center.upper()}")

    if not uses_only_available_letters(normalized, letters):
        return RuleResult.rejected("Uses letters not in the puzzle")

    if normalized in {w.lower() for w in found_words}:
        return RuleResult.rejected("Already found!")

    return RuleResult.ok()


def score_word(word: str, letters: Iterable[str]) -> int:
    """Points for an accepted word.

    4-letter words score 1, longer words score their length, and pangrams
    get a flat +7 bonus on top.
    """
    points = len(word)
    if points == MIN_WORD_LENGTH:
        points = 1

    if is_pangram(word, letters):
        points += PANGRAM_BONUS

    return points


def word_stats(found_words: Sequence[str], letters: Iterable[str]) -> WordStats:
    """Summarize found words (average length is 0 for an empty list)."""
    letters = list(letters)
    pangrams = [w for w in found_words if is_pangram(w, letters)]
    unique_letters = set("".join(found_words).lower())

    average_length = 0.0
    if found_words:
        average_length = sum(len(w) for w in found_words) / len(found_words)

    return WordStats(
        count=len(found_words),
        pangram_count=len(pangrams),
        average_length=average_length,
        unique_letters_used=len(unique_letters),
    )


def generate_state_text(
    letters: Sequence[str],
    center: str,
    found_words: Sequence[str],
    score: int,
    pending_input: str = "",
) -> str:
    """Plain-text description of the game state for LLM prompts."""
    lines = [
        f"Letters: {', '.join(letters)} (center: {center})",
        f"Score: {score}",
        f"Words found ({len(found_words)}): {', '.join(found_words) or 'none'}",
    ]

    if pending_input:
        lines.append(f"Current input: {pending_input}")

    stats = word_stats(found_words, letters)
    if stats.pangram_count > 0:
        lines.append(f"Pangrams found: {stats.pangram_count}")

    return "\n".join(lines)
