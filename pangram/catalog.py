"""Puzzle catalog for Pangram.

Each puzzle is 7 distinct letters plus one required center letter. The
built-in catalog has a fixed order so that benchmark runs are reproducible:

    puzzle = get_puzzle(0)          # RACKING, center K
    puzzle = get_puzzle(12)         # wraps modulo catalog size
    puzzle = get_random_puzzle(seed=42)

Custom catalogs can be loaded from YAML:

    puzzles:
      - letters: [R, A, C, K, I, N, G]
        center: K
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import yaml

logger = logging.getLogger(__name__)

LETTER_COUNT = 7


@dataclass(frozen=True)
class Puzzle:
    """Immutable puzzle: 7 uppercase letters and the required center letter."""
    letters: Tuple[str, ...]
    center: str

    @property
    def word(self) -> str:
        """Letters joined, e.g. 'RACKING'."""
        return "".join(self.letters)


class PuzzleError(Enum):
    """Invariants a custom puzzle can violate."""
    WRONG_LETTER_COUNT = "Must have exactly 7 letters"
    NOT_A_LETTER = "Letters and center must each be a single letter A-Z"
    CENTER_NOT_IN_LETTERS = "Center letter must be one of the 7 letters"
    DUPLICATE_LETTERS = "All 7 letters must be unique"


@dataclass(frozen=True)
class PuzzleValidationError:
    """Returned (not raised) when a custom puzzle is malformed."""
    error: PuzzleError

    @property
    def message(self) -> str:
        return self.error.value


PUZZLES: Tuple[Puzzle, ...] = (
    Puzzle(letters=("R", "A", "C", "K", "I", "N", "G"), center="K"),
    Puzzle(letters=("P", "L", "A", "Y", "I", "N", "G"), center="Y"),
    Puzzle(letters=("T", "R", "A", "V", "E", "L", "S"), center="V"),
    Puzzle(letters=("Q", "U", "I", "C", "K", "L", "Y"), center="Q"),
    Puzzle(letters=("J", "U", "M", "P", "I", "N", "G"), center="J"),
    Puzzle(letters=("S", "T", "R", "O", "N", "G", "E"), center="G"),
    Puzzle(letters=("B", "R", "I", "G", "H", "T", "S"), center="B"),
    Puzzle(letters=("C", "L", "O", "U", "D", "S", "Y"), center="Y"),
    Puzzle(letters=("W", "A", "T", "E", "R", "S", "Y"), center="W"),
    Puzzle(letters=("M", "A", "R", "K", "E", "T", "S"), center="K"),
)


def get_puzzle(index: int, catalog: Sequence[Puzzle] = PUZZLES) -> Puzzle:
    """Get the puzzle at `index`, wrapping around the catalog size."""
    if not catalog:
        raise ValueError("Puzzle catalog is empty")
    return catalog[index % len(catalog)]


def get_random_puzzle(seed: Optional[int] = None, catalog: Sequence[Puzzle] = PUZZLES) -> Puzzle:
    """Pick a puzzle, deterministically when a seed is given.

    Args:
        seed: Any integer; the puzzle is `catalog[abs(seed) % len(catalog)]`
        catalog: Puzzles to choose from

    Returns:
        The selected puzzle
    """
    if not catalog:
        raise ValueError("Puzzle catalog is empty")
    if seed is not None:
        return catalog[abs(seed) % len(catalog)]
    return random.choice(list(catalog))


def _is_letter(value) -> bool:
    return isinstance(value, str) and len(value) == 1 and value.isascii() and value.isalpha()


def create_custom_puzzle(
    letters: Iterable[str],
    center: str,
) -> Union[Puzzle, PuzzleValidationError]:
    """Build a puzzle from caller-supplied letters.

    Checks run in order: letter count, single A-Z letters (center included),
    center membership, duplicates. All checks are case-insensitive and the
    returned puzzle is uppercase.

    Returns:
        A Puzzle, or a PuzzleValidationError naming the failed invariant
    """
    letters = tuple(letters)
    if len(letters) != LETTER_COUNT:
        return PuzzleValidationError(PuzzleError.WRONG_LETTER_COUNT)

    if not all(_is_letter(letter) for letter in letters + (center,)):
        return PuzzleValidationError(PuzzleError.NOT_A_LETTER)

    upper_letters = tuple(letter.upper() for letter in letters)
    upper_center = center.upper()

    if upper_center not in upper_letters:
        return PuzzleValidationError(PuzzleError.CENTER_NOT_IN_LETTERS)

    if len(set(upper_letters)) != LETTER_COUNT:
        return PuzzleValidationError(PuzzleError.DUPLICATE_LETTERS)

    return Puzzle(letters=upper_letters, center=upper_center)


def load_puzzles(path: Union[str, Path]) -> List[Puzzle]:
    """Load a puzzle catalog from a YAML file.

    Letters may be given as a list or as a single string ("RACKING").

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file has no puzzles or an entry is malformed
    """
    path = Path(path)
    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid puzzle file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Puzzle file {path} must be a mapping with a 'puzzles' key")

    entries = data.get("puzzles") or []
    if not isinstance(entries, list) or not entries:
        raise ValueError(f"No puzzles found in {path}")

    puzzles: List[Puzzle] = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ValueError(f"Puzzle #{i} in {path} must be a mapping with letters and center")
        letters = entry.get("letters", [])
        if isinstance(letters, str):
            letters = list(letters)
        elif not isinstance(letters, list):
            raise ValueError(f"Puzzle #{i} in {path} has letters that are neither a list nor a string")
        result = create_custom_puzzle(letters, entry.get("center", ""))
        if isinstance(result, PuzzleValidationError):
            raise ValueError(f"Puzzle #{i} in {path} is invalid: {result.message}")
        puzzles.append(result)

    logger.info(f"Loaded {len(puzzles)} puzzles from {path}")
    return puzzles
