"""Agent-side helpers for Pangram.

Agents only talk to the game through the event API: they submit words and
observe the snapshot. They never call the rules engine to pre-validate.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from pangram.actor import PangramActor

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Timed out waiting for the dictionary"

# Words for the first catalog puzzle (RACKING, center K); the agent does not
# know which of them are valid, it just tries them.
DEFAULT_CANDIDATES = [
    # Potential pangrams first, they score the most
    "cracking", "cranking", "racking", "carking", "tracking",
    # Long words
    "ranking", "kicking", "nicking", "ricking", "narking",
    "raking", "caking", "inking", "irking", "arcing", "acing",
    # Medium and short words
    "crack", "crank", "rank", "rack", "kick", "nick", "rick",
    "king", "ring", "grin", "grain", "cairn", "kiang",
    "rink", "kink", "gain", "crag", "cark", "akin", "narc", "nark",
]


@dataclass
class SubmitOutcome:
    """What an agent learns from one submission."""
    word: str
    accepted: bool
    points_earned: int
    message: str
    new_score: int
    timed_out: bool = False

    def to_dict(self) -> Dict:
        return {
            "word": self.word,
            "accepted": self.accepted,
            "points_earned": self.points_earned,
            "message": self.message,
            "new_score": self.new_score,
            "timed_out": self.timed_out,
        }


def observe(actor: PangramActor) -> Dict:
    """Game state as an agent tool result."""
    snapshot = actor.snapshot()
    return {
        "letters": list(snapshot.letters),
        "center_letter": snapshot.center,
        "score": snapshot.score,
        "found_words": list(snapshot.found_words),
        "last_message": snapshot.last_message,
        "last_message_kind": snapshot.last_message_kind.value,
        "is_validating": snapshot.is_validating,
    }


def _timed_out(actor: PangramActor, word: str) -> SubmitOutcome:
    return SubmitOutcome(
        word=word,
        accepted=False,
        points_earned=0,
        message=TIMEOUT_MESSAGE,
        new_score=actor.snapshot().score,
        timed_out=True,
    )


def submit_word(actor: PangramActor, word: str, timeout: Optional[float] = 30.0) -> SubmitOutcome:
    """Send SUBMIT_WORD and wait for the outcome.

    A word counts as accepted when the score went up. If an earlier word is
    still validating, this waits for it first so its points are not credited
    to `word`. On timeout the outcome is marked `timed_out`; the word may
    still score later.
    """
    if not actor.wait_until_ready(timeout):
        logger.warning(f"Still validating an earlier word after {timeout}s, not sending '{word}'")
        return _timed_out(actor, word)

    previous = actor.snapshot().score
    actor.send({"type": "SUBMIT_WORD", "word": word})

    if not actor.wait_until_ready(timeout):
        logger.warning(f"Timed out after {timeout}s waiting for '{word}' to validate")
        return _timed_out(actor, word)

    snapshot = actor.snapshot()
    points = snapshot.score - previous
    return SubmitOutcome(
        word=word,
        accepted=points > 0,
        points_earned=points,
        message=snapshot.last_message,
        new_score=snapshot.score,
    )


class CandidatePlayer:
    """Offline player that works through a fixed list of candidate words.

    It has the same interface as `pangram.player.AIPlayer`, at zero token cost.
    """

    def __init__(self, words: Optional[Sequence[str]] = None, model_name: str = "candidates"):
        self.model_name = model_name
        self.words = list(words) if words is not None else list(DEFAULT_CANDIDATES)
        self._position = 0
        self._tried: set = set()
        self._last_call_metadata: Optional[Dict] = None
        self._pending_calls: List[Dict] = []

    def get_last_call_metadata(self) -> Optional[Dict]:
        return self._last_call_metadata

    def drain_call_metadata(self) -> List[Dict]:
        calls, self._pending_calls = self._pending_calls, []
        return calls

    def get_words(self, game_state: Dict, feedback: str = "", max_words: int = 10) -> List[str]:
        """Return the next batch of untried candidates."""
        batch: List[str] = []
        while self._position < len(self.words) and len(batch) < max_words:
            word = self.words[self._position].strip().lower()
            self._position += 1
            if word and word not in self._tried:
                self._tried.add(word)
                batch.append(word)

        self._last_call_metadata = {
            "call_type": "candidates",
            "input_tokens": 0,
            "output_tokens": 0,
            "total_tokens": 0,
            "latency_ms": 0.0,
            "openrouter_cost": 0.0,
            "upstream_cost": 0.0,
        }
        self._pending_calls.append(self._last_call_metadata)
        return batch
