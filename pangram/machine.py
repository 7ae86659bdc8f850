"""Pangram game state machine.

The machine is a pure transition function over (state, context, event). It
never performs I/O itself: when a word needs a dictionary check it moves to
VALIDATING and returns a `CheckWord` effect for the caller (see
`pangram.actor`) to perform. The result comes back as a `WordChecked` or
`WordCheckFailed` event tagged with the epoch it was requested in; results
from an earlier epoch (a puzzle that has since been replaced) are discarded.

Both the human console and LLM agents drive the game with the same events:

    ADD_LETTER {letter}   DELETE_LAST {}   CLEAR {}
    SUBMIT {}             SUBMIT_WORD {word}   NEW_PUZZLE {}
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Sequence, Tuple, Union

from pangram.catalog import PUZZLES, Puzzle, get_puzzle
from pangram.rules import MIN_WORD_LENGTH, is_pangram, score_word, validate_local_rules

logger = logging.getLogger(__name__)


class MachineState(Enum):
    READY = "ready"
    VALIDATING = "validating"


class MessageKind(Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"
    PANGRAM = "pangram"


@dataclass(frozen=True)
class PangramContext:
    """State owned by the machine. Only `transition()` produces new contexts."""
    letters: Tuple[str, ...]
    center: str
    pending_input: str = ""
    found_words: Tuple[str, ...] = ()
    score: int = 0
    last_message: str = ""
    last_message_kind: MessageKind = MessageKind.INFO
    puzzle_index: int = 0
    epoch: int = 0


def initial_context(puzzle_index: int = 0, catalog: Sequence[Puzzle] = PUZZLES) -> PangramContext:
    """Fresh context for the puzzle at `puzzle_index`."""
    puzzle = get_puzzle(puzzle_index, catalog)
    return PangramContext(
        letters=puzzle.letters,
        center=puzzle.center,
        puzzle_index=puzzle_index % len(catalog),
    )


# Events

@dataclass(frozen=True)
class AddLetter:
    type: ClassVar[str] = "ADD_LETTER"
    letter: str


@dataclass(frozen=True)
class DeleteLast:
    type: ClassVar[str] = "DELETE_LAST"


@dataclass(frozen=True)
class Clear:
    type: ClassVar[str] = "CLEAR"


@dataclass(frozen=True)
class Submit:
    type: ClassVar[str] = "SUBMIT"


@dataclass(frozen=True)
class SubmitWord:
    type: ClassVar[str] = "SUBMIT_WORD"
    word: str


@dataclass(frozen=True)
class NewPuzzle:
    type: ClassVar[str] = "NEW_PUZZLE"


@dataclass(frozen=True)
class WordChecked:
    """Dictionary answered for a word requested in `epoch`."""
    type: ClassVar[str] = "WORD_CHECKED"
    epoch: int
    word: str
    exists: bool


@dataclass(frozen=True)
class WordCheckFailed:
    """Dictionary lookup raised instead of answering."""
    type: ClassVar[str] = "WORD_CHECK_FAILED"
    epoch: int
    word: str
    error: str = ""


Event = Union[AddLetter, DeleteLast, Clear, Submit, SubmitWord, NewPuzzle, WordChecked, WordCheckFailed]

_EVENT_TYPES = {
    "ADD_LETTER": lambda data: AddLetter(letter=str(data.get("letter", ""))),
    "DELETE_LAST": lambda data: DeleteLast(),
    "DELETE_LETTER": lambda data: DeleteLast(),
    "CLEAR": lambda data: Clear(),
    "SUBMIT": lambda data: Submit(),
    "SUBMIT_WORD": lambda data: SubmitWord(word=str(data.get("word", ""))),
    "NEW_PUZZLE": lambda data: NewPuzzle(),
}


def event_from_dict(data: Mapping[str, Any]) -> Event:
    """Build an event from its wire form, e.g. {"type": "SUBMIT_WORD", "word": "rack"}.

    Raises:
        ValueError: If the event type is unknown
    """
    event_type = str(data.get("type", "")).upper()
    if event_type not in _EVENT_TYPES:
        raise ValueError(f"Unknown event type: '{data.get('type')}'")
    return _EVENT_TYPES[event_type](data)


# Effects

@dataclass(frozen=True)
class CheckWord:
    """Ask the dictionary whether `word` exists; answer with the same epoch."""
    word: str
    epoch: int


@dataclass(frozen=True)
class Transition:
    state: MachineState
    context: PangramContext
    effects: Tuple[CheckWord, ...] = field(default_factory=tuple)


def _points_message(points: int, pangram: bool) -> str:
    if pangram:
        return f"PANGRAM! +{points} points!"
    return f"+{points} point{'s' if points > 1 else ''}"


def _error(context: PangramContext, message: str, **changes) -> PangramContext:
    return replace(
        context,
        last_message=message,
        last_message_kind=MessageKind.ERROR,
        **changes,
    )


def _begin_validation(context: PangramContext, word: str) -> Transition:
    """Apply the local rules; only words that pass them reach the dictionary."""
    rules = validate_local_rules(word, context.letters, context.center, context.found_words)
    if not rules.accepted:
        logger.debug(f"Rejected '{word}' locally: {rules.reason}")
        return Transition(
            MachineState.READY,
            _error(context, rules.reason, pending_input=""),
        )

    return Transition(
        MachineState.VALIDATING,
        replace(context, pending_input=word),
        (CheckWord(word=word, epoch=context.epoch),),
    )


def _new_puzzle(context: PangramContext, catalog: Sequence[Puzzle]) -> Transition:
    next_index = (context.puzzle_index + 1) % len(catalog)
    puzzle = get_puzzle(next_index, catalog)
    logger.info(f"New puzzle #{next_index}: {puzzle.word} (center {puzzle.center})")
    return Transition(
        MachineState.READY,
        PangramContext(
            letters=puzzle.letters,
            center=puzzle.center,
            puzzle_index=next_index,
            epoch=context.epoch + 1,
        ),
    )


def _ready(context: PangramContext, event: Event) -> Transition:
    if isinstance(event, AddLetter):
        letter = event.letter.upper()
        if letter not in context.letters:
            return Transition(MachineState.READY, context)
        return Transition(
            MachineState.READY,
            replace(context, pending_input=context.pending_input + letter, last_message=""),
        )

    if isinstance(event, DeleteLast):
        if not context.pending_input:
            return Transition(MachineState.READY, context)
        return Transition(
            MachineState.READY,
            replace(context, pending_input=context.pending_input[:-1], last_message=""),
        )

    if isinstance(event, Clear):
        return Transition(MachineState.READY, replace(context, pending_input="", last_message=""))

    if isinstance(event, Submit):
        if len(context.pending_input) < MIN_WORD_LENGTH:
            return Transition(MachineState.READY, _error(context, "Word must be at least 4 letters"))
        return _begin_validation(context, context.pending_input)

    if isinstance(event, SubmitWord):
        filtered = "".join(ch for ch in event.word.upper() if ch in context.letters)
        if len(filtered) < MIN_WORD_LENGTH:
            return Transition(MachineState.READY, _error(context, "Word must be at least 4 valid letters"))
        return _begin_validation(context, filtered)

    # Completions arriving while READY belong to an abandoned validation
    return Transition(MachineState.READY, context)


def _validating(context: PangramContext, event: Event) -> Transition:
    if not isinstance(event, (WordChecked, WordCheckFailed)):
        # One validation at a time: composition and submissions are ignored
        logger.debug(f"Ignoring {event.type} while validating '{context.pending_input}'")
        return Transition(MachineState.VALIDATING, context)

    if event.epoch != context.epoch:
        logger.debug(f"Discarding stale result for '{event.word}' (epoch {event.epoch} != {context.epoch})")
        return Transition(MachineState.VALIDATING, context)

    if isinstance(event, WordCheckFailed):
        return Transition(
            MachineState.READY,
            _error(context, "Failed to validate word", pending_input=""),
        )

    if not event.exists:
        return Transition(
            MachineState.READY,
            _error(context, "Not a valid English word", pending_input=""),
        )

    word = event.word.lower()
    points = score_word(word, context.letters)
    pangram = is_pangram(word, context.letters)
    return Transition(
        MachineState.READY,
        replace(
            context,
            pending_input="",
            found_words=tuple(sorted(context.found_words + (word,))),
            score=context.score + points,
            last_message=_points_message(points, pangram),
            last_message_kind=MessageKind.PANGRAM if pangram else MessageKind.SUCCESS,
        ),
    )


def transition(
    state: MachineState,
    context: PangramContext,
    event: Event,
    catalog: Sequence[Puzzle] = PUZZLES,
) -> Transition:
    """Compute the next state, context and effects for one event.

    This is the only place the game context changes. It is pure: the same
    inputs always give the same Transition, and no dictionary call happens
    here.
    """
    if isinstance(event, NewPuzzle):
        return _new_puzzle(context, catalog)

    if state is MachineState.VALIDATING:
        return _validating(context, event)

    return _ready(context, event)


def context_to_dict(state: MachineState, context: PangramContext) -> Dict[str, Any]:
    """Observable snapshot in wire form."""
    return {
        "state": state.value,
        "letters": list(context.letters),
        "center": context.center,
        "pending_input": context.pending_input,
        "found_words": list(context.found_words),
        "score": context.score,
        "last_message": context.last_message,
        "last_message_kind": context.last_message_kind.value,
        "puzzle_index": context.puzzle_index,
    }
