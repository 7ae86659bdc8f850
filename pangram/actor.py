"""Single-writer runtime for the Pangram state machine.

`PangramActor` owns one game. Events from any thread are applied one at a
time under a lock; the only work done outside the lock is the dictionary
lookup, which runs on an executor and reports back through `send()` like
any other event.

    with PangramActor(dictionary, puzzle_index=0) as actor:
        actor.send(SubmitWord("racking"))
        actor.wait_until_ready(timeout=10)
        print(actor.snapshot().score)
"""

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pangram.catalog import PUZZLES, Puzzle
from pangram.machine import (
    CheckWord,
    Event,
    MachineState,
    MessageKind,
    PangramContext,
    WordChecked,
    WordCheckFailed,
    context_to_dict,
    event_from_dict,
    initial_context,
    transition,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the game handed to UIs and agents."""
    state: MachineState
    letters: Tuple[str, ...]
    center: str
    pending_input: str
    found_words: Tuple[str, ...]
    score: int
    last_message: str
    last_message_kind: MessageKind
    puzzle_index: int

    @property
    def is_validating(self) -> bool:
        return self.state is MachineState.VALIDATING

    def to_dict(self) -> Dict[str, Any]:
        # Snapshot carries every field context_to_dict reads.
        return context_to_dict(self.state, self)


Listener = Callable[[Event, Snapshot], None]


def check_word(effect: CheckWord, dictionary) -> Event:
    """Run one dictionary lookup and turn the outcome into a completion event.

    An exception from the dictionary becomes WordCheckFailed, so the machine
    always leaves VALIDATING.
    """
    try:
        exists = bool(dictionary.check_word(effect.word))
    except Exception as e:
        logger.warning(f"Dictionary check failed for '{effect.word}': {e}")
        return WordCheckFailed(epoch=effect.epoch, word=effect.word, error=str(e))
    return WordChecked(epoch=effect.epoch, word=effect.word, exists=exists)


class PangramActor:
    """One running Pangram game with serialized event handling."""

    def __init__(
        self,
        dictionary,
        puzzle_index: int = 0,
        catalog: Sequence[Puzzle] = PUZZLES,
        executor: Optional[Executor] = None,
    ):
        """Create the game in READY state.

        Args:
            dictionary: Object with `check_word(word) -> bool`
            puzzle_index: Starting position in the catalog
            catalog: Puzzles to rotate through
            executor: Where dictionary lookups run; a private single worker
                pool is created (and shut down by `stop()`) if omitted
        """
        self.dictionary = dictionary
        self.catalog = tuple(catalog)
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="pangram-dict")

        self._lock = threading.RLock()
        # Held across transition and listener calls so listeners see events
        # in the order they were applied.
        self._dispatch_lock = threading.RLock()
        self._changed = threading.Condition(self._lock)
        self._state = MachineState.READY
        self._context: PangramContext = initial_context(puzzle_index, self.catalog)
        self._listeners: List[Listener] = []
        self._stopped = False

        logger.info(
            f"Started Pangram game on puzzle #{self._context.puzzle_index}: "
            f"{''.join(self._context.letters)} (center {self._context.center})"
        )

    def __enter__(self) -> "PangramActor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    @property
    def state(self) -> MachineState:
        with self._lock:
            return self._state

    @property
    def context(self) -> PangramContext:
        with self._lock:
            return self._context

    def snapshot(self) -> Snapshot:
        with self._lock:
            ctx = self._context
            return Snapshot(
                state=self._state,
                letters=ctx.letters,
                center=ctx.center,
                pending_input=ctx.pending_input,
                found_words=ctx.found_words,
                score=ctx.score,
                last_message=ctx.last_message,
                last_message_kind=ctx.last_message_kind,
                puzzle_index=ctx.puzzle_index,
            )

    def add_listener(self, listener: Listener) -> None:
        """Call `listener(event, snapshot)` after every applied event.

        Listeners are called one at a time, in transition order. They must not
        block on the actor from another thread (e.g. `wait_until_ready`).
        """
        self._listeners.append(listener)

    def send(self, event: Union[Event, Mapping[str, Any]]) -> Snapshot:
        """Apply one event and start any dictionary lookup it requires.

        Dict events use the wire form, e.g. {"type": "ADD_LETTER", "letter": "R"}.

        Returns:
            The snapshot right after the transition (a submitted word may
            still be VALIDATING)
        """
        if isinstance(event, Mapping):
            event = event_from_dict(event)

        with self._dispatch_lock:
            with self._lock:
                result = transition(self._state, self._context, event, self.catalog)
                if result.state is not self._state:
                    logger.debug(f"{event.type}: {self._state.value} -> {result.state.value}")
                self._state = result.state
                self._context = result.context
                snapshot = self.snapshot()
                self._changed.notify_all()

            for listener in self._listeners:
                try:
                    listener(event, snapshot)
                except Exception as e:
                    logger.error(f"Listener failed on {event.type}: {e}")

        for effect in result.effects:
            self._perform(effect)

        return snapshot

    def _perform(self, effect: CheckWord) -> None:
        # Every CheckWord must end in a completion event, or the machine
        # stays in VALIDATING.
        if self._stopped:
            logger.debug(f"Actor stopped, failing check for '{effect.word}'")
            self._fail(effect, "Game stopped")
            return
        try:
            future = self._executor.submit(check_word, effect, self.dictionary)
        except RuntimeError as e:
            logger.warning(f"Could not schedule check for '{effect.word}': {e}")
            self._fail(effect, str(e))
            return
        future.add_done_callback(lambda f: self._on_checked(effect, f))

    def _on_checked(self, effect: CheckWord, future: Future) -> None:
        if future.cancelled():
            self._fail(effect, "Check cancelled")
            return
        error = future.exception()
        if error is not None:
            self._fail(effect, str(error))
            return
        self.send(future.result())

    def _fail(self, effect: CheckWord, error: str) -> None:
        self.send(WordCheckFailed(epoch=effect.epoch, word=effect.word, error=error))

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until no validation is in flight.

        Returns:
            True if READY, False if the timeout expired first
        """
        with self._changed:
            return self._changed.wait_for(lambda: self._state is MachineState.READY, timeout)

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return context_to_dict(self._state, self._context)

    def stop(self) -> None:
        """Stop accepting dictionary work.

        Checks that have not started yet fail, so the game returns to READY.
        """
        self._stopped = True
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
