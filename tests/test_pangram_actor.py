"""Tests for the threaded Pangram actor."""

import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

from pangram.actor import PangramActor, check_word
from pangram.machine import (
    AddLetter,
    CheckWord,
    MachineState,
    MessageKind,
    NewPuzzle,
    Submit,
    SubmitWord,
    WordCheckFailed,
    WordChecked,
    context_to_dict,
)


class CountingDictionary:
    """Knows a fixed set of words and counts lookups."""

    def __init__(self, words):
        self.words = {w.lower() for w in words}
        self.calls = []

    def check_word(self, word):
        self.calls.append(word)
        return word.lower() in self.words


class RaisingDictionary:
    def check_word(self, word):
        raise ConnectionError("dictionary offline")


class GatedDictionary(CountingDictionary):
    """Blocks every lookup until the gate is opened."""

    def __init__(self, words):
        super().__init__(words)
        self.gate = threading.Event()
        self.started = threading.Event()

    def check_word(self, word):
        self.started.set()
        self.gate.wait(timeout=5)
        return super().check_word(word)


class TestCheckWord:
    """Test cases for running a single lookup."""

    def test_found(self):
        """Test a hit becomes WordChecked(exists=True) with the same epoch."""
        event = check_word(CheckWord(word="RACK", epoch=3), CountingDictionary(["rack"]))
        assert event == WordChecked(epoch=3, word="RACK", exists=True)

    def test_exception_becomes_failure(self):
        """Test dictionary errors are turned into WordCheckFailed."""
        event = check_word(CheckWord(word="RACK", epoch=0), RaisingDictionary())
        assert isinstance(event, WordCheckFailed)
        assert "offline" in event.error


class TestPangramActor:
    """Test cases for PangramActor."""

    def setup_method(self):
        """Setup for each test."""
        self.dictionary = CountingDictionary(["rack", "crack", "cracking", "racking"])
        self.actor = PangramActor(self.dictionary, puzzle_index=0)

    def teardown_method(self):
        """Cleanup after each test."""
        self.actor.stop()

    def test_submit_word_scores(self):
        """Test a valid word is checked and scored."""
        self.actor.send(SubmitWord("crack"))
        assert self.actor.wait_until_ready(timeout=5)

        snapshot = self.actor.snapshot()
        assert snapshot.state is MachineState.READY
        assert snapshot.score == 5
        assert snapshot.found_words == ("crack",)
        assert snapshot.last_message_kind is MessageKind.SUCCESS

    def test_dict_events(self):
        """Test wire-form events are accepted."""
        for letter in "rack":
            self.actor.send({"type": "ADD_LETTER", "letter": letter})
        assert self.actor.snapshot().pending_input == "RACK"

        self.actor.send({"type": "SUBMIT"})
        assert self.actor.wait_until_ready(timeout=5)
        assert self.actor.snapshot().score == 1

    def test_local_rejection_makes_no_lookup(self):
        """Test words failing local rules never reach the dictionary."""
        snapshot = self.actor.send(SubmitWord("XXXX"))
        assert snapshot.state is MachineState.READY
        assert snapshot.last_message == "Word must be at least 4 valid letters"
        assert self.dictionary.calls == []

    def test_duplicate_makes_one_lookup(self):
        """Test resubmitting a found word is rejected locally."""
        self.actor.send(SubmitWord("rack"))
        self.actor.wait_until_ready(timeout=5)
        self.actor.send(SubmitWord("rack"))
        self.actor.wait_until_ready(timeout=5)

        assert self.dictionary.calls == ["RACK"]
        assert self.actor.snapshot().score == 1
        assert self.actor.snapshot().last_message == "Already found!"

    def test_rack_then_cracking(self):
        """Test a word followed by a pangram."""
        self.actor.send(SubmitWord("rack"))
        self.actor.wait_until_ready(timeout=5)
        self.actor.send(SubmitWord("cracking"))
        self.actor.wait_until_ready(timeout=5)

        snapshot = self.actor.snapshot()
        assert snapshot.score == 16
        assert snapshot.last_message_kind is MessageKind.PANGRAM

    def test_listeners_see_every_event(self):
        """Test listeners are notified, including for completions."""
        seen = []
        checked = threading.Event()

        def listener(event, snapshot):
            seen.append(event.type)
            if isinstance(event, WordChecked):
                checked.set()

        self.actor.add_listener(listener)
        self.actor.send(AddLetter("r"))
        self.actor.send(SubmitWord("rack"))
        assert checked.wait(timeout=5)

        assert seen == ["ADD_LETTER", "SUBMIT_WORD", "WORD_CHECKED"]

    def test_failing_listener_does_not_break_actor(self):
        """Test listener errors are logged, not raised."""
        self.actor.add_listener(Mock(side_effect=RuntimeError("bad listener")))
        snapshot = self.actor.send(AddLetter("r"))
        assert snapshot.pending_input == "R"

    def test_to_dict(self):
        """Test the wire snapshot."""
        data = self.actor.to_dict()
        assert data["state"] == "ready"
        assert data["score"] == 0

    def test_snapshot_to_dict_matches_context_form(self):
        """Test the snapshot and the machine produce the same wire form."""
        self.actor.send(AddLetter("r"))
        assert self.actor.snapshot().to_dict() == context_to_dict(self.actor.state, self.actor.context)


class TestActorFailures:
    """Test cases for dictionary failures and concurrency."""

    def test_dictionary_error_returns_to_ready(self):
        """Test a raising dictionary leaves the game usable."""
        with PangramActor(RaisingDictionary()) as actor:
            actor.send(SubmitWord("rack"))
            assert actor.wait_until_ready(timeout=5)
            snapshot = actor.snapshot()
            assert snapshot.last_message == "Failed to validate word"
            assert snapshot.last_message_kind is MessageKind.ERROR
            assert snapshot.score == 0

    def test_input_ignored_while_validating(self):
        """Test only one validation runs at a time."""
        dictionary = GatedDictionary(["rack", "crack"])
        with PangramActor(dictionary) as actor:
            actor.send(SubmitWord("rack"))
            assert dictionary.started.wait(timeout=5)

            snapshot = actor.send(SubmitWord("crack"))
            assert snapshot.is_validating
            actor.send(Submit())

            dictionary.gate.set()
            assert actor.wait_until_ready(timeout=5)
            assert dictionary.calls == ["RACK"]
            assert actor.snapshot().score == 1

    def test_new_puzzle_mid_validation_discards_result(self):
        """Test a late result for the old puzzle does not score."""
        dictionary = GatedDictionary(["rack"])
        with PangramActor(dictionary) as actor:
            actor.send(SubmitWord("rack"))
            assert dictionary.started.wait(timeout=5)

            snapshot = actor.send(NewPuzzle())
            assert snapshot.state is MachineState.READY
            assert snapshot.puzzle_index == 1

            completed = threading.Event()
            actor.add_listener(lambda event, snap: completed.set())
            dictionary.gate.set()
            assert completed.wait(timeout=5)

            snapshot = actor.snapshot()
            assert snapshot.puzzle_index == 1
            assert snapshot.score == 0
            assert snapshot.found_words == ()

    def test_wait_times_out(self):
        """Test wait_until_ready reports a timeout."""
        dictionary = GatedDictionary(["rack"])
        with PangramActor(dictionary) as actor:
            actor.send(SubmitWord("rack"))
            assert actor.wait_until_ready(timeout=0.05) is False
            dictionary.gate.set()
            assert actor.wait_until_ready(timeout=5)

    def test_stopped_actor_does_not_stay_validating(self):
        """Test a submit after stop() fails the check instead of hanging."""
        dictionary = CountingDictionary(["rack"])
        actor = PangramActor(dictionary)
        actor.stop()

        actor.send(SubmitWord("rack"))

        snapshot = actor.snapshot()
        assert snapshot.state is MachineState.READY
        assert snapshot.last_message == "Failed to validate word"
        assert dictionary.calls == []

    def test_unschedulable_check_returns_to_ready(self):
        """Test an executor that refuses work fails the check."""
        executor = ThreadPoolExecutor(max_workers=1)
        executor.shutdown()
        actor = PangramActor(CountingDictionary(["rack"]), executor=executor)

        actor.send(SubmitWord("rack"))

        snapshot = actor.snapshot()
        assert snapshot.state is MachineState.READY
        assert snapshot.last_message_kind is MessageKind.ERROR
        assert snapshot.score == 0
        actor.send(SubmitWord("rack"))
        assert actor.state is MachineState.READY

    def test_cancelled_check_returns_to_ready(self):
        """Test stop() cancelling a queued lookup fails that check."""
        dictionary = GatedDictionary(["rack", "play"])
        actor = PangramActor(dictionary)
        try:
            actor.send(SubmitWord("rack"))
            assert dictionary.started.wait(timeout=5)

            # Queued behind the blocked lookup on the single worker
            actor.send(NewPuzzle())
            assert actor.send(SubmitWord("play")).is_validating

            actor.stop()
            assert actor.wait_until_ready(timeout=5)
            snapshot = actor.snapshot()
            assert snapshot.last_message == "Failed to validate word"
            assert snapshot.found_words == ()
        finally:
            dictionary.gate.set()

    def test_listeners_see_events_in_transition_order(self):
        """Test a completion is never reported before input applied earlier."""
        dictionary = GatedDictionary(["rack"])
        records = []
        with PangramActor(dictionary) as actor:
            actor.add_listener(lambda event, snap: records.append((event.type, snap.state, snap.score)))
            actor.send(SubmitWord("rack"))
            assert dictionary.started.wait(timeout=5)

            def type_letters():
                for _ in range(200):
                    actor.send(AddLetter("r"))

            typist = threading.Thread(target=type_letters)
            typist.start()
            dictionary.gate.set()
            typist.join(timeout=5)
            assert actor.wait_until_ready(timeout=5)

        scores = [score for _, _, score in records]
        assert scores == sorted(scores)
        checked_at = [t for t, _, _ in records].index("WORD_CHECKED")
        assert all(state is MachineState.READY for _, state, _ in records[checked_at:])
