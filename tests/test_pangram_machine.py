"""Tests for the pure Pangram state machine."""

import pytest

from pangram.catalog import PUZZLES, get_puzzle
from pangram.machine import (
    AddLetter,
    CheckWord,
    Clear,
    DeleteLast,
    MachineState,
    MessageKind,
    NewPuzzle,
    Submit,
    SubmitWord,
    WordCheckFailed,
    WordChecked,
    context_to_dict,
    event_from_dict,
    initial_context,
    transition,
)


def type_word(state, context, word):
    for letter in word:
        result = transition(state, context, AddLetter(letter))
        state, context = result.state, result.context
    return state, context


def accept(state, context, effect, exists=True):
    """Answer a CheckWord effect the way the actor would."""
    return transition(state, context, WordChecked(epoch=effect.epoch, word=effect.word, exists=exists))


class TestComposition:
    """Test cases for typing and editing input."""

    def setup_method(self):
        """Setup for each test."""
        self.state = MachineState.READY
        self.context = initial_context(0)

    def test_initial_context(self):
        """Test a fresh game starts READY with an empty board."""
        assert self.context.letters == ("R", "A", "C", "K", "I", "N", "G")
        assert self.context.center == "K"
        assert self.context.score == 0
        assert self.context.found_words == ()
        assert self.context.epoch == 0

    def test_add_letter_uppercases(self):
        """Test letters are appended in uppercase."""
        state, context = type_word(self.state, self.context, "rack")
        assert state is MachineState.READY
        assert context.pending_input == "RACK"

    def test_add_letter_ignores_outside_letters(self):
        """Test letters outside the puzzle are ignored."""
        _, context = type_word(self.state, self.context, "rxz")
        assert context.pending_input == "R"

    def test_delete_last_and_clear(self):
        """Test editing the pending input."""
        state, context = type_word(self.state, self.context, "rack")
        context = transition(state, context, DeleteLast()).context
        assert context.pending_input == "RAC"
        context = transition(state, context, Clear()).context
        assert context.pending_input == ""

    def test_delete_on_empty_is_noop(self):
        """Test deleting with no input changes nothing."""
        result = transition(self.state, self.context, DeleteLast())
        assert result.context == self.context
        assert result.effects == ()

    def test_transition_is_pure(self):
        """Test the same inputs give the same transition."""
        first = transition(self.state, self.context, AddLetter("k"))
        second = transition(self.state, self.context, AddLetter("k"))
        assert first == second
        assert self.context.pending_input == ""


class TestSubmission:
    """Test cases for SUBMIT and SUBMIT_WORD."""

    def setup_method(self):
        """Setup for each test."""
        self.state = MachineState.READY
        self.context = initial_context(0)

    def test_submit_too_short_keeps_input(self):
        """Test submitting under 4 letters is an error that keeps the input."""
        state, context = type_word(self.state, self.context, "rak")
        result = transition(state, context, Submit())
        assert result.state is MachineState.READY
        assert result.context.pending_input == "RAK"
        assert result.context.last_message == "Word must be at least 4 letters"
        assert result.context.last_message_kind is MessageKind.ERROR
        assert result.effects == ()

    def test_submit_valid_word_requests_check(self):
        """Test a locally valid word moves to VALIDATING with one CheckWord effect."""
        state, context = type_word(self.state, self.context, "rack")
        result = transition(state, context, Submit())
        assert result.state is MachineState.VALIDATING
        assert result.effects == (CheckWord(word="RACK", epoch=0),)

    def test_submit_missing_center_is_rejected_locally(self):
        """Test local rule failures never reach the dictionary."""
        state, context = type_word(self.state, self.context, "grain")
        result = transition(state, context, Submit())
        assert result.state is MachineState.READY
        assert result.effects == ()
        assert result.context.last_message == "Must include center letter: K"
        assert result.context.pending_input == ""

    def test_submit_word_filters_letters(self):
        """Test SUBMIT_WORD keeps only puzzle letters."""
        result = transition(self.state, self.context, SubmitWord("r-a-c-k!"))
        assert result.state is MachineState.VALIDATING
        assert result.effects[0].word == "RACK"

    def test_submit_word_xxxx_is_rejected(self):
        """Test a word with no puzzle letters is rejected without a check."""
        result = transition(self.state, self.context, SubmitWord("XXXX"))
        assert result.state is MachineState.READY
        assert result.effects == ()
        assert result.context.last_message == "Word must be at least 4 valid letters"
        assert result.context.score == 0

    def test_rack_then_cracking(self):
        """Test scoring a regular word then a pangram."""
        result = transition(self.state, self.context, SubmitWord("rack"))
        result = accept(result.state, result.context, result.effects[0])
        assert result.state is MachineState.READY
        assert result.context.score == 1
        assert result.context.last_message == "+1 point"
        assert result.context.last_message_kind is MessageKind.SUCCESS

        result = transition(result.state, result.context, SubmitWord("cracking"))
        result = accept(result.state, result.context, result.effects[0])
        assert result.context.score == 16
        assert result.context.found_words == ("cracking", "rack")
        assert result.context.last_message == "PANGRAM! +15 points!"
        assert result.context.last_message_kind is MessageKind.PANGRAM
        assert result.context.pending_input == ""

    def test_unknown_word(self):
        """Test a dictionary miss is an error with no score change."""
        result = transition(self.state, self.context, SubmitWord("kirn"))
        result = accept(result.state, result.context, result.effects[0], exists=False)
        assert result.state is MachineState.READY
        assert result.context.score == 0
        assert result.context.last_message == "Not a valid English word"
        assert result.context.pending_input == ""

    def test_check_failure(self):
        """Test a failed lookup returns to READY with an error."""
        result = transition(self.state, self.context, SubmitWord("rack"))
        result = transition(result.state, result.context, WordCheckFailed(epoch=0, word="RACK", error="boom"))
        assert result.state is MachineState.READY
        assert result.context.last_message == "Failed to validate word"
        assert result.context.found_words == ()

    def test_duplicate_submission_is_idempotent(self):
        """Test a found word cannot score twice."""
        result = transition(self.state, self.context, SubmitWord("rack"))
        result = accept(result.state, result.context, result.effects[0])
        again = transition(result.state, result.context, SubmitWord("RACK"))
        assert again.state is MachineState.READY
        assert again.effects == ()
        assert again.context.score == 1
        assert again.context.found_words == ("rack",)
        assert again.context.last_message == "Already found!"


class TestScoreNeverDecreases:
    """Test cases for score monotonicity within one puzzle."""

    # (submitted word, dictionary answer: True, False or "fail")
    SCRIPT = [
        ("rack", True),
        ("rack", True),
        ("kirn", False),
        ("crack", "fail"),
        ("rak", True),
        ("xxxx", True),
        ("crack", True),
        ("gnar", True),
        ("crack", True),
        ("cracking", True),
        ("racking", "fail"),
        ("cracking", True),
    ]

    def test_mixed_sequence(self):
        """Test accepted, duplicate, unknown, failed and short submissions never lower the score."""
        state, context = MachineState.READY, initial_context(0)
        scores = [context.score]

        for word, answer in self.SCRIPT:
            result = transition(state, context, SubmitWord(word))
            for effect in result.effects:
                # A late answer for another epoch first, which must be ignored
                stale = WordChecked(epoch=effect.epoch + 1, word="CRACKING", exists=True)
                result = transition(result.state, result.context, stale)
                if answer == "fail":
                    failed = WordCheckFailed(epoch=effect.epoch, word=effect.word, error="offline")
                    result = transition(result.state, result.context, failed)
                else:
                    result = accept(result.state, result.context, effect, exists=answer)
            state, context = result.state, result.context
            assert state is MachineState.READY
            scores.append(context.score)

        assert scores == sorted(scores)
        assert context.score == 1 + 5 + 15
        assert context.found_words == ("crack", "cracking", "rack")


class TestValidating:
    """Test cases for events arriving during VALIDATING."""

    def setup_method(self):
        """Setup for each test."""
        result = transition(MachineState.READY, initial_context(0), SubmitWord("rack"))
        self.state = result.state
        self.context = result.context

    @pytest.mark.parametrize("event", [
        AddLetter("R"), DeleteLast(), Clear(), Submit(), SubmitWord("crack"),
    ])
    def test_input_events_are_ignored(self, event):
        """Test only one validation is in flight at a time."""
        result = transition(self.state, self.context, event)
        assert result.state is MachineState.VALIDATING
        assert result.context == self.context
        assert result.effects == ()

    def test_stale_epoch_is_discarded(self):
        """Test a completion from an earlier epoch changes nothing."""
        result = transition(self.state, self.context, WordChecked(epoch=-1, word="RACK", exists=True))
        assert result.state is MachineState.VALIDATING
        assert result.context.score == 0


class TestNewPuzzle:
    """Test cases for NEW_PUZZLE."""

    def test_new_puzzle_advances_and_resets(self):
        """Test the next puzzle starts fresh with a new epoch."""
        result = transition(MachineState.READY, initial_context(0), SubmitWord("rack"))
        result = accept(result.state, result.context, result.effects[0])
        result = transition(result.state, result.context, NewPuzzle())
        assert result.state is MachineState.READY
        assert result.context.puzzle_index == 1
        assert result.context.letters == get_puzzle(1).letters
        assert result.context.score == 0
        assert result.context.found_words == ()
        assert result.context.epoch == 1

    def test_new_puzzle_wraps(self):
        """Test the last puzzle wraps to the first."""
        result = transition(MachineState.READY, initial_context(len(PUZZLES) - 1), NewPuzzle())
        assert result.context.puzzle_index == 0

    def test_new_puzzle_during_validation_drops_old_result(self):
        """Test the pending lookup cannot score on the new puzzle."""
        pending = transition(MachineState.READY, initial_context(0), SubmitWord("rack"))
        effect = pending.effects[0]
        fresh = transition(pending.state, pending.context, NewPuzzle())
        assert fresh.state is MachineState.READY

        late = accept(fresh.state, fresh.context, effect)
        assert late.state is MachineState.READY
        assert late.context == fresh.context

    def test_stale_result_during_new_validation(self):
        """Test an old-epoch result cannot resolve a newer validation."""
        pending = transition(MachineState.READY, initial_context(0), SubmitWord("rack"))
        old_effect = pending.effects[0]
        fresh = transition(pending.state, pending.context, NewPuzzle())
        # Puzzle 1 is PLAYING, center Y
        current = transition(fresh.state, fresh.context, SubmitWord("play"))
        assert current.effects[0].epoch == 1

        late = accept(current.state, current.context, old_effect)
        assert late.state is MachineState.VALIDATING
        assert late.context.score == 0


class TestWireForm:
    """Test cases for dict events and snapshots."""

    def test_event_from_dict(self):
        """Test wire events map to event objects."""
        assert event_from_dict({"type": "ADD_LETTER", "letter": "r"}) == AddLetter("r")
        assert event_from_dict({"type": "submit_word", "word": "rack"}) == SubmitWord("rack")
        assert event_from_dict({"type": "DELETE_LETTER"}) == DeleteLast()
        assert event_from_dict({"type": "NEW_PUZZLE"}) == NewPuzzle()

    def test_unknown_event_type(self):
        """Test unknown event types raise ValueError."""
        with pytest.raises(ValueError):
            event_from_dict({"type": "SHUFFLE"})

    def test_context_to_dict(self):
        """Test the wire snapshot."""
        data = context_to_dict(MachineState.READY, initial_context(0))
        assert data["state"] == "ready"
        assert data["letters"] == ["R", "A", "C", "K", "I", "N", "G"]
        assert data["center"] == "K"
        assert data["last_message_kind"] == "info"
