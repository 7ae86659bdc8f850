"""Pangram: a seven-letter word game for humans and LLM agents.

Find words that use the center letter and only the puzzle's seven letters.
Four-letter words score 1, longer words score their length, and a pangram
(a word using all seven letters) earns a 7 point bonus.

The game is a small state machine (`pangram.machine`) driven by a
single-writer actor (`pangram.actor`); humans and agents send it the same
events.
"""

from pangram.actor import PangramActor, Snapshot
from pangram.catalog import PUZZLES, Puzzle, create_custom_puzzle, get_puzzle, get_random_puzzle
from pangram.machine import MachineState, MessageKind, transition

__version__ = "0.1.0"

__all__ = [
    "PangramActor",
    "Snapshot",
    "PUZZLES",
    "Puzzle",
    "create_custom_puzzle",
    "get_puzzle",
    "get_random_puzzle",
    "MachineState",
    "MessageKind",
    "transition",
]
