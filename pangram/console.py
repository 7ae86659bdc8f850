"""Human console adapter: turns typed lines into events and draws snapshots."""

from typing import List

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from pangram.actor import Snapshot
from pangram.machine import AddLetter, Clear, DeleteLast, Event, MessageKind, NewPuzzle, Submit

NEW_PUZZLE_COMMAND = "/new"
DELETE_KEY = "-"
CLEAR_KEY = "!"

MESSAGE_STYLES = {
    MessageKind.INFO: "dim",
    MessageKind.SUCCESS: "bold green",
    MessageKind.ERROR: "bold red",
    MessageKind.PANGRAM: "bold magenta",
}


def events_from_keys(line: str) -> List[Event]:
    """Translate one line of console input into game events.

    Letters are typed, `-` deletes the last letter and `!` clears the input.
    Pressing Enter submits, unless the line ended on an editing key. A bare
    Enter submits whatever is pending. `/new` skips to the next puzzle.
    """
    text = line.strip()
    if text.lower() == NEW_PUZZLE_COMMAND:
        return [NewPuzzle()]

    events: List[Event] = []
    last_key = ""
    for ch in text:
        if ch.isalpha():
            events.append(AddLetter(ch))
        elif ch == DELETE_KEY:
            events.append(DeleteLast())
        elif ch == CLEAR_KEY:
            events.append(Clear())
        else:
            continue
        last_key = ch

    if last_key not in (DELETE_KEY, CLEAR_KEY):
        events.append(Submit())
    return events


def _hive(snapshot: Snapshot) -> Text:
    hive = Text()
    for letter in snapshot.letters:
        if letter == snapshot.center:
            hive.append(f"[{letter}]", style="bold black on yellow")
        else:
            hive.append(f" {letter} ", style="bold")
        hive.append(" ")
    return hive


def render_snapshot(snapshot: Snapshot) -> Panel:
    """Rich renderable for the current game."""
    input_line = Text("> ")
    input_line.append(snapshot.pending_input or "", style="bold cyan")
    if snapshot.is_validating:
        input_line.append("  checking...", style="yellow")

    score_line = Text(f"Score: {snapshot.score}   Words: {len(snapshot.found_words)}", style="green")

    found = ", ".join(w.upper() for w in snapshot.found_words) or "-"
    found_line = Text(f"Found: {found}", style="dim")

    parts = [_hive(snapshot), Text(""), input_line, score_line, found_line]
    if snapshot.last_message:
        parts.append(Text(snapshot.last_message, style=MESSAGE_STYLES.get(snapshot.last_message_kind, "")))

    return Panel(
        Group(*parts),
        title=f"🐝 Pangram #{snapshot.puzzle_index}",
        subtitle="letters + Enter to submit | - delete | ! clear | /new | /quit",
    )
