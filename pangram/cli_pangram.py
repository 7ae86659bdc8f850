"""CLI subcommand for the Pangram game."""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

import typer
from rich.console import Console
from rich.table import Table

from pangram.actor import PangramActor
from pangram.agent import CandidatePlayer
from pangram.benchmark import PangramBenchmark
from pangram.catalog import PUZZLES, Puzzle, get_puzzle, get_random_puzzle, load_puzzles
from pangram.console import events_from_keys, render_snapshot
from pangram.dictionary import build_dictionary
from pangram.machine import Submit
from pangram.player import AIPlayer
from pangram.rules import generate_state_text
from shared.adapters.openrouter_adapter import _load_model_mappings, flatten_mappings
from shared.utils.logging import log_summary, setup_logging

app = typer.Typer(help="Run Pangram word games for humans and AI agents")
console = Console()

QUIT_COMMANDS = ("/quit", "/exit")


def _load_catalog(puzzles_file: Optional[str]) -> Sequence[Puzzle]:
    if not puzzles_file:
        return PUZZLES
    try:
        return load_puzzles(puzzles_file)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error loading puzzles: {e}[/red]")
        raise typer.Exit(1)


def _pick_puzzle_index(puzzle: Optional[int], seed: Optional[int], catalog: Sequence[Puzzle]) -> int:
    if puzzle is not None:
        return puzzle % len(catalog)
    chosen = get_random_puzzle(seed, catalog)
    return list(catalog).index(chosen)


def _validate_api_key_and_model(model: str) -> None:
    """Validate that the API key is present and the model name is known."""
    if not os.getenv("OPENROUTER_API_KEY"):
        console.print("[red]Error: OPENROUTER_API_KEY environment variable not set[/red]")
        console.print("[yellow]Try `source .env` if running locally[/yellow]")
        raise typer.Exit(1)

    available_models = flatten_mappings(_load_model_mappings())
    if model not in available_models and "/" not in model:
        console.print(f"[red]Error: Invalid model name: '{model}'[/red]")
        console.print("\n[yellow]Available models:[/yellow]")
        for m in sorted(available_models)[:10]:
            console.print(f"[yellow]  {m}[/yellow]")
        console.print("\n[yellow]Use 'bench pangram list-models' for full list[/yellow]")
        raise typer.Exit(1)


def _write_output(result: dict, output: Optional[str]) -> None:
    if not output:
        return
    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(result, f, indent=2)
    console.print(f"\n[green]Results written to {output_path}[/green]")


def _run_benchmark(
    player,
    dictionary_path: Optional[str],
    puzzle_index: int,
    catalog: Sequence[Puzzle],
    max_steps: int,
    words_per_step: int,
    log_path: str,
    run_label: str,
    quiet: bool,
) -> dict:
    logger = logging.getLogger(__name__)
    run_id = f"{datetime.now(timezone.utc).strftime('%Y-%m-%dT%H-%M-%S')}_pangram_{run_label}"

    benchmark = PangramBenchmark(
        player=player,
        dictionary=build_dictionary(dictionary_path),
        puzzle_index=puzzle_index,
        max_steps=max_steps,
        words_per_step=words_per_step,
        catalog=catalog,
        quiet=quiet,
    )
    benchmark.init_controllog(Path(log_path), run_id)

    try:
        result = benchmark.run()
    except Exception as e:
        logger.error(f"Benchmark failed: {e}")
        console.print(f"[red]Benchmark failed: {e}[/red]")
        raise typer.Exit(1)

    log_summary(logger, result["metrics"], f"Pangram benchmark {result['game_id']} summary")
    return result


@app.command()
def run(
    model: str = typer.Option(..., "--model", "-m", help="Model to benchmark"),
    puzzle: Optional[int] = typer.Option(None, "--puzzle", "-p", help="Puzzle index (random if omitted)"),
    seed: Optional[int] = typer.Option(None, help="Seed for picking a random puzzle"),
    max_steps: int = typer.Option(10, help="Maximum observe/submit rounds"),
    words_per_step: int = typer.Option(10, help="Words requested from the model per round"),
    dictionary: Optional[str] = typer.Option(
        None, "--dictionary", "-d", help="Local word list (one word per line); defaults to $PANGRAM_DICTIONARY"
    ),
    puzzles_file: Optional[str] = typer.Option(None, help="YAML puzzle catalog to use instead of the built-in one"),
    prompt_file: Optional[str] = typer.Option(None, help="Player prompt template"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the result as JSON to this file"),
    log_path: str = typer.Option("logs/pangram", help="Directory for log files"),
    quiet: bool = typer.Option(False, help="Only print the final result"),
    verbose: bool = typer.Option(False, help="Enable verbose logging"),
):
    """Benchmark an LLM on a Pangram puzzle.

    The model sees the game state, proposes words, and gets feedback on which
    were accepted. Efficiency is points per 1k tokens.
    """
    _validate_api_key_and_model(model)
    catalog = _load_catalog(puzzles_file)

    log_dir = Path(log_path)
    log_dir.mkdir(parents=True, exist_ok=True)
    setup_logging(log_dir, verbose)

    try:
        player = AIPlayer(model, prompt_file=prompt_file)
    except Exception as e:
        console.print(f"[red]Error creating player: {e}[/red]")
        raise typer.Exit(1)

    puzzle_index = _pick_puzzle_index(puzzle, seed, catalog)
    result = _run_benchmark(
        player, dictionary, puzzle_index, catalog, max_steps, words_per_step, log_path, model, quiet
    )
    _write_output(result, output)


@app.command()
def agent(
    puzzle: int = typer.Option(0, "--puzzle", "-p", help="Puzzle index"),
    words: Optional[str] = typer.Option(None, help="Comma-separated candidate words"),
    words_file: Optional[str] = typer.Option(None, help="File with one candidate word per line"),
    words_per_step: int = typer.Option(10, help="Candidates submitted per round"),
    max_steps: int = typer.Option(10, help="Maximum rounds"),
    dictionary: Optional[str] = typer.Option(
        None, "--dictionary", "-d", help="Local word list (one word per line); defaults to $PANGRAM_DICTIONARY"
    ),
    puzzles_file: Optional[str] = typer.Option(None, help="YAML puzzle catalog to use instead of the built-in one"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the result as JSON to this file"),
    log_path: str = typer.Option("logs/pangram", help="Directory for log files"),
    quiet: bool = typer.Option(False, help="Only print the final result"),
    verbose: bool = typer.Option(False, help="Enable verbose logging"),
):
    """Run the offline candidate-list agent (no API key needed)."""
    catalog = _load_catalog(puzzles_file)

    log_dir = Path(log_path)
    log_dir.mkdir(parents=True, exist_ok=True)
    setup_logging(log_dir, verbose)

    candidates: Optional[List[str]] = None
    if words:
        candidates = [w.strip() for w in words.split(",") if w.strip()]
    elif words_file:
        try:
            with open(words_file, "r") as f:
                candidates = [line.strip() for line in f if line.strip()]
        except OSError as e:
            console.print(f"[red]Error reading words file: {e}[/red]")
            raise typer.Exit(1)

    player = CandidatePlayer(candidates)
    result = _run_benchmark(
        player, dictionary, puzzle % len(catalog), catalog, max_steps, words_per_step,
        log_path, "candidates", quiet,
    )
    _write_output(result, output)


@app.command()
def play(
    puzzle: int = typer.Option(0, "--puzzle", "-p", help="Puzzle index"),
    dictionary: Optional[str] = typer.Option(
        None, "--dictionary", "-d", help="Local word list (one word per line); defaults to $PANGRAM_DICTIONARY"
    ),
    puzzles_file: Optional[str] = typer.Option(None, help="YAML puzzle catalog to use instead of the built-in one"),
    log_path: str = typer.Option("logs/pangram", help="Directory for log files"),
    verbose: bool = typer.Option(False, help="Enable verbose logging"),
):
    """Play Pangram interactively in the terminal."""
    catalog = _load_catalog(puzzles_file)

    log_dir = Path(log_path)
    log_dir.mkdir(parents=True, exist_ok=True)
    setup_logging(log_dir, verbose)

    with PangramActor(build_dictionary(dictionary), puzzle % len(catalog), catalog) as actor:
        console.print(render_snapshot(actor.snapshot()))
        while True:
            try:
                line = console.input("[bold]> [/bold]")
            except (EOFError, KeyboardInterrupt):
                break
            if line.strip().lower() in QUIT_COMMANDS:
                break

            for event in events_from_keys(line):
                actor.send(event)
                if isinstance(event, Submit):
                    with console.status("Checking word..."):
                        actor.wait_until_ready(timeout=30)

            console.print(render_snapshot(actor.snapshot()))

        final = actor.snapshot()

    console.print(f"\n[bold]Final score:[/bold] {final.score} ({len(final.found_words)} words)")


@app.command()
def list_puzzles(
    puzzles_file: Optional[str] = typer.Option(None, help="YAML puzzle catalog to use instead of the built-in one"),
):
    """List the puzzles in the catalog."""
    catalog = _load_catalog(puzzles_file)

    table = Table(title="Pangram Puzzles")
    table.add_column("#", style="cyan")
    table.add_column("Letters", style="green")
    table.add_column("Center", style="yellow")

    for i, p in enumerate(catalog):
        table.add_row(str(i), " ".join(p.letters), p.center)

    console.print(table)
    console.print(f"\n✨ Total: {len(catalog)} puzzles")


@app.command()
def list_models():
    """List available AI models for Pangram."""
    try:
        model_mappings = flatten_mappings(_load_model_mappings())

        table = Table(title="Available AI Models")
        table.add_column("CLI Name", style="cyan", min_width=15)
        table.add_column("OpenRouter Model ID", style="magenta", min_width=30)
        table.add_column("Provider", style="green", min_width=12)

        for model_name in sorted(model_mappings.keys()):
            model_id = model_mappings[model_name]
            provider = model_id.split("/")[0] if "/" in model_id else "Unknown"
            table.add_row(model_name, model_id, provider)

        console.print(table)
        console.print(f"\n✨ Total: {len(model_mappings)} models available")
        console.print("\n💡 Usage: [bold]bench pangram run --model [model][/bold]")

    except Exception as e:
        console.print(f"[red]Error loading models: {e}[/red]")


@app.command()
def prompt(
    puzzle: int = typer.Option(0, "--puzzle", "-p", help="Puzzle index"),
    max_words: int = typer.Option(10, help="Words requested per turn"),
    prompt_file: Optional[str] = typer.Option(None, help="Player prompt template"),
    puzzles_file: Optional[str] = typer.Option(None, help="YAML puzzle catalog to use instead of the built-in one"),
):
    """Print the prompt a model would receive on its first turn."""
    catalog = _load_catalog(puzzles_file)
    chosen = get_puzzle(puzzle, catalog)

    state = {
        "letters": list(chosen.letters),
        "center_letter": chosen.center,
        "score": 0,
        "found_words": [],
    }
    state["state_text"] = generate_state_text(state["letters"], chosen.center, [], 0)

    player = AIPlayer("prompt-preview", prompt_file=prompt_file)
    text = player.build_prompt(state, "", max_words)

    console.print(f"[bold cyan]Player prompt for puzzle #{puzzle % len(catalog)}[/bold cyan]\n")
    console.print(text, markup=False, highlight=False)
