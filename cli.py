"""Command-line interface for the word-game benchmark.

This is the unified CLI entry point:
- `bench pangram` - Play Pangram or benchmark agents on it
- `bench version` - Show version information
"""

import typer
from rich.console import Console

from pangram.cli_pangram import app as pangram_app

# Main application
app = typer.Typer(
    help="Word-game benchmark for humans and LLM agents",
    no_args_is_help=True,
)
console = Console()

# Register subcommands
app.add_typer(pangram_app, name="pangram", help="Play Pangram or benchmark agents on it")


@app.callback()
def main():
    """Word-game benchmark.

    Examples:

        # Play in the terminal
        bench pangram play --puzzle 0

        # Benchmark a model (needs OPENROUTER_API_KEY)
        bench pangram run --model gemini-flash --output results.json

        # Run the offline candidate agent against a local word list
        bench pangram agent --dictionary words.txt
    """
    pass


@app.command()
def version():
    """Show version information."""
    from pangram import __version__ as pangram_version
    from shared import __version__ as shared_version

    console.print("[bold]Word-game benchmark[/bold]")
    console.print(f"  pangram: {pangram_version}")
    console.print(f"  shared: {shared_version}")


if __name__ == "__main__":
    app()
