"""Benchmark runner: plays one Pangram game with a player and scores it
against token cost.

The runner only talks to the game through the event API (observe and
SUBMIT_WORD), exactly like a human UI would.
"""

import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from pangram.actor import PangramActor
from pangram.agent import SubmitOutcome, observe, submit_word
from pangram.catalog import PUZZLES, Puzzle
from pangram.rules import generate_state_text, is_pangram
from shared import controllog as cl
from shared.utils.timing import Timer

console = Console()
logger = logging.getLogger(__name__)

PROJECT_ID = "pangram"


def compute_efficiency(score: int, total_tokens: int) -> float:
    """Points per 1k tokens; 0.0 when no tokens were spent."""
    if total_tokens <= 0:
        return 0.0
    return score / (total_tokens / 1000)


def format_feedback(outcomes: Sequence[SubmitOutcome]) -> str:
    """Summarize submissions for the player's next prompt."""
    if not outcomes:
        return ""
    lines = []
    for outcome in outcomes:
        if outcome.accepted:
            lines.append(f"- {outcome.word.upper()}: ACCEPTED (+{outcome.points_earned}) {outcome.message}")
        elif outcome.timed_out:
            lines.append(f"- {outcome.word.upper()}: TIMED OUT (no result yet)")
        else:
            lines.append(f"- {outcome.word.upper()}: REJECTED ({outcome.message})")
    return "\n".join(lines)


class PangramBenchmark:
    """Run a player against one puzzle and report score, tokens and efficiency."""

    VERSION = "1.0.0"

    def __init__(
        self,
        player,
        dictionary,
        puzzle_index: int = 0,
        max_steps: int = 10,
        words_per_step: int = 10,
        catalog: Sequence[Puzzle] = PUZZLES,
        submit_timeout: Optional[float] = 30.0,
        quiet: bool = False,
    ):
        self.player = player
        self.dictionary = dictionary
        self.puzzle_index = puzzle_index
        self.max_steps = max_steps
        self.words_per_step = words_per_step
        self.catalog = catalog
        self.submit_timeout = submit_timeout
        self.quiet = quiet

        # Metrics
        self.tool_calls: Dict[str, int] = {"observe": 0, "submit_word": 0}
        self.input_tokens = 0
        self.output_tokens = 0
        self.iterations = 0
        self.total_cost: float = 0.0
        self.total_upstream_cost: float = 0.0
        self.submissions: List[SubmitOutcome] = []

        self.game_id = str(uuid.uuid4())[:8]

        # Controllog state
        self._controllog_initialized = False
        self._run_id: Optional[str] = None
        self._task_id: Optional[str] = None

    @property
    def model_name(self) -> str:
        return getattr(self.player, "model_name", "unknown")

    def _print(self, *args, **kwargs):
        """Print to console unless in quiet mode."""
        if not self.quiet:
            console.print(*args, **kwargs)

    def init_controllog(self, log_path: Path, run_id: str) -> None:
        """Initialize controllog SDK for unified analytics."""
        try:
            cl.init(project_id=PROJECT_ID, log_dir=log_path)
            self._controllog_initialized = True
            self._run_id = run_id
            self._task_id = f"game:{self.game_id}"
            logger.info(f"Controllog initialized for game {self.game_id}")
        except OSError as e:
            logger.warning(f"Failed to initialize controllog: {e}")
            self._controllog_initialized = False

    def _emit_state_move(self, from_state: str, to_state: str, payload: Optional[Dict] = None) -> None:
        if not self._controllog_initialized:
            return
        try:
            cl.state_move(
                task_id=self._task_id,
                from_=from_state,
                to=to_state,
                project_id=PROJECT_ID,
                agent_id="agent:pangram",
                run_id=self._run_id,
                payload=payload or {"game_id": self.game_id},
            )
        except Exception as e:
            logger.debug(f"Failed to emit state move: {e}")

    def _emit_model_events(self, metadata: Dict) -> None:
        if not self._controllog_initialized:
            return
        try:
            exchange_id = cl.new_id()
            model_id = metadata.get("model_id", self.model_name)
            agent_id = f"agent:pangram:{metadata.get('call_type', 'player')}"
            payload = {"game_id": self.game_id, "step": self.iterations}

            cl.model_prompt(
                task_id=self._task_id,
                agent_id=agent_id,
                run_id=self._run_id,
                project_id=PROJECT_ID,
                provider="openrouter",
                model=model_id,
                prompt_tokens=metadata.get("input_tokens", 0),
                payload=payload,
                exchange_id=exchange_id,
                request_text=metadata.get("request_text"),
            )
            cl.model_completion(
                task_id=self._task_id,
                agent_id=agent_id,
                run_id=self._run_id,
                project_id=PROJECT_ID,
                provider="openrouter",
                model=model_id,
                completion_tokens=metadata.get("output_tokens", 0),
                wall_ms=int(metadata.get("latency_ms", 0)),
                cost_money=metadata.get("openrouter_cost"),
                upstream_cost_money=metadata.get("upstream_cost"),
                payload=payload,
                exchange_id=exchange_id,
                response_text=metadata.get("response_text"),
            )
        except Exception as e:
            logger.debug(f"Failed to emit model events: {e}")

    def _emit_utility(self, outcome: SubmitOutcome) -> None:
        if not self._controllog_initialized or not outcome.accepted:
            return
        try:
            cl.utility(
                task_id=self._task_id,
                agent_id=f"agent:{self.model_name}",
                value=outcome.points_earned,
                project_id=PROJECT_ID,
                run_id=self._run_id,
                payload={"game_id": self.game_id, "word": outcome.word},
            )
        except Exception as e:
            logger.debug(f"Failed to emit utility: {e}")

    def _observe(self, actor: PangramActor) -> Dict[str, Any]:
        self.tool_calls["observe"] += 1
        state = observe(actor)
        state["state_text"] = generate_state_text(
            state["letters"], state["center_letter"], state["found_words"], state["score"]
        )
        return state

    def _record_calls(self) -> None:
        """Add token usage and cost of the player's latest calls."""
        if hasattr(self.player, "drain_call_metadata"):
            calls = self.player.drain_call_metadata()
        else:
            last = self.player.get_last_call_metadata()
            calls = [last] if last else []

        for metadata in calls:
            self.input_tokens += metadata.get("input_tokens", 0) or 0
            self.output_tokens += metadata.get("output_tokens", 0) or 0
            self.total_cost += metadata.get("openrouter_cost", 0.0) or 0.0
            self.total_upstream_cost += metadata.get("upstream_cost", 0.0) or 0.0
            self._emit_model_events(metadata)

    def _submit(self, actor: PangramActor, word: str) -> SubmitOutcome:
        self.tool_calls["submit_word"] += 1
        outcome = submit_word(actor, word, timeout=self.submit_timeout)
        self.submissions.append(outcome)

        if outcome.accepted:
            self._print(f"[green]  ✓ [+{outcome.points_earned}] {word.upper()}[/green]")
        else:
            self._print(f"[dim]  ✗ {word} ({outcome.message})[/dim]")
        self._emit_utility(outcome)
        return outcome

    def run(self) -> Dict[str, Any]:
        """Play until the player stops proposing words or steps run out."""
        logger.info(f"Starting Pangram benchmark {self.game_id} with {self.model_name}")
        self._emit_state_move("NEW", "WIP", {
            "game_id": self.game_id,
            "model": self.model_name,
            "puzzle_index": self.puzzle_index,
        })

        with Timer() as timer, PangramActor(self.dictionary, self.puzzle_index, self.catalog) as actor:
            initial = actor.snapshot()
            self._print("[bold]🐝 Pangram Benchmark[/bold]")
            self._print(f"[cyan]Model:[/cyan] {self.model_name}")
            self._print(f"[cyan]Puzzle:[/cyan] #{initial.puzzle_index} "
                        f"{' '.join(initial.letters)} (center: {initial.center})")
            self._print(f"[green]Game ID:[/green] {self.game_id}\n")

            feedback = ""
            for step in range(self.max_steps):
                state = self._observe(actor)
                words = self.player.get_words(state, feedback, self.words_per_step)
                self.iterations += 1
                self._record_calls()

                if not words:
                    logger.info(f"Player returned no words at step {step + 1}, stopping")
                    break

                outcomes = [self._submit(actor, word) for word in words]
                feedback = format_feedback(outcomes)

            final = actor.snapshot()

        result = self._build_result(final.score, list(final.found_words), list(final.letters), timer.elapsed)
        self._display_results(result)

        self._emit_state_move("WIP", "DONE", {
            "game_id": self.game_id,
            "score": result["game"]["score"],
            "duration_sec": result["metrics"]["duration"],
        })
        self._emit_complete(result)

        logger.info(
            f"Benchmark completed. Score: {result['game']['score']}, "
            f"Tokens: {result['metrics']['tokens']['total']}, "
            f"Efficiency: {result['metrics']['efficiency']:.2f}"
        )
        return result

    def _build_result(self, score: int, found_words: List[str], letters: List[str], duration: float) -> Dict[str, Any]:
        total_tokens = self.input_tokens + self.output_tokens
        total_tool_calls = sum(self.tool_calls.values())
        efficiency = compute_efficiency(score, total_tokens)

        return {
            "game_id": self.game_id,
            "version": self.VERSION,
            "config": {
                "model": self.model_name,
                "puzzle_index": self.puzzle_index,
                "max_steps": self.max_steps,
                "words_per_step": self.words_per_step,
            },
            "game": {
                "score": score,
                "words_found": found_words,
                "pangrams": [w for w in found_words if is_pangram(w, letters)],
            },
            "metrics": {
                "tokens": {
                    "input": self.input_tokens,
                    "output": self.output_tokens,
                    "total": total_tokens,
                },
                "iterations": self.iterations,
                "tool_calls": {"total": total_tool_calls, **self.tool_calls},
                "efficiency": efficiency,
                "duration": duration,
                "cost": self.total_cost,
                "upstream_cost": self.total_upstream_cost,
            },
            # Flat contract consumed by reports
            "tokens_used": total_tokens,
            "tool_calls": total_tool_calls,
            "score": score,
            "efficiency": efficiency,
            "submissions": [s.to_dict() for s in self.submissions],
        }

    def _emit_complete(self, result: Dict[str, Any]) -> None:
        if not self._controllog_initialized:
            return
        try:
            metrics = result["metrics"]
            cl.benchmark_complete(
                task_id=self._task_id,
                project_id=PROJECT_ID,
                game_id=self.game_id,
                model=self.model_name,
                score=result["score"],
                words_found=len(result["game"]["words_found"]),
                pangrams=len(result["game"]["pangrams"]),
                total_tokens=result["tokens_used"],
                tool_calls=result["tool_calls"],
                efficiency=result["efficiency"],
                wall_ms=int(metrics["duration"] * 1000),
                run_id=self._run_id,
                cost_money=metrics["cost"],
                upstream_cost_money=metrics["upstream_cost"],
                payload={"puzzle_index": self.puzzle_index},
            )
        except Exception as e:
            logger.debug(f"Failed to emit benchmark_complete: {e}")

    def _display_results(self, result: Dict[str, Any]) -> None:
        metrics = result["metrics"]
        game = result["game"]

        table = Table(title="Pangram Benchmark Results")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Score", str(game["score"]))
        table.add_row("Words", str(len(game["words_found"])))
        table.add_row("Pangrams", ", ".join(game["pangrams"]) or "none")
        table.add_row(
            "Tokens",
            f"{metrics['tokens']['total']} (in: {metrics['tokens']['input']}, out: {metrics['tokens']['output']})",
        )
        table.add_row("Iterations", str(metrics["iterations"]))
        table.add_row(
            "Tool Calls",
            f"{metrics['tool_calls']['total']} (observe: {metrics['tool_calls']['observe']}, "
            f"submit: {metrics['tool_calls']['submit_word']})",
        )
        table.add_row("Efficiency", f"{metrics['efficiency']:.2f} points/1k tokens")
        table.add_row("Duration", f"{metrics['duration']:.1f}s")
        table.add_row("Cost", f"${metrics['cost']:.4f}")

        self._print()
        self._print(table)
        if game["words_found"]:
            self._print(f"\n[bold]Words:[/bold] {', '.join(game['words_found'])}")
