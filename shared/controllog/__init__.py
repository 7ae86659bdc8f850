"""Controllable logging SDK (events + balanced postings).

Double-entry accounting for:
- Token usage (resource.tokens)
- Time tracking (resource.time_ms)
- Cost tracking (resource.money)
- State transitions (truth.state)
- Utility/reward (value.utility)
"""

from .sdk import init, event, post, new_id
from .builders import (
    benchmark_complete,
    model_completion,
    model_prompt,
    state_move,
    utility,
)

__all__ = [
    "init",
    "event",
    "post",
    "new_id",
    "benchmark_complete",
    "model_completion",
    "model_prompt",
    "state_move",
    "utility",
]
