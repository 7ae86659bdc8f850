"""Typed event builders on top of the controllog SDK.

Each builder writes one event and its balanced postings:
- resource.tokens: project budget -> agent
- resource.time_ms: project clock -> agent
- resource.money: project wallet -> provider
- truth.state: task leaves one state and enters another
- value.utility: environment -> agent
"""

from typing import Any, Dict, Optional

from . import sdk


def state_move(
    task_id: str,
    from_: str,
    to: str,
    project_id: Optional[str] = None,
    agent_id: Optional[str] = None,
    run_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> str:
    """Record a task moving between workflow states (e.g. NEW -> WIP)."""
    event_id = sdk.event(
        "state_move",
        project_id=project_id,
        run_id=run_id,
        task_id=task_id,
        agent_id=agent_id,
        payload={"from": from_, "to": to, **(payload or {})},
    )
    sdk.post(event_id, "truth.state", f"{task_id}:{from_}", "count", -1)
    sdk.post(event_id, "truth.state", f"{task_id}:{to}", "count", 1)
    return event_id


def model_prompt(
    task_id: str,
    agent_id: str,
    run_id: Optional[str],
    project_id: Optional[str],
    provider: str,
    model: str,
    prompt_tokens: int,
    payload: Optional[Dict[str, Any]] = None,
    exchange_id: Optional[str] = None,
    request_text: Optional[str] = None,
) -> str:
    """Record the prompt side of a model exchange."""
    body = {
        "provider": provider,
        "model": model,
        "prompt_tokens": prompt_tokens,
        "exchange_id": exchange_id,
        **(payload or {}),
    }
    if request_text is not None:
        body["request_text"] = request_text

    event_id = sdk.event(
        "model_prompt",
        project_id=project_id,
        run_id=run_id,
        task_id=task_id,
        agent_id=agent_id,
        payload=body,
    )
    dims = {"model": model, "phase": "prompt"}
    sdk.post_balanced(event_id, "resource.tokens", "tokens", prompt_tokens,
                      source=f"project:{project_id}", sink=agent_id, dims=dims)
    return event_id


def model_completion(
    task_id: str,
    agent_id: str,
    run_id: Optional[str],
    project_id: Optional[str],
    provider: str,
    model: str,
    completion_tokens: int,
    wall_ms: int,
    cost_money: Optional[float] = None,
    upstream_cost_money: Optional[float] = None,
    payload: Optional[Dict[str, Any]] = None,
    exchange_id: Optional[str] = None,
    response_text: Optional[str] = None,
) -> str:
    """Record the completion side of a model exchange with time and cost."""
    body = {
        "provider": provider,
        "model": model,
        "completion_tokens": completion_tokens,
        "wall_ms": wall_ms,
        "exchange_id": exchange_id,
        **(payload or {}),
    }
    if cost_money is not None:
        body["cost_money"] = cost_money
    if upstream_cost_money is not None:
        body["upstream_cost_money"] = upstream_cost_money
    if response_text is not None:
        body["response_text"] = response_text

    event_id = sdk.event(
        "model_completion",
        project_id=project_id,
        run_id=run_id,
        task_id=task_id,
        agent_id=agent_id,
        payload=body,
    )
    dims = {"model": model, "phase": "completion"}
    project = f"project:{project_id}"
    sdk.post_balanced(event_id, "resource.tokens", "tokens", completion_tokens,
                      source=project, sink=agent_id, dims=dims)
    sdk.post_balanced(event_id, "resource.time_ms", "ms", wall_ms,
                      source=project, sink=agent_id, dims=dims)
    if cost_money:
        sdk.post_balanced(event_id, "resource.money", "usd", cost_money,
                          source=project, sink=f"provider:{provider}", dims=dims)
    return event_id


def utility(
    task_id: str,
    agent_id: str,
    value: float,
    project_id: Optional[str] = None,
    run_id: Optional[str] = None,
    unit: str = "points",
    payload: Optional[Dict[str, Any]] = None,
) -> str:
    """Record reward earned by an agent (e.g. points for an accepted word)."""
    event_id = sdk.event(
        "utility",
        project_id=project_id,
        run_id=run_id,
        task_id=task_id,
        agent_id=agent_id,
        payload={"value": value, "unit": unit, **(payload or {})},
    )
    sdk.post_balanced(event_id, "value.utility", unit, value,
                      source="environment", sink=agent_id)
    return event_id


def benchmark_complete(
    task_id: str,
    project_id: Optional[str],
    game_id: str,
    model: str,
    score: int,
    words_found: int,
    pangrams: int,
    total_tokens: int,
    tool_calls: int,
    efficiency: float,
    wall_ms: int,
    run_id: Optional[str] = None,
    cost_money: Optional[float] = None,
    upstream_cost_money: Optional[float] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> str:
    """Record the final result of one benchmark run (no postings)."""
    body: Dict[str, Any] = {
        "game_id": game_id,
        "model": model,
        "score": score,
        "words_found": words_found,
        "pangrams": pangrams,
        "total_tokens": total_tokens,
        "tool_calls": tool_calls,
        "efficiency": efficiency,
        "wall_ms": wall_ms,
    }
    if cost_money is not None:
        body["cost_money"] = cost_money
    if upstream_cost_money is not None:
        body["upstream_cost_money"] = upstream_cost_money
    body.update(payload or {})

    return sdk.event(
        "benchmark_complete",
        project_id=project_id,
        run_id=run_id,
        task_id=task_id,
        agent_id=f"agent:{model}",
        payload=body,
    )
