"""Core controllog SDK: events and balanced postings written as JSON lines.

Files live under `<log_dir>/controllog/`:
- events.jsonl: one record per event (kind, ids, payload)
- postings.jsonl: double-entry postings; each event's postings sum to zero
  per (account_type, unit)
"""

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_config: Dict[str, Any] = {"project_id": None, "log_dir": None}


def init(project_id: str, log_dir: Path) -> Path:
    """Set the default project and create the controllog directory.

    Returns:
        The directory events and postings are written to
    """
    out_dir = Path(log_dir) / "controllog"
    out_dir.mkdir(parents=True, exist_ok=True)
    _config["project_id"] = project_id
    _config["log_dir"] = out_dir
    logger.debug(f"Controllog initialized: project={project_id} dir={out_dir}")
    return out_dir


def new_id() -> str:
    return uuid.uuid4().hex


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _log_dir() -> Path:
    if _config["log_dir"] is None:
        raise RuntimeError("controllog.init() must be called before emitting events")
    return _config["log_dir"]


def _write_jsonl(path: Path, data: Dict[str, Any]) -> None:
    line = json.dumps(data, default=str)
    with _lock:
        with open(path, "a", encoding="utf-8") as f:
            f.write(line + "\n")


def event(
    kind: str,
    *,
    project_id: Optional[str] = None,
    run_id: Optional[str] = None,
    task_id: Optional[str] = None,
    agent_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
    event_id: Optional[str] = None,
) -> str:
    """Write one event record and return its id."""
    event_id = event_id or new_id()
    _write_jsonl(_log_dir() / "events.jsonl", {
        "event_id": event_id,
        "event_time": _now(),
        "kind": kind,
        "project_id": project_id or _config["project_id"],
        "run_id": run_id,
        "task_id": task_id,
        "agent_id": agent_id,
        "payload_json": payload or {},
    })
    return event_id


def post(
    event_id: str,
    account_type: str,
    account_id: str,
    unit: str,
    delta: float,
    dims: Optional[Dict[str, Any]] = None,
) -> str:
    """Write one posting leg against an event and return the posting id."""
    posting_id = new_id()
    _write_jsonl(_log_dir() / "postings.jsonl", {
        "posting_id": posting_id,
        "event_id": event_id,
        "account_type": account_type,
        "account_id": account_id,
        "unit": unit,
        "delta_numeric": delta,
        "dims_json": dims or {},
    })
    return posting_id


def post_balanced(
    event_id: str,
    account_type: str,
    unit: str,
    amount: float,
    source: str,
    sink: str,
    dims: Optional[Dict[str, Any]] = None,
) -> None:
    """Move `amount` from `source` to `sink` (two legs summing to zero)."""
    post(event_id, account_type, source, unit, -amount, dims)
    post(event_id, account_type, sink, unit, amount, dims)
