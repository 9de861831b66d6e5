from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any

_TRACE_EVENTS: deque[dict[str, Any]] = deque(maxlen=500)


@dataclass(slots=True, frozen=True)
class TraceContext:
    request_id: str
    task_kind: str
    domain: str


def trace_event(logger, ctx: TraceContext, event: str, status: str, extra: dict[str, Any] | None = None) -> None:
    payload = {
        "request_id": ctx.request_id,
        "task_kind": ctx.task_kind,
        "domain": ctx.domain,
        "status": status,
    }
    if extra:
        payload.update(extra)
    _TRACE_EVENTS.append({"event": event, **payload})
    if status == "error":
        logger.warning(event, **payload)
    else:
        logger.info(event, **payload)


def recent_traces(task_kind: str | None = None, limit: int = 20) -> list[dict[str, Any]]:
    items = list(_TRACE_EVENTS)
    if task_kind is not None:
        items = [i for i in items if i.get("task_kind") == task_kind]
    return items[-limit:]


def clear_traces() -> None:
    _TRACE_EVENTS.clear()
