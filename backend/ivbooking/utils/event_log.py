from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Literal, Optional

from .request_id import get_request_id

EventAction = Literal[
    "availability.checked",
    "availability.capacity_warning",
]
PatternType = Literal["parallel", "sequential"]

_event_logger = logging.getLogger("events")
_event_logger.setLevel(logging.INFO)
if not _event_logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    _event_logger.addHandler(handler)
_event_logger.propagate = False


def emit_event_log(
    *,
    action: EventAction,
    location_id: str,
    day: date,
    attendee_count: int,
    pattern_type: Optional[PatternType],
    required_span: Optional[int],
    demand: Optional[list[int]],
    starting_slot_count: Optional[int],
    level: Literal["info", "warning"] = "info",
    message: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    """Emit one structured JSON event line. Raises RuntimeError if logging fails."""
    payload: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "action": action,
        "request_id": get_request_id(),
        "location_id": location_id,
        "date": day.isoformat(),
        "attendee_count": attendee_count,
        "pattern_type": pattern_type,
        "required_span": required_span,
        "demand": demand,
        "starting_slot_count": starting_slot_count,
    }
    if message is not None:
        payload["message"] = message
    if extra:
        payload.update(extra)

    compact_payload = {k: v for k, v in payload.items() if v is not None}
    try:
        line = json.dumps(compact_payload, ensure_ascii=True)
        if level == "warning":
            _event_logger.warning(line)
        else:
            _event_logger.info(line)
    except Exception as exc:  # pragma: no cover - defensive
        raise RuntimeError("failed to emit event log") from exc
