from __future__ import annotations

import itertools
import json
import logging
import time
from typing import Optional

from .schema import BaseEvent, EventEnvelope


log = logging.getLogger("papertrade.events")

_sequence = itertools.count(1)


def now_ms() -> int:
    return int(time.time() * 1000)


def publish(env: EventEnvelope) -> None:
    """Log an event envelope as a single-line JSON record.

    Events are an audit trail only; nothing in the trading loop depends on them.
    """
    line = json.dumps({
        "schema_version": env.schema_version,
        "correlation_id": env.correlation_id,
        "sequence": env.sequence,
        "event": env.event.model_dump(),
    }, separators=(",", ":"))
    log.info(line)


def emit(event: BaseEvent, correlation_id: Optional[str] = None) -> EventEnvelope:
    env = EventEnvelope(
        correlation_id=correlation_id or f"{event.event_type}:{event.symbol or '*'}",
        sequence=next(_sequence),
        event=event,
    )
    publish(env)
    return env
