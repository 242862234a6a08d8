from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from sheetsift.models.events import DEFAULT_EVENT

# Rendered first in text output so a line reads "where, then what".
LOCATION_KEYS = ("filename", "sheet_name")
MAX_TEXT_FIELDS = 8


def _utc(created: float) -> datetime:
    return datetime.fromtimestamp(created, tz=timezone.utc)


def _short(value: Any, limit: int = 120) -> str:
    text = str(value)
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def event_record(record: logging.LogRecord) -> dict[str, Any]:
    """Flatten a log record (plain or from :class:`SessionLogger`) into an event dict."""

    out: dict[str, Any] = {
        "timestamp": _utc(record.created).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "level": record.levelname.lower(),
        "event": str(getattr(record, "event", None) or DEFAULT_EVENT),
        "message": record.getMessage(),
        "session_id": str(getattr(record, "session_id", "") or ""),
    }
    event_id = getattr(record, "event_id", None)
    if event_id:
        out["event_id"] = str(event_id)

    data = getattr(record, "data", None)
    if isinstance(data, Mapping) and data:
        out["data"] = dict(data)

    if record.exc_info and record.exc_info[0] is not None:
        exc_type, exc, _ = record.exc_info
        out["error"] = {
            "type": exc_type.__name__,
            "message": str(exc) if exc is not None else "",
            "stack_trace": logging.Formatter().formatException(record.exc_info),
        }
    return out


class NdjsonFormatter(logging.Formatter):
    """One JSON object per line; non-JSON values are stringified."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        return json.dumps(event_record(record), ensure_ascii=False, default=str, separators=(",", ":"))


class TextFormatter(logging.Formatter):
    """``[time] LEVEL event: message (filename=..., sheet_name=..., key=value)``."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        payload = event_record(record)
        line = f"[{payload['timestamp']}] {payload['level'].upper()} {payload['event']}"
        if payload["message"] and payload["message"] != payload["event"]:
            line += f": {payload['message']}"

        data = payload.get("data")
        if data:
            keys = [k for k in LOCATION_KEYS if k in data]
            keys += sorted(k for k in data if k not in LOCATION_KEYS)
            fields = [f"{k}={_short(data[k])}" for k in keys[:MAX_TEXT_FIELDS]]
            if len(keys) > MAX_TEXT_FIELDS:
                fields.append(f"+{len(keys) - MAX_TEXT_FIELDS} more")
            line += " (" + ", ".join(fields) + ")"

        error = payload.get("error")
        if error and error["stack_trace"]:
            line += "\n" + error["stack_trace"].rstrip("\n")
        return line


__all__ = [
    "LOCATION_KEYS",
    "NdjsonFormatter",
    "TextFormatter",
    "event_record",
]
