from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any, TypeAlias

from pydantic import ValidationError

from sheetsift.models.events import DEFAULT_EVENT, SHEETSIFT_EVENT_SCHEMAS, SHEETSIFT_NAMESPACE

EventData: TypeAlias = Mapping[str, Any]


def _dotpath(value: str | None) -> str:
    return (value or "").strip().strip(".")


def qualify_event_name(event_name: str, namespace: str) -> str:
    """Prefix ``event_name`` with ``namespace`` unless it already lives there."""

    name, ns = _dotpath(event_name), _dotpath(namespace)
    if not name:
        return f"{ns}.invalid_event" if ns else "invalid_event"
    if not ns or name == ns or name.startswith(ns + "."):
        return name
    return f"{ns}.{name}"


def validate_event_payload(event: str, payload: dict[str, Any]) -> dict[str, Any]:
    """Check ``payload`` against the registered schema for ``event``.

    Events under the ``sheetsift`` namespace must be registered; anything else
    is validated only when a schema happens to exist for it.
    """

    owned = event == SHEETSIFT_NAMESPACE or event.startswith(SHEETSIFT_NAMESPACE + ".")
    if owned and event not in SHEETSIFT_EVENT_SCHEMAS:
        raise ValueError(f"Unknown sheetsift event '{event}' (register it in SHEETSIFT_EVENT_SCHEMAS)")

    schema = SHEETSIFT_EVENT_SCHEMAS.get(event)
    if schema is None:
        return payload
    try:
        return schema.model_validate(payload, strict=True).model_dump(mode="python")
    except ValidationError as exc:
        raise ValueError(f"Invalid payload for event '{event}': {exc}") from exc


class SessionLogger(logging.LoggerAdapter):
    """Logger adapter for one sheetsift session.

    Every record carries ``session_id``, a fresh ``event_id`` and an ``event``
    name (``sheetsift.log`` for plain ``info()``/``warning()`` lines). Use
    :meth:`event` for structured events; their ``data`` is validated against
    :data:`SHEETSIFT_EVENT_SCHEMAS`.
    """

    def __init__(
        self,
        logger: logging.Logger,
        *,
        namespace: str = SHEETSIFT_NAMESPACE,
        session_id: str | None = None,
    ) -> None:
        self._session_id = session_id or uuid.uuid4().hex
        super().__init__(logger, {"namespace": _dotpath(namespace)})

    @property
    def namespace(self) -> str:
        return str((self.extra or {}).get("namespace") or "")

    @property
    def session_id(self) -> str:
        return self._session_id

    def process(self, msg: Any, kwargs: dict[str, Any]) -> tuple[Any, dict[str, Any]]:
        extra = dict(self.extra or {})
        supplied = kwargs.pop("extra", None)
        if supplied is not None:
            if not isinstance(supplied, Mapping):
                raise TypeError("logging 'extra' must be a mapping")
            extra.update(supplied)

        extra["session_id"] = self._session_id
        extra.setdefault("event_id", uuid.uuid4().hex)
        extra.setdefault("event", qualify_event_name(DEFAULT_EVENT, self.namespace))
        if "data" in extra and not isinstance(extra["data"], Mapping):
            extra["data"] = {"value": extra["data"]}

        kwargs["extra"] = extra
        return msg, kwargs

    def event(
        self,
        name: str,
        *,
        message: str | None = None,
        level: int = logging.INFO,
        data: EventData | None = None,
        exc: BaseException | None = None,
        **fields: Any,
    ) -> None:
        """Emit the structured event ``name`` (qualified under this logger's namespace)."""

        if not self.isEnabledFor(level):
            return

        event = qualify_event_name(name, self.namespace)
        payload = validate_event_payload(event, {**(data or {}), **fields})

        extra: dict[str, Any] = {"event": event}
        if payload:
            extra["data"] = payload
        self.log(
            level,
            message or event,
            extra=extra,
            exc_info=(type(exc), exc, exc.__traceback__) if exc is not None else None,
        )


class NullLogger(SessionLogger):
    """Discards everything; the default when no logger is supplied."""

    def __init__(self, *, namespace: str = SHEETSIFT_NAMESPACE, session_id: str = "null") -> None:
        sink = logging.Logger("sheetsift.null")
        sink.addHandler(logging.NullHandler())
        sink.propagate = False
        sink.disabled = True
        super().__init__(sink, namespace=namespace, session_id=session_id)

    def __bool__(self) -> bool:
        return False


__all__ = [
    "EventData",
    "NullLogger",
    "SessionLogger",
    "qualify_event_name",
    "validate_event_payload",
]
