from __future__ import annotations

import logging
import sys
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from sheetsift.infrastructure.observability.formatters import NdjsonFormatter, TextFormatter
from sheetsift.infrastructure.observability.logger import SessionLogger
from sheetsift.models.events import SHEETSIFT_NAMESPACE, VALID_LOG_FORMATS


@dataclass
class SessionLogContext:
    """A :class:`SessionLogger` plus the handlers it owns; closing detaches them."""

    logger: SessionLogger
    base_logger: logging.Logger
    handlers: list[logging.Handler] = field(default_factory=list)

    def close(self) -> None:
        while self.handlers:
            handler = self.handlers.pop()
            self.base_logger.removeHandler(handler)
            handler.close()

    def __enter__(self) -> "SessionLogContext":
        return self

    def __exit__(self, *_exc) -> None:
        self.close()


def _formatter_for(log_format: str | None) -> logging.Formatter:
    fmt = (log_format or "text").strip().lower()
    if fmt not in VALID_LOG_FORMATS:
        raise ValueError(f"log_format must be one of {sorted(VALID_LOG_FORMATS)}, got {log_format!r}")
    return TextFormatter() if fmt == "text" else NdjsonFormatter()


def create_session_logger_context(
    *,
    namespace: str = SHEETSIFT_NAMESPACE,
    log_format: str = "text",
    log_level: int = logging.INFO,
    enable_console_logging: bool = True,
    log_file: Path | None = None,
) -> SessionLogContext:
    """Build a session logger writing to stderr and/or ``log_file``.

    Every session gets its own non-propagating ``sheetsift.session.<id>`` logger,
    so concurrent sessions never share handlers.
    """

    formatter = _formatter_for(log_format)
    session_id = uuid.uuid4().hex

    base_logger = logging.getLogger(f"sheetsift.session.{session_id}")
    base_logger.setLevel(log_level)
    base_logger.propagate = False
    ctx = SessionLogContext(
        logger=SessionLogger(base_logger, namespace=namespace, session_id=session_id),
        base_logger=base_logger,
    )

    targets: list[logging.Handler] = []
    if enable_console_logging:
        targets.append(logging.StreamHandler(sys.stderr))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        targets.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    for handler in targets:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        base_logger.addHandler(handler)
        ctx.handlers.append(handler)
    return ctx


__all__ = [
    "SessionLogContext",
    "create_session_logger_context",
]
