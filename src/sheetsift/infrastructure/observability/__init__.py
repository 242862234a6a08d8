from sheetsift.infrastructure.observability.context import (
    SessionLogContext,
    create_session_logger_context,
)
from sheetsift.infrastructure.observability.logger import NullLogger, SessionLogger

__all__ = [
    "NullLogger",
    "SessionLogContext",
    "SessionLogger",
    "create_session_logger_context",
]
