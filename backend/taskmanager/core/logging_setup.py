"""Process-wide logging setup."""

from __future__ import annotations

import logging

from asgi_correlation_id import CorrelationIdFilter

from taskmanager.security.logging_filters import SensitiveFilter

_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"
_FILTERED_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "")


def configure_logging(level: str = "INFO") -> None:
    """Attach the correlation-aware handler and redaction filters once."""
    root = logging.getLogger()
    root.setLevel(level.upper())
    if not any(getattr(h, "_taskmanager", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.addFilter(CorrelationIdFilter(uuid_length=32, default_value="-"))
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._taskmanager = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    for logger_name in _FILTERED_LOGGERS:
        logger = logging.getLogger(logger_name)
        if not any(isinstance(flt, SensitiveFilter) for flt in logger.filters):
            logger.addFilter(SensitiveFilter())
