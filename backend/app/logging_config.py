from __future__ import annotations

import logging

_POLLED_PATHS = ("/api/v1/events", "/healthz")


class _SkipPollingAccessLogs(logging.Filter):
    """Hide uvicorn access logs for polled endpoints to prevent console spam."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            msg = record.getMessage()
        except Exception:
            return True
        return not any(p in msg for p in _POLLED_PATHS)


def configure_logging(level: str = "INFO") -> None:
    """Set up root logging once and attach the access-log filter."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    logging.getLogger("medvault").setLevel(level)

    access_logger = logging.getLogger("uvicorn.access")
    # Avoid duplicate filters on reload
    if not any(isinstance(f, _SkipPollingAccessLogs) for f in access_logger.filters):
        access_logger.addFilter(_SkipPollingAccessLogs())
