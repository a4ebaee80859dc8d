import json
import logging
from datetime import UTC, datetime


class StructuredLogger:
    """Emits structured JSON events through the standard logging system.

    The JSON document is written as the log message so it flows through the
    configured handlers and formatters like any other record.
    """

    def __init__(self, name: str = "clubhub"):
        self._logger = logging.getLogger(name)

    def log_event(self, event: str, level: int = logging.INFO, **kwargs) -> None:
        """Emit a structured event. Common usage:

        upload_events.log_event("remote_cleanup_failed", public_id=..., extra={...})
        """
        payload = {"timestamp": datetime.now(UTC).isoformat(), "event": event}

        # `extra` dicts are merged at top level
        for k, v in kwargs.items():
            if k == "extra" and isinstance(v, dict):
                payload.update(v)
            else:
                payload[k] = v

        try:
            self._logger.log(level, json.dumps(payload, default=str))
        except (TypeError, ValueError):
            self._logger.log(level, "%s %s", event, kwargs)


# Reporting channel for the upload subsystem: batch summaries and cleanup failures
upload_events = StructuredLogger("clubhub.uploads.events")

__all__ = ["StructuredLogger", "upload_events"]
