"""JSON and console formatters for processor log lines."""

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any

from core.logging.context import get_log_context
from core.logging.message_context import get_message_context
from core.utils.json_serializers import json_serializer


class JSONFormatter(logging.Formatter):
    """
    One JSON object per log record, enriched with worker, event and message context.

    Only the known EXTRA_FIELDS are copied from the record.
    Sanitizes URLs and authorization headers before logging.
    """

    # Record attributes copied into the JSON entry
    EXTRA_FIELDS = [
        # Event identity
        "topic",
        "originator",
        "resource",
        "submission_id",
        "challenge_id",
        "legacy_submission_id",
        "sub_track",
        "type_id",
        "drop_reason",
        "outcome",
        "mutation",
        "score",
        "test_type",
        "field_name",
        "handler_name",
        "message_preview",
        "duration_ms",
        # HTTP
        "http_status",
        "http_method",
        "http_url",
        "response_body",
        "response_headers",
        "request_headers",
        "api_endpoint",
        "timeout_seconds",
        "via_proxy",
        # Errors
        "error_category",
        "error_message",
        "error_type",
        "validation_errors",
        # Store
        "table",
        "column",
        "rows_updated",
        # Transport
        "group_id",
        "topics",
        "worker_name",
        "config_path",
    ]

    NUMERIC_FIELDS = {
        "duration_ms": float,
        "score": float,
        "http_status": int,
        "rows_updated": int,
        "message_partition": int,
        "message_offset": int,
    }

    # Query-string secrets are redacted in these fields
    URL_FIELDS = ["http_url", "url"]

    SENSITIVE_PARAMS_PATTERN = re.compile(
        r"([?&])(sig|token|key|secret|password|auth)=[^&]*",
        re.IGNORECASE,
    )

    SENSITIVE_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie", "set-cookie"})

    def _sanitize_url(self, url: str) -> str:
        return self.SENSITIVE_PARAMS_PATTERN.sub(r"\1\2=[REDACTED]", url)

    def _sanitize_headers(self, headers: dict) -> dict:
        return {
            k: ("[REDACTED]" if str(k).lower() in self.SENSITIVE_HEADERS else v)
            for k, v in headers.items()
        }

    def _sanitize_value(self, key: str, value: Any) -> Any:
        if key in self.URL_FIELDS and isinstance(value, str):
            return self._sanitize_url(value)
        if key.endswith("_headers") and isinstance(value, dict):
            return self._sanitize_headers(value)
        return value

    def _ensure_type(self, field: str, value: Any) -> Any:
        if field not in self.NUMERIC_FIELDS or value is None:
            return value
        try:
            return self.NUMERIC_FIELDS[field](value)
        except (ValueError, TypeError):
            return None

    @staticmethod
    def _base_log_entry(record: logging.LogRecord) -> dict[str, Any]:
        return {
            "ts": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

    @staticmethod
    def _inject_context(log_entry: dict[str, Any]) -> None:
        for field, value in get_log_context().items():
            if value:
                log_entry[field] = value
        log_entry.update(get_message_context())

    def _inject_extra_fields(self, log_entry: dict[str, Any], record: logging.LogRecord) -> None:
        for field in self.EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = self._sanitize_value(field, self._ensure_type(field, value))

    def _inject_exception(self, log_entry: dict[str, Any], record: logging.LogRecord) -> None:
        if not record.exc_info:
            return

        exc_type, exc_value, _ = record.exc_info
        log_entry["exception"] = {
            "type": exc_type.__name__ if exc_type else None,
            "message": str(exc_value) if exc_value else None,
            "stacktrace": self.formatException(record.exc_info),
        }

    def format(self, record: logging.LogRecord) -> str:
        log_entry = self._base_log_entry(record)
        self._inject_context(log_entry)

        if record.levelno in (logging.DEBUG, logging.ERROR, logging.CRITICAL):
            log_entry["file"] = f"{record.filename}:{record.lineno}"

        self._inject_extra_fields(log_entry, record)
        self._inject_exception(log_entry, record)

        return json.dumps(log_entry, default=json_serializer, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """
    Single-line console output tagged with offset, resource and submission id.

    Level names are coloured only when stdout is a TTY.
    """

    COLORS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.INFO: "\033[32m",  # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._use_colors = sys.stdout.isatty()

    def _format_level_name(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno, "") if self._use_colors else ""
        if not color:
            return record.levelname
        return f"{color}{record.levelname}{self.RESET}"

    @staticmethod
    def _build_tags(record: logging.LogRecord) -> list[str]:
        log_context = get_log_context()
        submission_id = getattr(record, "submission_id", None) or log_context.get("submission_id")
        resource = getattr(record, "resource", None) or log_context.get("resource")
        offset = get_message_context().get("message_offset")

        tags = []
        if offset is not None:
            tags.append(f"[off:{offset}]")
        if resource:
            tags.append(f"[{resource}]")
        if submission_id:
            tags.append(f"[sub:{str(submission_id)[:8]}]")
        return tags

    def format(self, record: logging.LogRecord) -> str:
        prefix = " - ".join(
            [datetime.now().strftime("%Y-%m-%d %H:%M:%S"), self._format_level_name(record), record.name]
        )
        tags = self._build_tags(record)
        message = record.getMessage()
        if tags:
            message = f"{' '.join(tags)} {message}"

        line = f"{prefix} - {message}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line
