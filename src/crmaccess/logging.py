"""Logging utilities for authorization decisions.

This module provides:
- Logging configuration from RBACConfig
- Bounded previews of permission lists and other values
- A formatter that carries tenant_id / user_id on every record
- A logger adapter that fills those ids from the request
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import LogLevel, RBACConfig
from .permissions.policy import RequestContext


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a length-bounded, single-line preview of a value for logging.

    Sets and frozensets (permission sets) are sorted so the same set always
    renders the same way.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (set, frozenset)):
        s = json.dumps(sorted(map(str, value)), ensure_ascii=False)
    elif isinstance(value, (dict, list, tuple)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "tenant_id", "user_id",
    }
)  # fmt: skip


class AccessLogFormatter(logging.Formatter):
    """Formatter that includes tenant_id / user_id and optional JSON output."""

    def __init__(
        self,
        include_identity: bool = True,
        json_format: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        """Initialize the formatter.

        Args:
            include_identity: Whether to include tenant_id / user_id in logs
            json_format: Whether to output JSON (True) or plain text (False)
        """
        super().__init__(*args, **kwargs)
        self.include_identity = include_identity
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        tenant_id = getattr(record, "tenant_id", None)
        user_id = getattr(record, "user_id", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_identity:
            if tenant_id:
                log_data["tenant_id"] = tenant_id
            if user_id:
                log_data["user_id"] = user_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in log_data:
                log_data[key] = safe_preview(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if self.include_identity and tenant_id:
            parts.append(f"tenant_id={tenant_id}")
        if self.include_identity and user_id:
            parts.append(f"user_id={user_id}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class AccessLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds tenant_id and user_id to log records.

    Usage:
        logger = get_access_logger(__name__)
        logger.info("Role changed", context=request_context)
    """

    def __init__(
        self,
        logger: logging.Logger,
        tenant_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ):
        super().__init__(logger, {})
        self.tenant_id = tenant_id
        self.user_id = user_id

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        tenant_id = kwargs.pop("tenant_id", self.tenant_id)
        user_id = kwargs.pop("user_id", self.user_id)

        context = kwargs.pop("context", None)
        if isinstance(context, RequestContext):
            tenant_id = tenant_id or context.tenant_id
            user_id = user_id or context.user_id

        extra = dict(kwargs.get("extra") or {})
        if tenant_id:
            extra["tenant_id"] = tenant_id
        if user_id:
            extra["user_id"] = user_id
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[RBACConfig] = None,
    json_format: Optional[bool] = None,
    service_name: Optional[str] = None,
) -> None:
    """Configure root logging for a service using crmaccess.

    Args:
        config: RBACConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
        service_name: Override ``config.service_name``
    """
    if config is None:
        from .config import load_config_from_env

        config = load_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(LogLevel(config.log_level), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        AccessLogFormatter(
            include_identity=True,
            json_format=config.log_json if json_format is None else json_format,
        )
    )
    root_logger.addHandler(console_handler)

    name = service_name or config.service_name
    if name:
        logging.getLogger(name).setLevel(log_level)


def get_access_logger(
    name: str,
    tenant_id: Optional[str] = None,
    user_id: Optional[str] = None,
) -> AccessLoggerAdapter:
    """Get a logger adapter that stamps tenant_id / user_id on records.

    Example:
        logger = get_access_logger(__name__, tenant_id="t-1")
        logger.warning("Access denied", user_id="u-9")
    """
    return AccessLoggerAdapter(logging.getLogger(name), tenant_id=tenant_id, user_id=user_id)


__all__ = [
    "AccessLogFormatter",
    "AccessLoggerAdapter",
    "get_access_logger",
    "safe_preview",
    "setup_logging",
]
