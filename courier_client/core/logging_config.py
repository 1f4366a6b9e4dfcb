"""
Structured logging configuration for the courier client.

Every record is emitted as one JSON object so that logs shipped from a
courier device or a support script can be searched by field.
"""

import logging
import logging.handlers
import os
import re
import sys
import json
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from contextvars import ContextVar

# Context variables for per-action tracking
action_id_var: ContextVar[Optional[str]] = ContextVar('action_id', default=None)
courier_id_var: ContextVar[Optional[str]] = ContextVar('courier_id', default=None)

class StructuredFormatter(logging.Formatter):
    """JSON structured logging formatter"""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "@timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": os.getenv('SERVICE_NAME', 'courier-client'),
            "environment": os.getenv('ENVIRONMENT', 'development'),
        }

        trace_context = self._get_trace_context()
        if trace_context:
            log_obj["trace"] = trace_context

        log_obj["location"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
            "module": record.module
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_obj["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "stacktrace": traceback.format_exception(*record.exc_info)
            }

        if hasattr(record, 'extra_fields'):
            log_obj["custom"] = record.extra_fields

        if hasattr(record, 'duration_ms'):
            log_obj["performance"] = {
                "duration_ms": record.duration_ms
            }

        return json.dumps(log_obj, default=str)

    def _get_trace_context(self) -> Optional[Dict[str, Any]]:
        action_id = action_id_var.get()
        courier_id = courier_id_var.get()

        if not any([action_id, courier_id]):
            return None

        context = {}
        if action_id:
            context["action_id"] = action_id
        if courier_id:
            context["courier_id"] = courier_id
        return context

class PerformanceFilter(logging.Filter):
    """Copy call durations recorded in seconds into milliseconds"""

    def filter(self, record: logging.LogRecord) -> bool:
        if hasattr(record, 'duration'):
            record.duration_ms = record.duration * 1000
        return True

class SecurityFilter(logging.Filter):
    """Redact bearer tokens and credentials from log messages"""

    PATTERNS = [
        re.compile(r'(Bearer\s+)[A-Za-z0-9\-._~+/]+=*', re.IGNORECASE),
        re.compile(r'("?(?:password|token|secret|authorization)"?\s*[:=]\s*"?)[^",\s}]+', re.IGNORECASE),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = message
        for pattern in self.PATTERNS:
            redacted = pattern.sub(r'\1***REDACTED***', redacted)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True

def setup_logging(
    service_name: str,
    level: str = "INFO",
    enable_console: bool = True,
    enable_file: bool = False,
    log_file: Optional[str] = None
) -> None:
    """
    Setup structured logging for the client

    Args:
        service_name: Name stamped on every record
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_console: Enable console output
        enable_file: Enable file output
        log_file: Path to log file
    """
    os.environ['SERVICE_NAME'] = service_name

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers = []

    formatter = StructuredFormatter()

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(PerformanceFilter())
        console_handler.addFilter(SecurityFilter())
        root_logger.addHandler(console_handler)

    if enable_file and log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10485760,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(PerformanceFilter())
        file_handler.addFilter(SecurityFilter())
        root_logger.addHandler(file_handler)

    # httpx logs every request line at INFO, including query strings
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)

    root_logger.info(
        "Logging initialized",
        extra={
            'extra_fields': {
                'service': service_name,
                'level': level,
                'handlers': {
                    'console': enable_console,
                    'file': enable_file
                }
            }
        }
    )

class LoggerAdapter(logging.LoggerAdapter):
    """Logger adapter injecting the current action context into records"""

    def process(self, msg, kwargs):
        extra = kwargs.get('extra', {})

        action_id = action_id_var.get()
        if action_id:
            extra['action_id'] = action_id

        courier_id = courier_id_var.get()
        if courier_id:
            extra['courier_id'] = courier_id

        kwargs['extra'] = extra
        return msg, kwargs

def get_logger(name: str) -> LoggerAdapter:
    """
    Get a logger instance with action context support

    Args:
        name: Logger name (usually __name__)
    """
    return LoggerAdapter(logging.getLogger(name), {})

def set_action_context(
    action_id: Optional[str] = None,
    courier_id: Optional[str] = None
) -> None:
    """Set the context stamped on records logged during a user action"""
    if action_id:
        action_id_var.set(action_id)
    if courier_id:
        courier_id_var.set(courier_id)

def generate_action_id() -> str:
    return str(uuid.uuid4())
