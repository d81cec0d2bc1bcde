"""
Structured Logging for Grafana Loki

All logs are JSON with consistent, queryable fields.
Query logs by: module, action, provider, user_id, etc.

GRAFANA LOKI QUERIES
====================
# All errors
{project="fundraising-qa"} | json | level="ERROR"

# Provider failures (primary or secondary)
{project="fundraising-qa"} | json | module="llm.invoker" action="provider_failed"

# Every answer served from the fallback provider
{project="fundraising-qa"} | json | action="answer_done" provider="secondary"

# Validation rejections by code
{project="fundraising-qa"} | json | module="llm.validators" code="PV01"

# History writes that were dropped
{project="fundraising-qa"} | json | module="ask" action="history_save_failed"

USAGE
=====
from src.utils.logging import log, get_logger, configure_logging

logger = get_logger()
log.info(logger, "ask", "received", "Question received",
         user_id=user_id, question=question[:100])

log.warning(logger, "llm.validators", "rejected", "Response failed validation",
            code="PV03", provider="primary")

ACTION NAMING
=============
Consistent suffixes for queryable actions:
  *_start     beginning of an operation
  *_done      successful completion
  *_failed    error or failure
  *_skipped   intentionally skipped
  *_fallback  moving on to the secondary provider
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional


_BASE_FIELDS = ("ts", "level", "module", "action", "msg")


class StructuredFormatter(logging.Formatter):
    """JSON formatter for Grafana Loki."""

    def __init__(self, pretty: bool = False):
        super().__init__()
        self.pretty = pretty

    def format(self, record: logging.LogRecord) -> str:
        structured = getattr(record, "_structured", False)
        data = {
            "ts": _timestamp(),
            "level": record.levelname,
            "module": record._module if structured else record.name,
            "action": record._action if structured else "log",
            "msg": record.getMessage(),
        }
        if structured:
            data.update(record._extra)

        if self.pretty:
            return self._pretty(data) if structured else data["msg"]
        return json.dumps(data, default=str, separators=(",", ":"))

    def _pretty(self, data: dict) -> str:
        """Human-readable format for development."""
        ts = data["ts"][11:23]  # HH:MM:SS.mmm
        mod = data["module"].upper()[:14].ljust(14)
        ctx = " ".join(f"{k}={v}" for k, v in data.items() if k not in _BASE_FIELDS)
        line = f"{ts} {data['level'][0]} [{mod}] {data['action']}: {data['msg']}"
        return line + (f" | {ctx}" if ctx else "")


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


class StructuredLogger:
    """
    Centralized structured logging.

    Every method takes a stdlib logging.Logger, module name, action name,
    message, and arbitrary context fields. None-valued fields are dropped.
    """

    def _log(self, logger: logging.Logger, level: int, module: str, action: str,
             msg: str, **kwargs) -> None:
        extra = {
            "_structured": True,
            "_module": module,
            "_action": action,
            "_extra": {k: v for k, v in kwargs.items() if v is not None},
        }
        logger.log(level, msg, extra=extra)

    def debug(self, logger: logging.Logger, module: str, action: str, msg: str, **kwargs) -> None:
        self._log(logger, logging.DEBUG, module, action, msg, **kwargs)

    def info(self, logger: logging.Logger, module: str, action: str, msg: str, **kwargs) -> None:
        self._log(logger, logging.INFO, module, action, msg, **kwargs)

    def warning(self, logger: logging.Logger, module: str, action: str, msg: str, **kwargs) -> None:
        self._log(logger, logging.WARNING, module, action, msg, **kwargs)

    def error(
        self,
        logger: logging.Logger,
        module: str,
        action: str,
        msg: str,
        error: Optional[str] = None,
        error_type: Optional[str] = None,
        **kwargs,
    ) -> None:
        """Log ERROR level with the failure text and exception class name."""
        self._log(
            logger, logging.ERROR, module, action, msg,
            error=error, error_type=error_type, **kwargs,
        )


# Singleton instance, import this everywhere
log = StructuredLogger()

# Third-party loggers that are noisy below WARNING
_QUIET_LOGGERS = (
    "langchain", "langchain_core", "langchain_openai", "openai",
    "httpx", "httpcore", "sqlalchemy", "uvicorn.access", "asyncio",
)


def get_logger() -> logging.Logger:
    """The shared application logger."""
    return logging.getLogger("fundraising-qa")


def configure_logging() -> None:
    """Configure root logger with structured formatter. Call once at startup.

    Reads from environment:
      LOG_FORMAT: "json" (default, for Loki) or "pretty" (for development)
      LOG_LEVEL: "INFO" (default), "DEBUG", "WARNING", "ERROR"
    """
    pretty = os.environ.get("LOG_FORMAT", "json") == "pretty"
    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter(pretty=pretty))
    logging.basicConfig(level=level, handlers=[handler], force=True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
