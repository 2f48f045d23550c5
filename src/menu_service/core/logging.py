"""Infra de logging JSON usando structlog, com trace_id contextual."""
from __future__ import annotations
import logging
import structlog
import sys
from uuid import uuid4
from contextvars import ContextVar

trace_id_ctx: ContextVar[str] = ContextVar("trace_id", default="-")

def set_trace_id(value: str | None = None) -> str:
    """Define trace_id no contexto atual e retorna o valor definido."""
    tid = value or uuid4().hex
    trace_id_ctx.set(tid)
    return tid

def _add_trace_id(_, __, ev: dict) -> dict:
    return {**ev, "trace_id": trace_id_ctx.get()}

def configure_logging(level: str = "INFO") -> None:
    """Configura structlog para JSON em stdout com trace_id injetado automaticamente."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            _add_trace_id,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.INFO)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
    )

def get_logger() -> structlog.stdlib.BoundLogger:
    return structlog.get_logger()
