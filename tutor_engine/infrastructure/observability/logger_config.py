import logging

import structlog
from structlog.contextvars import merge_contextvars

from tutor_engine.core.settings import settings
from tutor_engine.infrastructure.observability.correlation import CorrelationLogFilter, get_correlation_id

TRACE_KEYS = ("student_id", "course_id", "turn_mode")


def add_context_vars(_, __, event_dict):
    """
    Moves tutoring identifiers under 'trace' and adds the request correlation ID.
    """
    cid = get_correlation_id()
    if cid:
        event_dict["correlation_id"] = cid

    trace = {}
    existing_trace = event_dict.get("trace", {})
    if isinstance(existing_trace, dict):
        trace.update(existing_trace)
    for key in TRACE_KEYS:
        if key in event_dict:
            trace[key] = event_dict.pop(key)

    if trace:
        event_dict["trace"] = {k: v for k, v in trace.items() if v is not None}

    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")

    return event_dict


def configure_structlog():
    """
    Routes structlog through stdlib logging with JSON output.
    """
    handler = logging.StreamHandler()
    handler.addFilter(CorrelationLogFilter())
    handler.setFormatter(
        logging.Formatter(" [%(asctime)s] [%(levelname)s] [trace_id=%(correlation_id)s] %(name)s: %(message)s")
    )

    resolved_level = str(settings.LOG_LEVEL or "INFO").upper()
    log_level = getattr(logging, resolved_level, logging.INFO)

    logging.basicConfig(format="%(message)s", level=log_level, handlers=[handler])

    structlog.configure(
        processors=[
            merge_contextvars,
            add_context_vars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
