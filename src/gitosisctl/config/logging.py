"""structlog configuration for gitosisctl.

Both structlog loggers and plain ``logging`` loggers end up on one stderr
handler, rendered either for humans (console renderer) or as JSON lines
(``--log-json``) for log shippers.

The mutation audit trail lives in git commit messages; these logs are the
operator-facing trace of each mutation's state transitions.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

APP_LOGGER = "gitosisctl"

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


_state = {"configured": False}
_PLAIN = structlog.processors.KeyValueRenderer(key_order=["event"], drop_missing=True)


def _finalize(
    logger: Any, method_name: str, event_dict: structlog.types.EventDict
) -> Any:
    """Hand off to ProcessorFormatter once configured; plain key=value text before."""
    if _state["configured"]:
        return structlog.stdlib.ProcessorFormatter.wrap_for_formatter(
            logger, method_name, event_dict
        )
    return _PLAIN(logger, method_name, event_dict)


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install the stderr handler and structlog pipeline.

    Safe to call repeatedly: the root logger's handlers are replaced, not
    stacked.

    Args:
        verbose: DEBUG for the ``gitosisctl`` logger; otherwise WARNING.
        log_json: JSON lines instead of the console renderer.
    """
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(APP_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
    _state["configured"] = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """A structlog logger routed through the stdlib logger *name*.

    Bound to stdlib directly, so library callers that never run
    :func:`configure_logging` get one ``key=value`` string per record on
    their own handlers instead of structlog's stdout default.
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=[*_SHARED_PROCESSORS, _finalize],
        wrapper_class=structlog.stdlib.BoundLogger,
    )
