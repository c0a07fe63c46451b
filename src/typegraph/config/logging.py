"""Log routing for the typegraph CLI.

Services log through stdlib ``logging.getLogger(__name__)``. One stderr
handler renders every record with structlog, as coloured console lines
by default or as JSON objects with ``--log-json``. Structlog-native
loggers share the same processor chain, so both kinds of record look
alike.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Logger name -> (level when verbose, level otherwise)
_LEVELS: dict[str, tuple[int, int]] = {
    "typegraph": (logging.DEBUG, logging.WARNING),
    # engine echo (SQL text) is emitted at INFO
    "sqlalchemy.engine": (logging.INFO, logging.WARNING),
}


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install the stderr handler and set typegraph logger levels.

    Safe to call repeatedly; the root handler list is replaced each time.

    Args:
        verbose: DEBUG for typegraph loggers, INFO for SQL echo.
        log_json: Render JSON lines instead of console lines.
    """
    pre_chain = _pre_chain()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)

    for name, (loud, quiet) in _LEVELS.items():
        logging.getLogger(name).setLevel(loud if verbose else quiet)
