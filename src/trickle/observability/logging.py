"""Structured logging for Trickle.

Modules log through the standard library (``logging.getLogger(__name__)``).
The root handler runs those records through the same structlog processor
chain as native structlog loggers, so every line carries the request ID,
has its ``extra`` fields rendered, and has secrets blanked out.
"""

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog
from pydantic import SecretStr

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

HANDLER_NAME = "trickle"

# Exact key names only; "recipient" and "tx_hash" must stay visible.
REDACTED_FIELDS = frozenset(
    {
        "private_key",
        "private_key_file",
        "wallet_private_key",
        "secret",
        "password",
        "api_key",
        "auth_token",
        "mnemonic",
    }
)


def _add_request_id(
    _logger: logging.Logger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add the current request ID to the event, if any."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def _redact_sensitive(
    _logger: logging.Logger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Blank out sensitive keys and any pydantic secret values."""
    for key, value in event_dict.items():
        if key.lower() in REDACTED_FIELDS or isinstance(value, SecretStr):
            event_dict[key] = "[REDACTED]"
    return event_dict


def _shared_processors() -> list[structlog.typing.Processor]:
    """Processors applied to both structlog and stdlib records."""
    return [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso"),
        _add_request_id,
        _redact_sensitive,
    ]


def _build_handler(log_format: str) -> logging.Handler:
    final: list[structlog.typing.Processor]
    if log_format.lower() == "json":
        final = [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        # ConsoleRenderer formats exceptions itself.
        final = [
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ]

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_processors(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *final],
        )
    )
    return handler


def configure_logging(
    level: str = "INFO",
    log_format: str = "json",
) -> None:
    """Configure structured logging for the application.

    Calling it again replaces the handler installed by the previous call.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL), any case.
    log_format : str
        Output format, ``json`` or ``text``.

    Raises
    ------
    ValueError
        If ``level`` is not a known level name.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ValueError(
            f"Invalid log level: {level!r}. "
            "Valid levels are: DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)
    root.addHandler(_build_handler(log_format))
    root.setLevel(log_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def set_request_id(request_id: str) -> None:
    """Bind a request ID to the current context."""
    request_id_var.set(request_id)


def clear_request_id() -> None:
    """Unbind the request ID from the current context."""
    request_id_var.set(None)
