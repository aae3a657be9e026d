"""Structured logging for Interlace.

Interlace is a library first: importing it or asking for a logger never
touches the host's logging setup. Every logger returned by ``get_logger``
sits on a stdlib ``logging.Logger`` named after the module, so the host's
handlers and levels decide what is emitted.

Applications that want Interlace's own rendering (the CLI does) call
``configure_logging`` once. It installs a single stdout handler on the root
logger with a structlog ``ProcessorFormatter``, console or JSON, and stamps
every event with a service name. Handlers the host installed are left
alone, and calling it again swaps only the handler it added.

Environment Variables:
    INTERLACE_LOG_FORMAT: "json" or "console"
    INTERLACE_LOG_LEVEL: DEBUG, INFO, WARNING or ERROR
    INTERLACE_SERVICE_NAME: Service name stamped on every event
    INTERLACE_DEBUG: "true" or "1" to log context variables unredacted

Example:
    >>> from interlace.observability.logging import configure_logging, get_logger
    >>> configure_logging(log_format="json", log_level="INFO")
    >>> logger = get_logger("interlace.dispatch.engine")
    >>> logger.info("interlace.discovery.started", channel="/menu")
"""

import logging
import os
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "console"
DEFAULT_SERVICE_NAME = "interlace"

ENV_LOG_FORMAT = "INTERLACE_LOG_FORMAT"
ENV_LOG_LEVEL = "INTERLACE_LOG_LEVEL"
ENV_SERVICE_NAME = "INTERLACE_SERVICE_NAME"
ENV_DEBUG = "INTERLACE_DEBUG"

REDACTED_PLACEHOLDER = "***REDACTED***"

# Case-insensitive key substrings whose values are never logged
_SENSITIVE_KEY_PATTERNS = frozenset({"password", "token", "secret", "key", "authorization", "auth"})

# Handler added by configure_logging and the root level it replaced
_installed_handler: logging.Handler | None = None
_replaced_root_level: int | None = None


def _is_sensitive_key(key: str) -> bool:
    lower = key.lower()
    return any(pattern in lower for pattern in _SENSITIVE_KEY_PATTERNS)


def sanitize_for_logging(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with sensitive values redacted.

    Context variables are caller-defined, so the engine passes them through
    here before logging them. Nested dicts and lists of dicts are handled
    recursively; non-string keys are matched on their ``str()`` form.

    Example:
        >>> sanitize_for_logging({"origFile": "a.svg", "auth_token": "abc"})
        {'origFile': 'a.svg', 'auth_token': '***REDACTED***'}
    """
    if not data:
        return {}
    result: dict[str, Any] = {}
    for k, v in data.items():
        if _is_sensitive_key(str(k)):
            result[k] = REDACTED_PLACEHOLDER
        elif isinstance(v, dict):
            result[k] = sanitize_for_logging(v)
        elif isinstance(v, list):
            result[k] = [
                sanitize_for_logging(item) if isinstance(item, dict) else item for item in v
            ]
        else:
            result[k] = v
    return result


def is_debug_mode() -> bool:
    """Return True if INTERLACE_DEBUG is set to a truthy value."""
    value = os.environ.get(ENV_DEBUG, "").strip().lower()
    return value in ("true", "1", "yes", "on")


class ServiceNameStamper:
    """Processor that adds ``service=<name>`` to events that carry none."""

    def __init__(self, service_name: str) -> None:
        self.service_name = service_name

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", self.service_name)
        return event_dict


def _pre_chain(service_name: str) -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        ServiceNameStamper(service_name),
    ]


def _build_formatter(log_format: str, service_name: str) -> structlog.stdlib.ProcessorFormatter:
    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_pre_chain(service_name),
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )


def configure_logging(
    log_format: str | None = None,
    log_level: str | None = None,
    service_name: str | None = None,
    force: bool = False,
) -> None:
    """Render Interlace and stdlib log records through structlog on stdout.

    Meant for applications and the CLI, never called by the library itself.

    Args:
        log_format: "json" or "console". Defaults to env var or "console"
        log_level: Root log level. Defaults to env var or "INFO"
        service_name: Stamped on every event. Defaults to env var or "interlace"
        force: Replace an earlier configuration instead of keeping it
    """
    global _installed_handler, _replaced_root_level

    if _installed_handler is not None and not force:
        return

    log_format = (log_format or os.environ.get(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT)).lower()
    log_level = (log_level or os.environ.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL)).upper()
    service_name = service_name or os.environ.get(ENV_SERVICE_NAME, DEFAULT_SERVICE_NAME)

    # Rendering happens in the handler's formatter, shared with stdlib records
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_pre_chain(service_name),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter(log_format, service_name))

    root_logger = logging.getLogger()
    if _installed_handler is not None:
        root_logger.removeHandler(_installed_handler)
    else:
        _replaced_root_level = root_logger.level
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level))
    _installed_handler = handler


def reset_logging() -> None:
    """Undo ``configure_logging``: drop its handler and restore structlog defaults.

    Host handlers and the root level the host had set are kept as they were.
    """
    global _installed_handler, _replaced_root_level

    root_logger = logging.getLogger()
    if _installed_handler is not None:
        root_logger.removeHandler(_installed_handler)
        _installed_handler.close()
        _installed_handler = None
    if _replaced_root_level is not None:
        root_logger.setLevel(_replaced_root_level)
        _replaced_root_level = None
    structlog.reset_defaults()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structured logger on top of the stdlib logger ``name``.

    No configuration happens here. Until an application configures
    logging, records follow the host's stdlib handlers and levels.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("interlace.registry.registered", channel="/menu")
    """
    return structlog.wrap_logger(
        logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger
    )
