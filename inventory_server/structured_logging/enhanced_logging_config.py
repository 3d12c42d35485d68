"""
Structlog-based logging configuration for the inventory server.

Every module obtains its logger through ``get_logger(__name__)`` and logs
key-value events. ``setup_enhanced_logging`` wires the processor chain once per
process and, unless disabled, mirrors records into per-subsystem log files
under ``<log_base>/<environment>/``.
"""

import json
import logging
import os
import sys
import uuid
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.contextvars import (
    bind_contextvars,
    clear_contextvars,
    merge_contextvars,
)
from structlog.stdlib import BoundLogger, LoggerFactory

VALID_ENVIRONMENTS = ["local", "unit_test", "production"]

SENSITIVE_KEYS = [
    "password",
    "token",
    "secret",
    "credential",
    "auth",
    "api_key",
    "private_key",
    "authorization",
]

# Logger name prefixes routed to each subsystem file.
LOG_CATEGORIES: dict[str, list[str]] = {
    "items": [
        "inventory_server.services",
        "inventory_server.game",
    ],
    "persistence": [
        "inventory_server.persistence",
        "inventory_server.services.persistence_scheduler",
    ],
    "api": [
        "inventory_server.api",
        "inventory_server.app",
        "uvicorn",
    ],
}

_LOGGING_INITIALIZED = False
_LOGGING_SIGNATURE: str | None = None


def _ensure_log_directory(log_path: Path) -> None:
    """Create the parent directory of ``log_path`` if it does not exist."""
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        # Logging must not take the server down over a directory problem.
        structlog.get_logger(__name__).warning(
            "Failed to create log directory",
            directory=str(log_path.parent),
            error=str(e),
        )


def _resolve_log_base(log_base: str) -> Path:
    """
    Resolve ``log_base`` relative to the project root.

    The project root is the nearest directory (walking up from the current
    working directory) that contains a ``pyproject.toml``.
    """
    log_path = Path(log_base)
    if log_path.is_absolute():
        return log_path

    current_dir = Path.cwd()
    for parent in [current_dir] + list(current_dir.parents):
        if (parent / "pyproject.toml").exists():
            return parent / log_path
    return current_dir / log_path


def detect_environment() -> str:
    """
    Detect the current environment.

    Returns:
        One of "unit_test", "local" or "production".
    """
    if "pytest" in sys.modules:
        return "unit_test"

    env = os.getenv("LOGGING_ENVIRONMENT", "")
    if env in VALID_ENVIRONMENTS:
        return env

    return "local"


def sanitize_sensitive_data(_logger: Any, _name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Redact values whose keys look like credentials, recursively."""

    def sanitize_dict(d: dict[str, Any]) -> dict[str, Any]:
        sanitized: dict[str, Any] = {}
        for key, value in d.items():
            if isinstance(value, dict):
                sanitized[key] = sanitize_dict(value)
            elif isinstance(key, str) and any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
                sanitized[key] = "[REDACTED]"
            else:
                sanitized[key] = value
        return sanitized

    return sanitize_dict(event_dict)


def add_correlation_id(_logger: Any, _name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Attach a correlation id when the bound context did not provide one."""
    if "correlation_id" not in event_dict:
        event_dict["correlation_id"] = str(uuid.uuid4())
    return event_dict


def configure_enhanced_structlog(
    environment: str | None = None,
    log_level: str = "INFO",
    log_config: dict[str, Any] | None = None,
) -> None:
    """
    Configure structlog processors and, optionally, file handlers.

    Args:
        environment: Environment name (auto-detected if None)
        log_level: Logging level name
        log_config: Logging section of the server configuration
    """
    if environment is None:
        environment = detect_environment()

    if log_config and not log_config.get("disable_logging", False):
        _setup_enhanced_file_logging(environment, log_config, log_level)

    structlog.configure(
        processors=[
            merge_contextvars,
            sanitize_sensitive_data,
            add_correlation_id,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"]),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=False,
    )


class SafeRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that recreates its directory before opening the file."""

    def _open(self):  # noqa: N802
        if self.baseFilename:
            _ensure_log_directory(Path(self.baseFilename))
        return super()._open()


class _CategoryFilter(logging.Filter):
    """Pass records whose logger name starts with one of the given prefixes."""

    def __init__(self, prefixes: list[str]):
        super().__init__()
        self._prefixes = tuple(prefixes)

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name.startswith(self._prefixes)


def _parse_max_bytes(max_size: str | int) -> int:
    if isinstance(max_size, int):
        return max_size
    if max_size.endswith("MB"):
        return int(max_size[:-2]) * 1024 * 1024
    if max_size.endswith("KB"):
        return int(max_size[:-2]) * 1024
    if max_size.endswith("B"):
        return int(max_size[:-1])
    return int(max_size)


def _setup_enhanced_file_logging(environment: str, log_config: dict[str, Any], log_level: str) -> None:
    """Attach one rotating file handler per subsystem plus an errors log."""
    env_log_dir = _resolve_log_base(log_config.get("log_base", "logs")) / environment
    _ensure_log_directory(env_log_dir / ".keep")

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))

    max_bytes = _parse_max_bytes(log_config.get("rotation_max_size", "10MB"))
    backup_count = int(log_config.get("rotation_backup_count", 5))
    formatter = logging.Formatter("%(message)s")

    for category, prefixes in LOG_CATEGORIES.items():
        handler = SafeRotatingFileHandler(
            env_log_dir / f"{category}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        handler.setFormatter(formatter)
        handler.addFilter(_CategoryFilter(prefixes))
        root_logger.addHandler(handler)

    errors_handler = SafeRotatingFileHandler(
        env_log_dir / "errors.log",
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    errors_handler.setLevel(logging.ERROR)
    errors_handler.setFormatter(formatter)
    root_logger.addHandler(errors_handler)

    if log_config.get("console", True):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)


def setup_enhanced_logging(config: dict[str, Any], *, force_reconfigure: bool = False) -> None:
    """
    Set up logging once per process.

    Args:
        config: Server configuration dictionary (the ``logging`` key is used)
        force_reconfigure: Tear down existing root handlers and configure again
    """
    global _LOGGING_INITIALIZED
    global _LOGGING_SIGNATURE

    config_signature = json.dumps(config, sort_keys=True, default=str)

    if _LOGGING_INITIALIZED and not force_reconfigure:
        get_logger(__name__).debug(
            "setup_enhanced_logging skipped; logging system already initialized",
            config_signature=_LOGGING_SIGNATURE,
        )
        return

    if force_reconfigure:
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

    logging_config = config.get("logging", {})
    environment = logging_config.get("environment") or detect_environment()
    log_level = logging_config.get("level", "INFO")

    configure_enhanced_structlog(environment, log_level, logging_config)

    get_logger(__name__).info(
        "Logging system initialized",
        environment=environment,
        log_level=log_level,
        log_base=logging_config.get("log_base", "logs"),
        file_logging=not logging_config.get("disable_logging", False),
    )

    _LOGGING_INITIALIZED = True
    _LOGGING_SIGNATURE = config_signature


def bind_request_context(
    correlation_id: str | None = None,
    player_id: str | None = None,
    operation: str | None = None,
    **kwargs,
) -> None:
    """
    Bind per-call context so every log entry emitted while handling the call carries it.

    Args:
        correlation_id: Correlation ID for the call (generated when omitted)
        player_id: Acting player, when known
        operation: Remote-call name
        **kwargs: Additional context variables
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    context_vars = {
        "correlation_id": correlation_id,
        "player_id": player_id,
        "operation": operation,
        "bound_at": datetime.now(UTC).isoformat(),
        **kwargs,
    }
    bind_contextvars(**{k: v for k, v in context_vars.items() if v is not None})


def clear_request_context() -> None:
    """Clear the current call context."""
    clear_contextvars()


def get_current_context() -> dict[str, Any]:
    """Get the current logging context."""
    return structlog.contextvars.get_contextvars()


def get_logger(name: str) -> Any:  # Returns BoundLogger but typed as Any for flexibility
    """
    Get a structlog logger with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)
