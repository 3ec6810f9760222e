"""Configuração de logging estruturado.

Uso:
    from config.logging import configure_logging, get_logger

    configure_logging(level="INFO", service_name="homeserver-session")

    logger = get_logger(__name__)
    logger.info("client_status_changed", extra={"to_status": "ready"})

Campos obrigatórios em todo log: correlation_id, service, client_status,
level, logger, message, asctime.
"""

from config.logging.config import configure_logging, get_logger, log_degraded
from config.logging.filters import SessionContextFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    "SessionContextFilter",
    "configure_logging",
    "create_json_formatter",
    "get_logger",
    "log_degraded",
]
