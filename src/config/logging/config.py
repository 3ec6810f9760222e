"""Configuração centralizada de logging.

Uso:
    from config.logging import configure_logging, get_logger

    # Na composição (session_core/bootstrap/)
    configure_logging(level="INFO", service_name="homeserver-session")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("bootstrap_started", extra={"homeserver": "matrix.org"})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import SessionContextFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "homeserver-session"


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
    status_getter: Callable[[], str] | None = None,
) -> None:
    """Configura logging JSON estruturado.

    Deve ser chamada uma vez na inicialização; substitui os handlers do root.

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id do contexto.
        status_getter: Função que retorna o status atual do cliente.

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(
        SessionContextFilter(service_name, correlation_id_getter, status_getter)
    )

    root = logging.getLogger()
    root.setLevel(level_upper)
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o módulo especificado."""
    return logging.getLogger(name)


def log_degraded(
    logger: logging.Logger,
    step: str,
    reason: str | None = None,
) -> None:
    """Registra etapa que falhou sem abortar a sessão.

    Usado para falhas toleradas (init de criptografia, warm-up do cache,
    resume silencioso).

    Args:
        logger: Logger instance.
        step: Nome da etapa (ex: "crypto_init").
        reason: Motivo da falha, sem credenciais.
    """
    extra: dict[str, object] = {
        "degraded": True,
        "step": step,
    }
    if reason:
        extra["reason"] = reason

    logger.warning("Degraded step %s", step, extra=extra)
