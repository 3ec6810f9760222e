"""Bootstrap — composition root do homeserver-session.

Configura logging, valida settings e conecta implementações concretas
aos protocolos.

Uso:
    from session_core.bootstrap import initialize_app, get_session_manager

    initialize_app()
    manager = get_session_manager()
    manager.select_homeserver("https://matrix.org")
    await manager.bootstrap()
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from config.logging import configure_logging
from config.settings import get_base_settings, get_client_settings, get_storage_settings
from session_core.observability import get_correlation_id

if TYPE_CHECKING:
    from session_core.sessions.manager import MatrixSessionManager

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Configura logging JSON com correlation_id e status do cliente."""
    base = get_base_settings()
    configure_logging(
        level=base.log_level,
        service_name=base.service_name,
        correlation_id_getter=get_correlation_id,
        status_getter=_current_status,
    )


def validate_runtime_settings() -> None:
    """Valida settings no startup; falha rápido fora de development/test."""
    base = get_base_settings()
    errors = [f"base: {error}" for error in base.validate()]
    errors.extend(f"client: {error}" for error in get_client_settings().validate())
    errors.extend(f"storage: {error}" for error in get_storage_settings().validate(base))

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": base.environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": base.environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if not base.is_development:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {base.environment}:\n{details}")


@lru_cache(maxsize=1)
def get_session_manager() -> MatrixSessionManager:
    """Obtém a façade do processo (singleton)."""
    from session_core.bootstrap.dependencies import build_session_manager

    return build_session_manager()


def _current_status() -> str:
    if get_session_manager.cache_info().currsize == 0:
        return ""
    return get_session_manager().status.value


__all__ = [
    "get_session_manager",
    "initialize_app",
    "validate_runtime_settings",
]
