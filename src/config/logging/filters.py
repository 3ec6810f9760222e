"""Filters de logging para injeção de contexto da sessão.

Campos injetados:
- correlation_id: ID da tentativa de bootstrap/resume em curso
- service: Nome do serviço
- client_status: Status atual do ciclo de vida (idle|connecting|syncing|ready)

Nunca registrar access tokens.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class SessionContextFilter(logging.Filter):
    """Injeta correlation_id, service e client_status em cada record.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
        status_getter: Função que retorna o status atual do cliente.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
        status_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")
        self._get_status = status_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        """Enriquece o record; valores passados via `extra` são preservados.

        Returns:
            True sempre (não filtra, apenas enriquece).
        """
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        record.service = self._service_name
        if not getattr(record, "client_status", None):
            record.client_status = str(self._get_status())
        return True
