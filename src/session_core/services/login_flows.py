"""Login Flow Discovery — métodos de autenticação do homeserver ativo."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from session_core.errors import InvalidHomeserver

if TYPE_CHECKING:
    from session_core.protocols.models import LoginFlow
    from session_core.sessions.state import ClientSessionState

logger = logging.getLogger(__name__)


class LoginFlowDiscovery:
    """Consulta os login flows usando a Client Session atual.

    Cada chamada refaz a consulta; o último resultado fica em cache no
    estado compartilhado.
    """

    def __init__(self, state: ClientSessionState, timeout_seconds: float = 30.0) -> None:
        self._state = state
        self._timeout = timeout_seconds

    async def discover(self) -> tuple[LoginFlow, ...]:
        """Devolve os flows anunciados; vazio se não houver cliente.

        Raises:
            InvalidHomeserver: Falha de rede, timeout ou resposta inválida.
        """
        client = self._state.client
        if client is None:
            return ()

        generation = self._state.generation
        try:
            async with asyncio.timeout(self._timeout):
                flows = tuple(await client.login_flows())
        except Exception as exc:
            logger.warning(
                "login_flows_failed",
                extra={"homeserver": client.base_url, "error_type": type(exc).__name__},
            )
            raise InvalidHomeserver(
                f"Could not fetch login flows from {client.base_url}: {exc or type(exc).__name__}"
            ) from exc

        # cliente trocado durante a consulta: não contamina o cache novo
        if self._state.generation == generation and self._state.client is client:
            self._state.cache_login_flows(flows)
        logger.debug("login_flows_discovered", extra={"flows": [flow.type for flow in flows]})
        return flows
