"""Homeserver Validator — checagem de compatibilidade com o protocolo.

Consulta as versões anunciadas pelo homeserver e responde
verdadeiro/falso. Nunca levanta: rede, timeout e payload inválido
viram False.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from session_core.domain.homeserver import normalize_url
from session_core.protocols.models import ClientConfig
from session_core.services.client_teardown import release_client

if TYPE_CHECKING:
    from session_core.protocols.protocol_client import (
        ClientFactoryProtocol,
        ProtocolClientProtocol,
    )

logger = logging.getLogger(__name__)

DEFAULT_VALIDATION_TIMEOUT_SECONDS = 10.0


class HomeserverValidator:
    """Valida URLs candidatas e clientes já construídos."""

    def __init__(
        self,
        client_factory: ClientFactoryProtocol,
        timeout_seconds: float = DEFAULT_VALIDATION_TIMEOUT_SECONDS,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds deve ser positivo")
        self._factory = client_factory
        self._timeout = timeout_seconds

    async def validate(self, url: str) -> bool:
        """Valida uma URL com cliente descartável, sem tocar na sessão."""
        if not isinstance(url, str):
            logger.info("homeserver_url_rejected", extra={"reason": "not_a_string"})
            return False
        try:
            normalized = normalize_url(url)
        except ValueError:
            logger.info("homeserver_url_rejected", extra={"reason": "malformed_url"})
            return False

        try:
            client = self._factory.create_client(
                ClientConfig(base_url=normalized, request_timeout_seconds=self._timeout)
            )
        except Exception as exc:
            logger.warning(
                "homeserver_validation_client_failed",
                extra={"homeserver": normalized, "error_type": type(exc).__name__},
            )
            return False

        try:
            return await self.validate_client(client)
        finally:
            await release_client(client, step="validation_client_release")

    async def validate_client(self, client: ProtocolClientProtocol) -> bool:
        """Valida o homeserver ao qual `client` está ligado."""
        try:
            async with asyncio.timeout(self._timeout):
                versions = await client.get_versions()
        except TimeoutError:
            logger.info(
                "homeserver_validation_timeout",
                extra={"homeserver": client.base_url, "timeout_seconds": self._timeout},
            )
            return False
        except Exception as exc:
            logger.info(
                "homeserver_validation_failed",
                extra={"homeserver": client.base_url, "error_type": type(exc).__name__},
            )
            return False

        if not versions.is_compatible:
            logger.info(
                "homeserver_incompatible",
                extra={"homeserver": client.base_url, "versions": versions.versions},
            )
            return False
        return True
