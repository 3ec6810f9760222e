"""Session Bootstrapper — monta a Client Session do homeserver selecionado.

Fluxo:
    1. Status → CONNECTING (rejeita se já houver operação em andamento)
    2. Stores locais (sync cache, crypto store) em namespaces fixos
    3. Cliente ligado à URL, ao device id e à credencial persistidos
    4. Revalidação do homeserver com o cliente vivo
    5. Com credencial: resume silencioso (falha → IDLE, sem erro)
    6. Sem credencial: IDLE com cliente não autenticado

Falhas em 2–4 fazem rollback: seleção e credencial apagadas, cliente
descartado, status IDLE.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.settings.client import ClientSettings
from fsm.states.status import ClientStatus
from session_core.errors import (
    BootstrapInProgress,
    ClientConstructionFailed,
    InvalidHomeserver,
    LifecycleCancelled,
    NoHomeserverSelected,
)
from session_core.observability import correlation_scope
from session_core.protocols.models import ClientConfig
from session_core.results import BootstrapReport
from session_core.services.client_teardown import forget_identity, release_client

if TYPE_CHECKING:
    from session_core.domain.homeserver import Homeserver
    from session_core.protocols.protocol_client import (
        ClientFactoryProtocol,
        ProtocolClientProtocol,
    )
    from session_core.protocols.stores import StoreFactoryProtocol
    from session_core.services.homeserver_validator import HomeserverValidator
    from session_core.services.session_resume import SessionResumer
    from session_core.sessions.state import ClientSessionState

logger = logging.getLogger(__name__)


class SessionBootstrapper:
    """Orquestra o bootstrap sobre o estado compartilhado."""

    def __init__(
        self,
        state: ClientSessionState,
        client_factory: ClientFactoryProtocol,
        store_factory: StoreFactoryProtocol,
        validator: HomeserverValidator,
        resumer: SessionResumer,
        settings: ClientSettings | None = None,
    ) -> None:
        self._state = state
        self._client_factory = client_factory
        self._store_factory = store_factory
        self._validator = validator
        self._resumer = resumer
        self._settings = settings or ClientSettings()

    async def bootstrap(self) -> BootstrapReport:
        """Executa o bootstrap completo.

        Raises:
            NoHomeserverSelected: Nenhum homeserver selecionado.
            BootstrapInProgress: Status connecting/syncing.
            ClientConstructionFailed: Falha ao montar stores ou cliente.
            InvalidHomeserver: Homeserver não passou na revalidação.
            LifecycleCancelled: Logout durante o bootstrap.
        """
        homeserver = self._state.homeserver
        if homeserver is None:
            raise NoHomeserverSelected()
        if self._state.is_busy:
            raise BootstrapInProgress(self._state.status.value)

        with correlation_scope("bootstrap"):
            previous = self._state.client
            self._state.set_status(
                ClientStatus.CONNECTING, "bootstrap_started", homeserver=homeserver.url
            )
            generation = self._state.generation
            logger.info("bootstrap_started", extra={"homeserver": homeserver.url})

            if previous is not None:
                await release_client(previous, step="previous_client_release")
                self._ensure_current(generation)

            client = await self._construct(homeserver, generation)
            return await self._finish(homeserver, client, generation)

    async def _construct(self, homeserver: Homeserver, generation: int) -> ProtocolClientProtocol:
        identity = self._state.identity
        try:
            sync_cache, crypto_store = self._store_factory.create_stores()
            client = self._client_factory.create_client(
                ClientConfig(
                    base_url=homeserver.url,
                    device_id=identity.device_id(),
                    access_token=identity.load_access_token(),
                    store=sync_cache,
                    crypto_store=crypto_store,
                    timeline_support=self._settings.timeline_support,
                    verification_methods=self._settings.verification_methods,
                    request_timeout_seconds=self._settings.request_timeout_seconds,
                    sync_timeout_ms=self._settings.sync_timeout_ms,
                )
            )
        except Exception as exc:
            logger.error(
                "client_construction_failed",
                extra={"homeserver": homeserver.url, "error_type": type(exc).__name__},
            )
            await self._rollback(generation, "client_construction_failed")
            raise ClientConstructionFailed(str(exc) or type(exc).__name__) from exc

        self._state.attach_client(client)
        return client

    async def _finish(
        self,
        homeserver: Homeserver,
        client: ProtocolClientProtocol,
        generation: int,
    ) -> BootstrapReport:
        valid = await self._validator.validate_client(client)
        if self._state.generation != generation:
            await release_client(client, step="orphan_client_release")
            raise LifecycleCancelled("Session was logged out while bootstrapping.")
        if not valid:
            await self._rollback(generation, "homeserver_invalid")
            raise InvalidHomeserver(
                f"Homeserver ({homeserver.name}) does not seem to be a valid Matrix homeserver."
            )

        if not client.access_token:
            self._state.set_status(ClientStatus.IDLE, "awaiting_login")
            logger.info("bootstrap_awaiting_login", extra={"homeserver": homeserver.url})
            return BootstrapReport(homeserver_url=homeserver.url)

        try:
            report = await self._resumer.resume()
        except LifecycleCancelled:
            raise
        except Exception as exc:
            failure = await self._resumer.handle_failure(exc, generation, client)
            return BootstrapReport(homeserver_url=homeserver.url, resume_failure=failure)

        logger.info("bootstrap_completed", extra={"homeserver": homeserver.url, "resumed": True})
        return BootstrapReport(homeserver_url=homeserver.url, resumed=True, resume=report)

    def _ensure_current(self, generation: int) -> None:
        if self._state.generation != generation:
            raise LifecycleCancelled("Session was logged out while bootstrapping.")

    async def _rollback(self, generation: int, reason: str) -> None:
        """Volta ao estado não autenticado. Idempotente e sem exceções de IO.

        O status é reiniciado antes de qualquer escrita no Identity Store.
        """
        if self._state.generation != generation:
            return
        client = self._state.reset("bootstrap_rollback", reason=reason)
        forget_identity(self._state.identity, step="rollback_identity_clear")
        if client is not None:
            await release_client(client, step="rollback_client_release")
        logger.warning("bootstrap_rolled_back", extra={"reason": reason})
