"""Façade do ciclo de vida da sessão (MatrixSessionManager).

Ponto de entrada único para a UI/CLI: seleção de homeserver, bootstrap,
resume, login por token, logout e consultas de estado. Bootstrap,
resume e logout são seções críticas mutuamente exclusivas guardadas
pelo próprio status.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging import log_degraded
from fsm.states.status import ClientStatus
from session_core.domain.homeserver import normalize_url
from session_core.errors import (
    BootstrapInProgress,
    LifecycleCancelled,
    SessionNotInitialized,
    StatusTransitionRejected,
)
from session_core.observability import correlation_scope
from session_core.services.client_teardown import forget_identity, release_client
from utils.errors import InfrastructureError

if TYPE_CHECKING:
    from fsm.manager.machine import StatusObserver, StatusSubscription
    from fsm.types.transition import StatusTransition
    from session_core.domain.homeserver import Homeserver
    from session_core.protocols.models import LoginFlow
    from session_core.protocols.protocol_client import ProtocolClientProtocol
    from session_core.protocols.stores import StoreFactoryProtocol
    from session_core.results import BootstrapReport, ResumeReport
    from session_core.services import (
        DeviceVerificationCheck,
        HomeserverRegistry,
        HomeserverValidator,
        LoginFlowDiscovery,
        SessionBootstrapper,
        SessionResumer,
    )
    from session_core.sessions.state import ClientSessionState

logger = logging.getLogger(__name__)


class MatrixSessionManager:
    """Façade sobre o estado compartilhado e os serviços do ciclo de vida."""

    def __init__(
        self,
        state: ClientSessionState,
        *,
        registry: HomeserverRegistry,
        validator: HomeserverValidator,
        bootstrapper: SessionBootstrapper,
        resumer: SessionResumer,
        login_flows: LoginFlowDiscovery,
        verification: DeviceVerificationCheck,
        store_factory: StoreFactoryProtocol,
    ) -> None:
        self._state = state
        self._registry = registry
        self._validator = validator
        self._bootstrapper = bootstrapper
        self._resumer = resumer
        self._login_flows = login_flows
        self._verification = verification
        self._store_factory = store_factory

    # Estado

    @property
    def state(self) -> ClientSessionState:
        return self._state

    @property
    def status(self) -> ClientStatus:
        return self._state.status

    @property
    def client(self) -> ProtocolClientProtocol | None:
        return self._state.client

    @property
    def homeserver(self) -> Homeserver | None:
        return self._state.homeserver

    @property
    def homeservers(self) -> list[Homeserver]:
        return self._registry.list_homeservers()

    @property
    def access_token(self) -> str | None:
        return self._state.identity.load_access_token()

    @property
    def device_id(self) -> str:
        return self._state.identity.device_id()

    @property
    def user_id(self) -> str | None:
        return self._state.user_id

    @property
    def login_flows(self) -> tuple[LoginFlow, ...]:
        return self._state.login_flows

    @property
    def history(self) -> list[StatusTransition]:
        return self._state.history

    def subscribe(self, observer: StatusObserver) -> StatusSubscription:
        return self._state.subscribe(observer)

    # Homeservers

    async def validate_homeserver(self, url: str) -> bool:
        return await self._validator.validate(url)

    def add_homeserver(self, url: str, favorite: bool = False) -> Homeserver:
        return self._registry.add_homeserver(url, favorite=favorite)

    def select_homeserver(self, url: str) -> Homeserver:
        """Seleciona um homeserver (find-or-insert).

        Raises:
            ValueError: URL malformada.
            BootstrapInProgress: Bootstrap/resume em andamento.
            StatusTransitionRejected: Sessão ativa em outro homeserver.
        """
        if self._state.is_busy:
            raise BootstrapInProgress(self._state.status.value)
        current = self._state.homeserver
        if (
            self._state.status == ClientStatus.READY
            and current is not None
            and current.url != normalize_url(url)
        ):
            raise StatusTransitionRejected("Log out before selecting another homeserver.")
        return self._registry.select_homeserver(url)

    def remove_homeserver(self, url: str) -> bool:
        return self._registry.remove_homeserver(url)

    def set_favorite(self, url: str, favorite: bool = True) -> Homeserver | None:
        return self._registry.set_favorite(url, favorite)

    # Ciclo de vida

    async def bootstrap(self) -> BootstrapReport:
        return await self._bootstrapper.bootstrap()

    async def resume(self) -> ResumeReport:
        """Retoma a sessão com a credencial ligada ao cliente atual.

        Em caso de falha o status volta a IDLE e o erro é propagado.

        Raises:
            SessionNotInitialized: Sem cliente ou sem credencial.
            BootstrapInProgress: Status diferente de IDLE.
            StatusTransitionRejected: Nenhum homeserver selecionado.
            AuthenticationExpired: Credencial recusada ou não confirmada.
        """
        client = self._state.client
        if client is None:
            raise SessionNotInitialized()
        if self._state.status != ClientStatus.IDLE:
            raise BootstrapInProgress(self._state.status.value)
        if not client.access_token:
            raise SessionNotInitialized("No access token; complete manual login first.")

        with correlation_scope("resume"):
            # seção crítica reivindicada antes do primeiro await
            self._state.set_status(ClientStatus.CONNECTING, "resume_started")
            generation = self._state.generation
            try:
                return await self._resumer.resume()
            except LifecycleCancelled:
                raise
            except Exception as exc:
                await self._resumer.handle_failure(exc, generation, client)
                raise

    async def login_with_access_token(self, access_token: str) -> ResumeReport:
        """Recebe a credencial do login manual e retoma a sessão."""
        token = access_token.strip()
        if not token:
            raise ValueError("access_token não pode ser vazio")
        client = self._state.client
        if client is None:
            raise SessionNotInitialized()
        if self._state.status != ClientStatus.IDLE:
            raise BootstrapInProgress(self._state.status.value)

        self._state.identity.save_access_token(token)
        client.set_credentials(token)
        return await self.resume()

    async def unset_current_homeserver(self) -> None:
        """Logout: seleção, credencial e cliente descartados; status IDLE.

        Seguro em qualquer status e idempotente. O status é reiniciado
        antes das escritas no Identity Store; falhas de IO são toleradas.
        """
        client = self._state.reset("logout")
        forget_identity(self._state.identity, step="logout_identity_clear")
        try:
            self._store_factory.clear()
        except InfrastructureError as exc:
            log_degraded(logger, "local_store_clear", type(exc).__name__)
        if client is not None:
            await release_client(client, step="logout_client_release")
        logger.info("session_logged_out", extra={"had_client": client is not None})

    logout = unset_current_homeserver

    # Consultas

    async def fetch_login_flows(self) -> tuple[LoginFlow, ...]:
        return await self._login_flows.discover()

    async def is_device_verified(self) -> bool:
        return await self._verification.is_device_verified()
