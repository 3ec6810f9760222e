"""Estado compartilhado da sessão.

Objeto único, passado por referência a todos os componentes, que reúne
status, homeserver selecionado, Client Session e identidade. Toda
mudança de status passa por set_status()/reset(), o ponto único de
mutação que preserva a exclusão mútua bootstrap/resume/logout.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fsm.manager.machine import StatusMachine
from fsm.states.status import ClientStatus
from session_core.errors import StatusTransitionRejected

if TYPE_CHECKING:
    from fsm.manager.machine import StatusObserver, StatusSubscription
    from fsm.types.transition import StatusTransition
    from session_core.domain.homeserver import Homeserver
    from session_core.identity.store import IdentityStore
    from session_core.protocols.models import LoginFlow
    from session_core.protocols.protocol_client import ProtocolClientProtocol

logger = logging.getLogger(__name__)


class ClientSessionState:
    """Estado do ciclo de vida compartilhado entre os componentes.

    Attributes:
        status: Fase atual (idle|connecting|syncing|ready)
        client: Client Session ativa ou None
        generation: Incrementado a cada reset; permite a operações em voo
            detectar que um logout aconteceu enquanto aguardavam a rede
    """

    __slots__ = ("_client", "_generation", "_identity", "_login_flows", "_machine", "_user_id")

    def __init__(
        self,
        identity: IdentityStore,
        machine: StatusMachine | None = None,
    ) -> None:
        self._identity = identity
        self._machine = machine or StatusMachine()
        self._client: ProtocolClientProtocol | None = None
        self._user_id: str | None = None
        self._login_flows: tuple[LoginFlow, ...] = ()
        self._generation = 0

    @property
    def identity(self) -> IdentityStore:
        return self._identity

    @property
    def status(self) -> ClientStatus:
        return self._machine.current

    @property
    def is_busy(self) -> bool:
        return self._machine.is_busy

    @property
    def homeserver(self) -> Homeserver | None:
        return self._identity.load_selected_homeserver()

    @property
    def has_homeserver(self) -> bool:
        return self.homeserver is not None

    @property
    def client(self) -> ProtocolClientProtocol | None:
        return self._client

    @property
    def has_client(self) -> bool:
        return self._client is not None

    @property
    def user_id(self) -> str | None:
        return self._user_id

    @property
    def login_flows(self) -> tuple[LoginFlow, ...]:
        return self._login_flows

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def history(self) -> list[StatusTransition]:
        return self._machine.history

    def set_status(self, target: ClientStatus, trigger: str, **metadata: Any) -> StatusTransition:
        """Transiciona o status validando grafo e invariantes.

        Raises:
            StatusTransitionRejected: Se a transição for negada.
        """
        result = self._machine.transition(target, trigger, metadata=metadata, context=self)
        if not result.success or result.transition is None:
            raise StatusTransitionRejected(result.error_reason or "transition_rejected")
        return result.transition

    def try_set_status(self, target: ClientStatus, trigger: str, **metadata: Any) -> bool:
        """Variante sem exceção para callbacks assíncronos (ex: evento de sync)."""
        result = self._machine.transition(target, trigger, metadata=metadata, context=self)
        if not result.success:
            logger.debug(
                "status_transition_skipped",
                extra={"target": target.value, "reason": result.error_reason},
            )
        return result.success

    def attach_client(self, client: ProtocolClientProtocol) -> None:
        self._client = client
        self._user_id = None

    def bind_user(self, user_id: str) -> None:
        self._user_id = user_id

    def cache_login_flows(self, flows: tuple[LoginFlow, ...]) -> None:
        self._login_flows = flows

    def reset(self, trigger: str, **metadata: Any) -> ProtocolClientProtocol | None:
        """Volta a IDLE descartando a Client Session.

        Idempotente. O cliente descartado é devolvido para que o caller
        encerre o sync loop.
        """
        previous = self._client
        self._client = None
        self._user_id = None
        self._login_flows = ()
        self._generation += 1
        self._machine.reset(trigger, metadata=metadata)
        return previous

    def subscribe(self, observer: StatusObserver) -> StatusSubscription:
        """Inscreve observer de transições de status."""
        return self._machine.subscribe(observer)
