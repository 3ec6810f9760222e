"""Taxonomia de erros do ciclo de vida da sessão.

Falhas de validação e construção sempre fazem rollback para o estado
não autenticado antes de chegar ao caller. Timeouts de rede não têm tipo
próprio: aparecem como a falha da etapa em que ocorreram.
"""

from __future__ import annotations


class SessionLifecycleError(Exception):
    """Base para erros do ciclo de vida da sessão."""


class BootstrapError(SessionLifecycleError):
    """Falha do bootstrap; a mensagem original é preservada."""


class NoHomeserverSelected(BootstrapError):
    """Bootstrap chamado sem homeserver selecionado."""

    def __init__(self, message: str = "Cannot create client if no homeserver is selected.") -> None:
        super().__init__(message)


class InvalidHomeserver(BootstrapError):
    """Homeserver inacessível ou não compatível com o protocolo."""


class ClientConstructionFailed(BootstrapError):
    """Falha ao montar recursos locais (stores, cliente)."""


class BootstrapInProgress(BootstrapError):
    """Já existe bootstrap/resume em andamento (status connecting/syncing)."""

    def __init__(self, status: str) -> None:
        super().__init__(f"Lifecycle operation already in progress (status={status})")
        self.status = status


class LifecycleCancelled(SessionLifecycleError):
    """Logout executado enquanto bootstrap/resume aguardava a rede."""


class AuthenticationExpired(SessionLifecycleError):
    """Credencial persistida rejeitada na etapa who-am-i.

    Attributes:
        credential_rejected: True quando o homeserver recusou a credencial
            (401/403, M_UNKNOWN_TOKEN); False para falhas de rede/timeout,
            em que a credencial é mantida para nova tentativa.
    """

    def __init__(self, message: str, credential_rejected: bool = True) -> None:
        super().__init__(message)
        self.credential_rejected = credential_rejected


class SessionNotInitialized(SessionLifecycleError):
    """Operação exige Client Session construída."""

    def __init__(self, message: str = "No client session; run bootstrap first.") -> None:
        super().__init__(message)


class StatusTransitionRejected(SessionLifecycleError):
    """Transição de status negada pelo grafo ou pelos guards."""
