"""
Estados canônicos do ciclo de vida do cliente.

Este módulo define as fases que uma conexão com o homeserver pode
assumir. O status é a fonte única de verdade do ciclo de vida e é
compartilhado por todo o processo.
"""

from enum import StrEnum


class ClientStatus(StrEnum):
    """
    Fases do ciclo de vida de uma sessão com o homeserver.

    Estados:
        - IDLE: Sem sessão autenticada ativa (estado de repouso)
        - CONNECTING: Cliente sendo construído e homeserver validado
        - SYNCING: Credencial confirmada, sincronização em andamento
        - READY: Primeira sincronização completa recebida
    """

    IDLE = "idle"
    CONNECTING = "connecting"
    SYNCING = "syncing"
    READY = "ready"

    def __str__(self) -> str:
        return self.value


# Estados que sinalizam uma operação de ciclo de vida em andamento.
# Enquanto o status estiver aqui, bootstrap/resume concorrentes são rejeitados.
BUSY_STATES: frozenset[ClientStatus] = frozenset({
    ClientStatus.CONNECTING,
    ClientStatus.SYNCING,
})

# Estados que exigem Client Session construída
SESSION_STATES: frozenset[ClientStatus] = frozenset({
    ClientStatus.SYNCING,
    ClientStatus.READY,
})

DEFAULT_INITIAL_STATUS: ClientStatus = ClientStatus.IDLE


def is_busy(status: ClientStatus) -> bool:
    """
    Verifica se o status indica operação de ciclo de vida em andamento.

    Args:
        status: Status a ser verificado

    Returns:
        True se connecting/syncing
    """
    return status in BUSY_STATES


def is_valid_status(status: object) -> bool:
    """Verifica se o valor é um ClientStatus válido."""
    return isinstance(status, ClientStatus)
