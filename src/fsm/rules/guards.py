"""
Guards e invariantes para transições de status.

Guards bloqueiam transições que violariam as invariantes da sessão:
um status diferente de IDLE exige homeserver selecionado, e
SYNCING/READY exigem Client Session construída.
"""

from collections.abc import Callable
from typing import Protocol

from fsm.states.status import SESSION_STATES, ClientStatus


class TransitionContext(Protocol):
    """
    Protocolo com o contexto necessário para avaliar guards.

    Implementado pelo estado compartilhado da sessão.
    """

    @property
    def has_homeserver(self) -> bool:
        """Existe homeserver selecionado."""
        ...

    @property
    def has_client(self) -> bool:
        """Existe Client Session construída."""
        ...


class GuardResult:
    """
    Resultado da avaliação de um guard.

    Attributes:
        allowed: Se a transição é permitida
        reason: Motivo do bloqueio (se allowed=False)
    """

    __slots__ = ("allowed", "reason")

    def __init__(self, allowed: bool, reason: str | None = None) -> None:
        self.allowed = allowed
        self.reason = reason

    @classmethod
    def allow(cls) -> "GuardResult":
        """Cria resultado permitindo a transição."""
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "GuardResult":
        """Cria resultado negando a transição."""
        return cls(allowed=False, reason=reason)


Guard = Callable[[ClientStatus, ClientStatus, TransitionContext | None], GuardResult]


def guard_valid_status(
    from_status: ClientStatus,
    to_status: ClientStatus,
    context: TransitionContext | None = None,
) -> GuardResult:
    """Guard: ambos os status devem ser membros do enum."""
    if not isinstance(from_status, ClientStatus):
        return GuardResult.deny(f"Status de origem inválido: {from_status}")

    if not isinstance(to_status, ClientStatus):
        return GuardResult.deny(f"Status de destino inválido: {to_status}")

    return GuardResult.allow()


def guard_same_status(
    from_status: ClientStatus,
    to_status: ClientStatus,
    context: TransitionContext | None = None,
) -> GuardResult:
    """Guard: transições reflexivas não são permitidas."""
    if from_status == to_status:
        return GuardResult.deny(
            f"Transição reflexiva não permitida: {from_status.name} → {to_status.name}"
        )
    return GuardResult.allow()


def guard_session_present(
    from_status: ClientStatus,
    to_status: ClientStatus,
    context: TransitionContext | None = None,
) -> GuardResult:
    """
    Guard: status ativo exige homeserver e, após CONNECTING, Client Session.

    CONNECTING é definido antes da construção do cliente, então exige
    apenas o homeserver selecionado.

    Args:
        from_status: Status de origem
        to_status: Status de destino
        context: Contexto da sessão (None desativa o guard)

    Returns:
        GuardResult indicando se transição é permitida
    """
    if context is None or to_status == ClientStatus.IDLE:
        return GuardResult.allow()

    if not context.has_homeserver:
        return GuardResult.deny(f"{to_status.name} exige homeserver selecionado")

    if to_status in SESSION_STATES and not context.has_client:
        return GuardResult.deny(f"{to_status.name} exige Client Session construída")

    return GuardResult.allow()


# Lista de guards a serem aplicados em ordem
# Todos devem retornar allow() para a transição prosseguir
DEFAULT_GUARDS: list[Guard] = [
    guard_valid_status,
    guard_same_status,
    guard_session_present,
]


def evaluate_guards(
    from_status: ClientStatus,
    to_status: ClientStatus,
    context: TransitionContext | None = None,
    guards: list[Guard] | None = None,
) -> GuardResult:
    """
    Avalia todos os guards para uma transição.

    Args:
        from_status: Status de origem
        to_status: Status de destino
        context: Contexto da sessão para guards de invariantes
        guards: Lista de guards a aplicar (usa DEFAULT_GUARDS se None)

    Returns:
        GuardResult do primeiro guard que negar, ou allow() se todos passarem
    """
    guards_to_apply = guards if guards is not None else DEFAULT_GUARDS

    for guard in guards_to_apply:
        result = guard(from_status, to_status, context)
        if not result.allowed:
            return result

    return GuardResult.allow()
