"""
Máquina de estados (StatusMachine) do ciclo de vida do cliente.

Mantém o status atual, valida transições contra o grafo e os guards,
guarda histórico rastreável e notifica observers a cada mudança.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from fsm.rules.guards import GuardResult, TransitionContext, evaluate_guards
from fsm.states.status import DEFAULT_INITIAL_STATUS, ClientStatus, is_busy
from fsm.transitions.rules import get_valid_targets, is_transition_valid
from fsm.types.transition import StatusTransition, TransitionResult

logger = logging.getLogger(__name__)

StatusObserver = Callable[[StatusTransition], None]


class StatusSubscription:
    """Handle de inscrição de um observer; cancel() é idempotente."""

    __slots__ = ("_machine", "_observer")

    def __init__(self, machine: StatusMachine, observer: StatusObserver) -> None:
        self._machine: StatusMachine | None = machine
        self._observer = observer

    @property
    def active(self) -> bool:
        """Se o observer ainda recebe notificações."""
        return self._machine is not None

    def cancel(self) -> None:
        """Remove o observer da máquina."""
        if self._machine is None:
            return
        self._machine._detach(self._observer)
        self._machine = None


class StatusMachine:
    """
    Máquina de estados do status do cliente.

    Attributes:
        current: Status atual
        history: Histórico de transições realizadas
    """

    __slots__ = ("_current", "_history", "_observers")

    def __init__(self, initial_status: ClientStatus | None = None) -> None:
        """
        Inicializa a máquina de estados.

        Args:
            initial_status: Status inicial (usa DEFAULT_INITIAL_STATUS se None)
        """
        self._current = initial_status or DEFAULT_INITIAL_STATUS
        self._history: list[StatusTransition] = []
        self._observers: list[StatusObserver] = []

    @property
    def current(self) -> ClientStatus:
        """Status atual da máquina."""
        return self._current

    @property
    def history(self) -> list[StatusTransition]:
        """Histórico de transições (cópia para evitar mutação externa)."""
        return list(self._history)

    @property
    def is_busy(self) -> bool:
        """Se há bootstrap/resume em andamento (CONNECTING ou SYNCING)."""
        return is_busy(self._current)

    def get_valid_targets(self) -> frozenset[ClientStatus]:
        """Retorna status de destino válidos a partir do status atual."""
        return get_valid_targets(self._current)

    def can_transition_to(
        self,
        target: ClientStatus,
        context: TransitionContext | None = None,
    ) -> bool:
        """Verifica se pode transitar para o status alvo."""
        if not is_transition_valid(self._current, target):
            return False
        return evaluate_guards(self._current, target, context).allowed

    def transition(
        self,
        target: ClientStatus,
        trigger: str,
        metadata: dict[str, Any] | None = None,
        context: TransitionContext | None = None,
    ) -> TransitionResult:
        """
        Tenta realizar uma transição de status.

        Args:
            target: Status de destino
            trigger: Identificador do gatilho (ex: 'whoami_confirmed')
            metadata: Dados adicionais para auditoria
            context: Contexto da sessão para os guards

        Returns:
            TransitionResult com sucesso/falha e dados da transição
        """
        if not is_transition_valid(self._current, target):
            return TransitionResult(
                success=False,
                error_reason=(
                    f"Transição inválida: {self._current.name} → {target.name}"
                ),
            )

        guard_result: GuardResult = evaluate_guards(self._current, target, context)
        if not guard_result.allowed:
            return TransitionResult(
                success=False,
                error_reason=guard_result.reason,
            )

        return TransitionResult(
            success=True,
            transition=self._apply(target, trigger, metadata),
        )

    def reset(self, trigger: str, metadata: dict[str, Any] | None = None) -> StatusTransition | None:
        """
        Volta incondicionalmente para IDLE.

        Idempotente: se já estiver em IDLE, nada é registrado.

        Returns:
            Transição registrada ou None se já estava em IDLE
        """
        if self._current == ClientStatus.IDLE:
            return None
        return self._apply(ClientStatus.IDLE, trigger, metadata)

    def subscribe(self, observer: StatusObserver) -> StatusSubscription:
        """Inscreve observer para receber cada transição efetivada."""
        self._observers.append(observer)
        return StatusSubscription(self, observer)

    def get_history_summary(self) -> list[dict[str, Any]]:
        """Retorna histórico em formato seguro para logs."""
        return [t.to_log_dict() for t in self._history]

    def _detach(self, observer: StatusObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _apply(
        self,
        target: ClientStatus,
        trigger: str,
        metadata: dict[str, Any] | None,
    ) -> StatusTransition:
        transition = StatusTransition(
            from_status=self._current,
            to_status=target,
            trigger=trigger,
            metadata=metadata or {},
        )
        self._current = target
        self._history.append(transition)
        logger.info("client_status_changed", extra=transition.to_log_dict())
        self._notify(transition)
        return transition

    def _notify(self, transition: StatusTransition) -> None:
        # Cópia: observers podem se desinscrever durante a notificação
        for observer in list(self._observers):
            try:
                observer(transition)
            except Exception:
                logger.exception(
                    "status_observer_failed",
                    extra={"to_status": transition.to_status.value},
                )
