"""
Módulo FSM — Máquina de Estados do ciclo de vida do cliente.

Implementa a FSM determinística que governa o status da conexão com o
homeserver: idle → connecting → syncing → ready.

Estrutura:
    - states/: Definições dos status (ClientStatus enum)
    - transitions/: Regras de transição (VALID_TRANSITIONS)
    - rules/: Guards e invariantes
    - manager/: Máquina de estados (StatusMachine) com observers
    - types/: Tipos de dados (StatusTransition, TransitionResult)
"""

# Manager
from fsm.manager import (
    StatusMachine,
    StatusObserver,
    StatusSubscription,
)

# Guards/Rules
from fsm.rules import (
    GuardResult,
    TransitionContext,
    evaluate_guards,
)

# Estados
from fsm.states import (
    BUSY_STATES,
    DEFAULT_INITIAL_STATUS,
    SESSION_STATES,
    ClientStatus,
    is_busy,
    is_valid_status,
)

# Transições
from fsm.transitions import (
    VALID_TRANSITIONS,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)

# Types
from fsm.types import (
    StatusTransition,
    TransitionResult,
)

__all__ = [
    "BUSY_STATES",
    "DEFAULT_INITIAL_STATUS",
    "SESSION_STATES",
    "VALID_TRANSITIONS",
    "ClientStatus",
    "GuardResult",
    "StatusMachine",
    "StatusObserver",
    "StatusSubscription",
    "StatusTransition",
    "TransitionContext",
    "TransitionResult",
    "evaluate_guards",
    "get_valid_targets",
    "is_busy",
    "is_transition_valid",
    "is_valid_status",
    "validate_transition_map",
]
