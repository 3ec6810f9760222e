"""
Exports públicos do módulo fsm/manager.

Máquina de estados (StatusMachine) do ciclo de vida do cliente.
"""

from fsm.manager.machine import (
    StatusMachine,
    StatusObserver,
    StatusSubscription,
)

__all__ = [
    "StatusMachine",
    "StatusObserver",
    "StatusSubscription",
]
