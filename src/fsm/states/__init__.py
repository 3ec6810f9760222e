"""Exports públicos de fsm/states."""

from fsm.states.status import (
    BUSY_STATES,
    DEFAULT_INITIAL_STATUS,
    SESSION_STATES,
    ClientStatus,
    is_busy,
    is_valid_status,
)

__all__ = [
    "BUSY_STATES",
    "DEFAULT_INITIAL_STATUS",
    "SESSION_STATES",
    "ClientStatus",
    "is_busy",
    "is_valid_status",
]
