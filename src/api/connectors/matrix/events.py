"""Emissor dos estados do stream de sincronização."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from session_core.protocols.models import SyncState
    from session_core.protocols.protocol_client import SyncListener

logger = logging.getLogger(__name__)


class ListenerSubscription:
    """Handle devolvido por add_listener(); cancel() é idempotente."""

    __slots__ = ("_active", "_emitter", "_listener")

    def __init__(self, emitter: SyncEventEmitter, listener: SyncListener) -> None:
        self._emitter = emitter
        self._listener = listener
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._emitter.remove_listener(self._listener)


class SyncEventEmitter:
    """Entrega (estado, estado_anterior) aos listeners inscritos."""

    def __init__(self) -> None:
        self._listeners: list[SyncListener] = []
        self._state: SyncState | None = None

    @property
    def state(self) -> SyncState | None:
        return self._state

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def add_listener(self, listener: SyncListener) -> ListenerSubscription:
        self._listeners.append(listener)
        return ListenerSubscription(self, listener)

    def remove_listener(self, listener: SyncListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, state: SyncState) -> None:
        previous = self._state
        self._state = state
        # cópia: listeners podem se desinscrever durante a entrega
        for listener in list(self._listeners):
            try:
                listener(state, previous)
            except Exception:
                logger.exception("sync_listener_failed", extra={"sync_state": state.value})
