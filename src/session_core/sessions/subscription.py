"""Observer de disparo único sobre o stream de sincronização.

Dispara o callback na primeira vez que o stream reporta o estado alvo
e se desinscreve em seguida. Eventos repetidos (replay do stream) não
geram transições duplicadas.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from session_core.protocols.models import SyncState

if TYPE_CHECKING:
    from collections.abc import Callable

    from session_core.protocols.protocol_client import ProtocolClientProtocol


class OneShotSyncObserver:
    """Inscrição que se cancela após o primeiro evento `target`."""

    __slots__ = ("_callback", "_fired", "_subscription", "_target")

    def __init__(
        self,
        client: ProtocolClientProtocol,
        callback: Callable[[], None],
        target: SyncState = SyncState.PREPARED,
    ) -> None:
        self._callback = callback
        self._target = target
        self._fired = False
        self._subscription = client.add_sync_listener(self._on_sync)

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def active(self) -> bool:
        return self._subscription.active

    def cancel(self) -> None:
        self._subscription.cancel()

    def _on_sync(self, state: SyncState, previous: SyncState | None) -> None:
        if self._fired or state != self._target:
            return
        self._fired = True
        self.cancel()
        self._callback()
