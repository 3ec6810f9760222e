"""Cache persistente de sincronização.

Guarda o último `next_batch` para que o primeiro /sync após o resume
seja incremental em vez de uma sincronização inicial completa.
"""

from __future__ import annotations

import logging

from session_core.protocols.stores import KeyValueStoreProtocol

logger = logging.getLogger(__name__)

SYNC_TOKEN_KEY = "next_batch"


class SyncCache:
    """Cache de sincronização sobre um key-value store com namespace."""

    def __init__(self, backend: KeyValueStoreProtocol) -> None:
        self._backend = backend
        self._sync_token: str | None = None
        self._started = False

    @property
    def sync_token(self) -> str | None:
        return self._sync_token

    @property
    def started(self) -> bool:
        return self._started

    async def startup(self) -> None:
        """Warm-up: carrega o token persistido."""
        self._sync_token = self._backend.get(SYNC_TOKEN_KEY)
        self._started = True
        logger.debug("sync_cache_warmed", extra={"has_token": self._sync_token is not None})

    def save_sync_token(self, token: str) -> None:
        self._sync_token = token
        self._backend.set(SYNC_TOKEN_KEY, token)

    def clear(self) -> None:
        self._sync_token = None
        self._backend.delete(SYNC_TOKEN_KEY)
