"""Fábrica dos stores locais criados a cada bootstrap."""

from __future__ import annotations

from session_core.infra.stores.crypto_store import CryptoStore
from session_core.infra.stores.namespaced import NamespacedKeyValueStore
from session_core.infra.stores.sync_cache import SyncCache
from session_core.protocols.stores import KeyValueStoreProtocol

DEFAULT_SYNC_NAMESPACE = "sync-store"
DEFAULT_CRYPTO_NAMESPACE = "crypto-store"


class NamespacedStoreFactory:
    """Cria SyncCache e CryptoStore em namespaces fixos de um backend."""

    def __init__(
        self,
        backend: KeyValueStoreProtocol,
        sync_namespace: str = DEFAULT_SYNC_NAMESPACE,
        crypto_namespace: str = DEFAULT_CRYPTO_NAMESPACE,
    ) -> None:
        if sync_namespace == crypto_namespace:
            raise ValueError("sync e crypto precisam de namespaces distintos")
        self._backend = backend
        self._sync_namespace = sync_namespace
        self._crypto_namespace = crypto_namespace

    def create_stores(self) -> tuple[SyncCache, CryptoStore]:
        sync_cache = SyncCache(NamespacedKeyValueStore(self._backend, self._sync_namespace))
        crypto_store = CryptoStore(NamespacedKeyValueStore(self._backend, self._crypto_namespace))
        return sync_cache, crypto_store

    def clear(self) -> None:
        sync_cache, crypto_store = self.create_stores()
        sync_cache.clear()
        crypto_store.clear()
