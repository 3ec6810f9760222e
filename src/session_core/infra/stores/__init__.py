"""Stores — implementações concretas de persistência local.

Módulos disponíveis:
    - memory_store: Key-value em memória (dev/test)
    - file_store: Key-value em arquivo JSON (análogo ao localStorage)
    - redis_store: Key-value em Redis
    - namespaced: View com namespace fixo sobre um backend
    - sync_cache: Cache de sincronização (namespace sync-store)
    - crypto_store: Chaves públicas de dispositivo (namespace crypto-store)
    - factory: Cria os dois stores acima a cada bootstrap
"""

from __future__ import annotations

from session_core.infra.stores.crypto_store import CryptoStore
from session_core.infra.stores.factory import NamespacedStoreFactory
from session_core.infra.stores.file_store import JsonFileKeyValueStore
from session_core.infra.stores.memory_store import MemoryKeyValueStore
from session_core.infra.stores.namespaced import NamespacedKeyValueStore
from session_core.infra.stores.redis_store import RedisKeyValueStore
from session_core.infra.stores.sync_cache import SyncCache

__all__ = [
    "CryptoStore",
    "JsonFileKeyValueStore",
    "MemoryKeyValueStore",
    "NamespacedKeyValueStore",
    "NamespacedStoreFactory",
    "RedisKeyValueStore",
    "SyncCache",
]
