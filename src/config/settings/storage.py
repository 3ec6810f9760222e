"""Settings de persistência local.

Backend do Identity Store e namespaces dos stores por bootstrap.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

IdentityStoreBackend = Literal["memory", "file", "redis"]

DEFAULT_SYNC_NAMESPACE = "sync-store"
DEFAULT_CRYPTO_NAMESPACE = "crypto-store"


@dataclass(frozen=True)
class StorageSettings:
    """Configurações de armazenamento.

    Attributes:
        backend: Backend do key-value store (memory|file|redis)
        state_path: Arquivo JSON usado pelo backend file
        redis_url: URL de conexão Redis (backend redis)
        sync_namespace: Namespace do cache de sincronização
        crypto_namespace: Namespace do store de chaves
    """

    backend: IdentityStoreBackend = "memory"
    state_path: str = ".homeserver-session/state.json"
    redis_url: str = ""
    sync_namespace: str = DEFAULT_SYNC_NAMESPACE
    crypto_namespace: str = DEFAULT_CRYPTO_NAMESPACE

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações de armazenamento.

        Args:
            base: BaseSettings para verificar ambiente.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.backend not in ("memory", "file", "redis"):
            errors.append(f"IDENTITY_STORE_BACKEND inválido: {self.backend}")

        if self.backend == "memory" and not base.is_development:
            errors.append("IDENTITY_STORE_BACKEND=memory proibido em staging/production")

        if self.backend == "file" and not self.state_path:
            errors.append("IDENTITY_STORE_PATH obrigatório para backend file")

        if self.backend == "redis" and not self.redis_url:
            errors.append("REDIS_URL obrigatório para backend redis")

        if self.sync_namespace == self.crypto_namespace:
            errors.append("SYNC_STORE_NAMESPACE e CRYPTO_STORE_NAMESPACE devem diferir")

        return errors


def _load_storage_from_env() -> StorageSettings:
    """Carrega StorageSettings de variáveis de ambiente."""
    backend_str = os.getenv("IDENTITY_STORE_BACKEND", "memory").lower()
    backend: IdentityStoreBackend = (
        backend_str if backend_str in ("memory", "file", "redis") else "memory"
    )
    return StorageSettings(
        backend=backend,
        state_path=os.getenv("IDENTITY_STORE_PATH", ".homeserver-session/state.json"),
        redis_url=os.getenv("REDIS_URL", ""),
        sync_namespace=os.getenv("SYNC_STORE_NAMESPACE", DEFAULT_SYNC_NAMESPACE),
        crypto_namespace=os.getenv("CRYPTO_STORE_NAMESPACE", DEFAULT_CRYPTO_NAMESPACE),
    )


@lru_cache(maxsize=1)
def get_storage_settings() -> StorageSettings:
    """Retorna instância cacheada de StorageSettings."""
    return _load_storage_from_env()
