"""Protocolos de persistência local (key-value, cache de sync, chaves)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol


class KeyValueStoreProtocol(ABC):
    """Contrato mínimo de armazenamento durável chave → string.

    Equivalente a um localStorage: valores são strings opacas e a
    serialização fica a cargo de quem grava.
    """

    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def delete(self, key: str) -> bool: ...


class SyncCacheProtocol(Protocol):
    """Cache persistente de sincronização usado pelo cliente."""

    @property
    def sync_token(self) -> str | None: ...

    async def startup(self) -> None:
        """Carrega o estado persistido antes do primeiro /sync."""
        ...

    def save_sync_token(self, token: str) -> None: ...

    def clear(self) -> None: ...


class CryptoStoreProtocol(Protocol):
    """Store das chaves públicas e do último estado de verificação."""

    def load_device_keys(self, user_id: str) -> dict[str, Any] | None: ...

    def save_device_keys(self, user_id: str, keys: dict[str, Any]) -> None: ...

    def clear(self) -> None: ...


class StoreFactoryProtocol(Protocol):
    """Constrói os stores locais de cada bootstrap (namespaces fixos)."""

    def create_stores(self) -> tuple[SyncCacheProtocol, CryptoStoreProtocol]: ...

    def clear(self) -> None:
        """Apaga o conteúdo dos namespaces (logout)."""
        ...
