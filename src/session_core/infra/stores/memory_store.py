"""Key-value store em memória — apenas para desenvolvimento e testes.

ATENÇÃO: Sem persistência entre reinícios; o device_id muda a cada processo.
"""

from __future__ import annotations

from session_core.protocols.stores import KeyValueStoreProtocol


class MemoryKeyValueStore(KeyValueStoreProtocol):
    """Store chave → string em memória — apenas para dev/test."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._store: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        self._store[key] = value

    def delete(self, key: str) -> bool:
        if key in self._store:
            del self._store[key]
            return True
        return False

    def snapshot(self) -> dict[str, str]:
        """Retorna cópia do conteúdo (apenas para testes)."""
        return dict(self._store)
