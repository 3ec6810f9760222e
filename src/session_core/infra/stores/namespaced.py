"""View de um key-value store restrita a um namespace fixo."""

from __future__ import annotations

from session_core.protocols.stores import KeyValueStoreProtocol


class NamespacedKeyValueStore(KeyValueStoreProtocol):
    """Prefixa as chaves com `namespace:` sobre um backend compartilhado."""

    def __init__(self, backend: KeyValueStoreProtocol, namespace: str) -> None:
        if not namespace:
            raise ValueError("namespace não pode ser vazio")
        self._backend = backend
        self._namespace = namespace

    @property
    def namespace(self) -> str:
        return self._namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get(self, key: str) -> str | None:
        return self._backend.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        self._backend.set(self._key(key), value)

    def delete(self, key: str) -> bool:
        return self._backend.delete(self._key(key))
