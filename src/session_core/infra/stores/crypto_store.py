"""Store das chaves públicas de dispositivo e cross-signing.

Guarda a última resposta de /keys/query por usuário. Nenhuma chave
privada passa por aqui.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from session_core.protocols.stores import KeyValueStoreProtocol

logger = logging.getLogger(__name__)

USERS_INDEX_KEY = "users"


class CryptoStore:
    """Store de chaves públicas sobre um key-value store com namespace."""

    def __init__(self, backend: KeyValueStoreProtocol) -> None:
        self._backend = backend

    def load_device_keys(self, user_id: str) -> dict[str, Any] | None:
        raw = self._backend.get(f"keys:{user_id}")
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("crypto_store_entry_corrupted", extra={"user_id": user_id})
            return None
        return data if isinstance(data, dict) else None

    def save_device_keys(self, user_id: str, keys: dict[str, Any]) -> None:
        self._backend.set(f"keys:{user_id}", json.dumps(keys, sort_keys=True))
        users = set(self._users())
        if user_id not in users:
            users.add(user_id)
            self._backend.set(USERS_INDEX_KEY, json.dumps(sorted(users)))

    def clear(self) -> None:
        for user_id in self._users():
            self._backend.delete(f"keys:{user_id}")
        self._backend.delete(USERS_INDEX_KEY)

    def _users(self) -> list[str]:
        raw = self._backend.get(USERS_INDEX_KEY)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            return []
        return [str(u) for u in data] if isinstance(data, list) else []
