"""Key-value store em Redis.

Permite compartilhar a identidade persistida entre reinícios de
contêiner. Falhas de conexão viram StoreUnavailableError.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from session_core.protocols.stores import KeyValueStoreProtocol
from utils.errors import StoreUnavailableError

if TYPE_CHECKING:
    from redis import Redis

logger = logging.getLogger(__name__)

# Prefixo para namespace das chaves do cliente
KEY_PREFIX = "homeserver-session:"


class RedisKeyValueStore(KeyValueStoreProtocol):
    """Store chave → string usando Redis.

    Args:
        redis_client: Cliente Redis síncrono
        prefix: Prefixo aplicado a todas as chaves
    """

    def __init__(self, redis_client: Redis[bytes], prefix: str = KEY_PREFIX) -> None:
        self._redis = redis_client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> str | None:
        try:
            data = self._redis.get(self._key(key))
        except (RedisConnectionError, RedisTimeoutError) as exc:
            raise StoreUnavailableError("redis_get_failed") from exc
        if data is None:
            return None
        return data.decode("utf-8") if isinstance(data, bytes) else str(data)

    def set(self, key: str, value: str) -> None:
        try:
            self._redis.set(self._key(key), value)
        except (RedisConnectionError, RedisTimeoutError) as exc:
            raise StoreUnavailableError("redis_set_failed") from exc
        logger.debug("kv_saved", extra={"key": key})

    def delete(self, key: str) -> bool:
        try:
            return bool(self._redis.delete(self._key(key)))
        except (RedisConnectionError, RedisTimeoutError) as exc:
            raise StoreUnavailableError("redis_delete_failed") from exc
