"""Factories de stores e serviços baseadas em configuração."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from api.connectors.matrix import MatrixClientFactory
from config.settings import (
    ClientSettings,
    StorageSettings,
    get_base_settings,
    get_client_settings,
    get_storage_settings,
)
from session_core.bootstrap.clients import create_redis_client
from session_core.domain.homeserver import Homeserver
from session_core.identity import IdentityStore
from session_core.infra.stores import (
    JsonFileKeyValueStore,
    MemoryKeyValueStore,
    NamespacedStoreFactory,
    RedisKeyValueStore,
)
from session_core.services import (
    DeviceVerificationCheck,
    HomeserverRegistry,
    HomeserverValidator,
    LoginFlowDiscovery,
    SessionBootstrapper,
    SessionResumer,
)
from session_core.sessions.manager import MatrixSessionManager
from session_core.sessions.state import ClientSessionState

if TYPE_CHECKING:
    from session_core.protocols.protocol_client import ClientFactoryProtocol
    from session_core.protocols.stores import KeyValueStoreProtocol

logger = logging.getLogger(__name__)


def create_key_value_store(settings: StorageSettings | None = None) -> KeyValueStoreProtocol:
    """Cria o key-value store durável conforme IDENTITY_STORE_BACKEND."""
    settings = settings or get_storage_settings()
    backend = settings.backend

    if backend == "redis":
        store: KeyValueStoreProtocol = RedisKeyValueStore(create_redis_client(settings.redis_url))
    elif backend == "file":
        store = JsonFileKeyValueStore(settings.state_path)
    elif backend == "memory":
        if not get_base_settings().is_development:
            logger.warning("memory_store_in_non_dev", extra={"backend": "memory"})
        store = MemoryKeyValueStore()
    else:
        msg = f"IDENTITY_STORE_BACKEND inválido: {backend}"
        raise ValueError(msg)

    logger.info("identity_store_created", extra={"backend": backend})
    return store


def default_homeservers(settings: ClientSettings) -> tuple[Homeserver, ...]:
    return (
        Homeserver(
            name=settings.default_homeserver_name,
            url=settings.default_homeserver_url,
            description=settings.default_homeserver_description,
            featured=True,
        ),
    )


def build_session_manager(
    backend: KeyValueStoreProtocol | None = None,
    client_factory: ClientFactoryProtocol | None = None,
    client_settings: ClientSettings | None = None,
    storage_settings: StorageSettings | None = None,
) -> MatrixSessionManager:
    """Monta a façade com todas as dependências concretas.

    Args:
        backend: Key-value store (default: conforme StorageSettings)
        client_factory: Fábrica de clientes (default: MatrixClientFactory)
        client_settings: Settings do cliente (default: env)
        storage_settings: Settings de armazenamento (default: env)
    """
    client_settings = client_settings or get_client_settings()
    storage_settings = storage_settings or get_storage_settings()
    backend = backend if backend is not None else create_key_value_store(storage_settings)
    client_factory = client_factory or MatrixClientFactory()

    identity = IdentityStore(backend, default_homeservers(client_settings))
    state = ClientSessionState(identity)
    store_factory = NamespacedStoreFactory(
        backend,
        sync_namespace=storage_settings.sync_namespace,
        crypto_namespace=storage_settings.crypto_namespace,
    )
    validator = HomeserverValidator(client_factory, client_settings.validation_timeout_seconds)
    resumer = SessionResumer(state, client_settings.request_timeout_seconds)

    return MatrixSessionManager(
        state,
        registry=HomeserverRegistry(identity),
        validator=validator,
        bootstrapper=SessionBootstrapper(
            state,
            client_factory,
            store_factory,
            validator,
            resumer,
            settings=client_settings,
        ),
        resumer=resumer,
        login_flows=LoginFlowDiscovery(state, client_settings.request_timeout_seconds),
        verification=DeviceVerificationCheck(state),
        store_factory=store_factory,
    )
