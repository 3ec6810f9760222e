"""Fixtures compartilhadas dos testes do session_core."""

from __future__ import annotations

import pytest

from config.settings import ClientSettings, StorageSettings
from session_core.bootstrap.dependencies import build_session_manager, default_homeservers
from session_core.identity import IdentityStore
from session_core.infra.stores import MemoryKeyValueStore
from session_core.sessions.manager import MatrixSessionManager
from session_core.sessions.state import ClientSessionState
from tests.fakes.fake_protocol_client import FakeClientFactory

TEST_CLIENT_SETTINGS = ClientSettings(
    validation_timeout_seconds=0.5,
    request_timeout_seconds=0.5,
)


@pytest.fixture
def backend() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def identity(backend: MemoryKeyValueStore) -> IdentityStore:
    return IdentityStore(backend, default_homeservers(TEST_CLIENT_SETTINGS))


@pytest.fixture
def state(identity: IdentityStore) -> ClientSessionState:
    return ClientSessionState(identity)


@pytest.fixture
def factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
def manager(backend: MemoryKeyValueStore, factory: FakeClientFactory) -> MatrixSessionManager:
    return build_session_manager(
        backend=backend,
        client_factory=factory,
        client_settings=TEST_CLIENT_SETTINGS,
        storage_settings=StorageSettings(),
    )
